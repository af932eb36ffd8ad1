"""Log block rendering and handler setup.

Every event is logged as a small titled block::

    Track Compiled
    --------------
        ID           : 834
        Exported To  : Pop/834_OSHAMASCRAMBLE

Sections render as bulleted lists under a ``Heading:`` line.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from textwrap import wrap
from typing import Union

DEFAULT_WRAP_WIDTH = 110
DEFAULT_LABEL_WIDTH = 22
DEFAULT_INDENT = "    "
MIN_LABEL_WIDTH = 8

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s\n%(message)s\n"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

Fields = Union[Mapping[str, object], Sequence[tuple[str, object]]]


def _pairs(fields: Fields) -> list[tuple[str, object]]:
    return list(fields.items()) if isinstance(fields, Mapping) else list(fields)


def _text_of(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, set)):
        return ", ".join(_text_of(item) for item in value)
    return str(value).strip()


def _wrapped(text: str, width: int) -> list[str]:
    """Wrap every line of ``text``; the result always holds at least one line."""
    pieces = [piece for line in text.splitlines() for piece in (wrap(line, width=width) or [""])]
    return pieces or [""]


class LogBlockBuilder:
    def __init__(
        self,
        title: str,
        *,
        wrap_width: int = DEFAULT_WRAP_WIDTH,
        label_width: int = DEFAULT_LABEL_WIDTH,
        indent: str = DEFAULT_INDENT,
        pad_top: bool = True,
    ) -> None:
        self.title = title
        self.wrap_width = wrap_width
        self.label_width = label_width
        self.indent = indent
        self.lines: list[str] = ([""] if pad_top else []) + [title, "-" * len(title)]

    def add_blank_line(self) -> None:
        if self.lines and self.lines[-1] != "":
            self.lines.append("")

    def _emit(self, lead: str, hanging: str, text: str, width: int) -> None:
        first, *rest = _wrapped(text, width)
        self.lines.append(lead + first)
        self.lines.extend(hanging + line for line in rest)

    def add_fields(self, fields: Fields | None) -> None:
        pairs = _pairs(fields) if fields else []
        if not pairs:
            return
        label_width = max(min(max(len(str(key)) for key, _ in pairs), self.label_width), MIN_LABEL_WIDTH)
        value_width = max(self.wrap_width - len(self.indent) - label_width - 4, 32)
        hanging = self.indent + " " * (label_width + 2)
        for key, value in pairs:
            self._emit(f"{self.indent}{str(key):<{label_width}}: ", hanging, _text_of(value), value_width)

    def add_section(self, heading: str, items: Iterable[str], *, empty_label: str = "(none)") -> None:
        self.add_blank_line()
        self.lines.append(f"{heading}:")
        entries = [item for item in items if item is not None]
        if not entries:
            self.lines.append(self.indent + empty_label)
            return
        width = max(self.wrap_width - len(self.indent) - 2, 24)
        for entry in entries:
            self._emit(f"{self.indent}- ", f"{self.indent}  ", _text_of(entry), width)

    def render(self) -> str:
        return "\n".join(self.lines).rstrip()


def render_fields_block(title: str, fields: Fields, *, pad_top: bool = True) -> str:
    builder = LogBlockBuilder(title, pad_top=pad_top)
    builder.add_fields(fields)
    return builder.render()


def render_section_block(
    title: str,
    sections: Sequence[tuple[str, Iterable[str]]],
    *,
    pad_top: bool = True,
) -> str:
    builder = LogBlockBuilder(title, pad_top=pad_top)
    for heading, items in sections:
        builder.add_section(heading, items)
    return builder.render()



def _coerce_level(level: int | str | None, default: int) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(
    level: int | str | None = logging.INFO,
    *,
    console_level: int | str | None = None,
    log_file: Path | None = None,
) -> None:
    """Install console and optional file handlers on the root logger.

    The root logger runs at the lowest of the requested levels so that a
    verbose log file can sit next to a quieter console.
    """
    file_level = _coerce_level(level, logging.INFO)
    stream_level = _coerce_level(console_level, file_level)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(stream_level)
    console.setFormatter(formatter)
    root.addHandler(console)

    effective = stream_level
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        effective = min(effective, file_level)

    root.setLevel(effective)
