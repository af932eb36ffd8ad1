"""Chart compilation seam.

The chart transcoding engine (format conversion, rotation, tick shift) is an
external collaborator. The pipeline only hands it a track folder, an output
directory and the pass-through ``CompileOptions``, and keeps the one-line
summary it returns. ``PassthroughChartCompiler`` is the built-in stand-in: it
copies the chart sources verbatim and writes a ``maidata.txt`` header so a
run produces a usable layout without a transcoder installed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

from .logging_utils import render_fields_block
from .models import TrackMetadata
from .utils import copy_file, ensure_directory

LOGGER = logging.getLogger(__name__)

TARGET_FORMATS = ("Simai", "SimaiFes", "Ma2_103", "Ma2_104")
ROTATIONS = (
    "Clockwise90",
    "Clockwise180",
    "Counterclockwise90",
    "Counterclockwise180",
    "UpsideDown",
    "LeftToRight",
)
TICKS_PER_MEASURE = 384
DEFAULT_CHART_EXTENSIONS = (".ma2",)
MAIDATA_FILENAME = "maidata.txt"


def _match_choice(value: str, choices: Sequence[str], label: str) -> str:
    lookup = {choice.lower(): choice for choice in choices}
    matched = lookup.get(value.strip().lower())
    if matched is None:
        raise ValueError(f"Unknown {label} '{value}' (expected one of: {', '.join(choices)})")
    return matched


@dataclass(frozen=True)
class CompileOptions:
    """Options forwarded untouched to the chart compiler.

    Attributes:
        target_format: Output chart format, one of TARGET_FORMATS (None keeps the compiler default)
        rotation: Rotation transform, one of ROTATIONS (None for no rotation)
        shift_tick: Overall tick shift; 384 ticks make one measure
        strict_decimal: Rate output levels with decimals
    """

    target_format: Optional[str] = None
    rotation: Optional[str] = None
    shift_tick: int = 0
    strict_decimal: bool = False

    def __post_init__(self) -> None:
        if self.target_format is not None:
            object.__setattr__(self, "target_format", _match_choice(self.target_format, TARGET_FORMATS, "target format"))
        if self.rotation is not None:
            object.__setattr__(self, "rotation", _match_choice(self.rotation, ROTATIONS, "rotation"))
        if isinstance(self.shift_tick, bool) or not isinstance(self.shift_tick, int):
            raise ValueError(f"shift_tick must be an integer, got {self.shift_tick!r}")


class ChartCompiler(Protocol):
    def compile(
        self,
        source_dir: Path,
        output_dir: Path,
        metadata: TrackMetadata,
        options: CompileOptions,
    ) -> str:
        """Compile the charts of ``source_dir`` into ``output_dir`` and return a one-line summary."""


def find_chart_sources(track_dir: Path, extensions: Sequence[str] = DEFAULT_CHART_EXTENSIONS) -> list[Path]:
    suffixes = {extension.lower() for extension in extensions}
    return sorted(path for path in track_dir.iterdir() if path.is_file() and path.suffix.lower() in suffixes)


def one_line_summary(metadata: TrackMetadata, chart_count: int) -> str:
    level = metadata.symbolic_level or "?"
    return (
        f"{metadata.track_id}\t{metadata.name}\t{metadata.genre}\t{metadata.version}"
        f"\tLv.{level}\t{chart_count} chart(s)"
    )


class PassthroughChartCompiler:
    """Copy chart sources as-is and write a ``maidata.txt`` metadata header."""

    def __init__(self, chart_extensions: Sequence[str] = DEFAULT_CHART_EXTENSIONS) -> None:
        self.chart_extensions = tuple(chart_extensions)

    def compile(
        self,
        source_dir: Path,
        output_dir: Path,
        metadata: TrackMetadata,
        options: CompileOptions,
    ) -> str:
        ensure_directory(output_dir)
        charts = find_chart_sources(source_dir, self.chart_extensions)
        for chart in charts:
            copy_file(chart, output_dir / chart.name)

        header = [
            f"&title={metadata.name}",
            f"&artist={metadata.composer}",
            f"&wholebpm={metadata.bpm}",
            f"&shortid={metadata.track_id}",
            f"&genre={metadata.genre}",
            f"&version={metadata.version}",
            f"&lv={metadata.symbolic_level}",
        ]
        if options.target_format:
            header.append(f"&format={options.target_format}")
        if options.rotation:
            header.append(f"&rotate={options.rotation}")
        if options.shift_tick:
            header.append(f"&shift={options.shift_tick}")
        if options.strict_decimal:
            header.append("&decimal=true")
        for chart in charts:
            header.append(f"&chart={chart.name}")

        maidata = output_dir / MAIDATA_FILENAME
        maidata.write_text("\n".join(header) + "\n", encoding="utf-8")
        LOGGER.debug(
            render_fields_block(
                "Wrote Chart Header",
                {"Track": metadata.track_id, "Path": maidata, "Charts": len(charts)},
            )
        )
        return one_line_summary(metadata, len(charts))
