from __future__ import annotations

import os
import re
import shutil
import zipfile
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

_ENV_BOOLEANS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}

# Separators, control characters and the characters Windows rejects in names
_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_RESERVED_NAMES = frozenset({"", ".", ".."})


def sanitize_component(component: str, replacement: str = "_") -> str:
    """Make ``component`` safe as a single path segment.

    Unsafe characters become ``replacement`` (runs collapse to one), and
    leading/trailing replacements and trailing dots or spaces are dropped.
    """
    cleaned = _UNSAFE_CHARS.sub(replacement, component.strip())
    cleaned = re.sub(f"(?:{re.escape(replacement)})+", replacement, cleaned)
    cleaned = cleaned.strip(replacement).rstrip(". ")
    return "untitled" if cleaned in _RESERVED_NAMES else cleaned


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def expand_env(value: Any) -> Any:
    """Expand ``$VAR`` references in every string of a nested YAML structure."""
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    return os.path.expandvars(value) if isinstance(value, str) else value


def load_yaml_file(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Top level of {path} must be a mapping")
    return expand_env(data)


def copy_file(source: Path, destination: Path) -> bool:
    """Copy ``source`` to ``destination`` unless the destination already exists.

    Returns True when a copy was made.
    """
    ensure_directory(destination.parent)
    if destination.exists():
        return False
    shutil.copyfile(source, destination)
    return True


def archive_directory(directory: Path) -> Path:
    """Zip ``directory`` into a sibling ``<name>.zip`` and delete the directory."""
    archive_path = directory.with_name(f"{directory.name}.zip")
    archive_path.unlink(missing_ok=True)
    members = sorted(path for path in directory.rglob("*") if path.is_file())
    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as archive:
        for member in members:
            archive.write(member, arcname=member.relative_to(directory).as_posix())
    shutil.rmtree(directory)
    return archive_path


def replace_directory(source: Path, target: Path) -> Path:
    """Rename ``source`` to ``target``, discarding a stale ``target`` first."""
    if target.exists():
        shutil.rmtree(target)
    return source.rename(target)


def parse_env_bool(value: Optional[str]) -> Optional[bool]:
    """Read ``1/0``, ``true/false``, ``yes/no`` or ``on/off``; anything else is None."""
    if value is None:
        return None
    return _ENV_BOOLEANS.get(value.strip().lower())


def env_bool(name: str) -> Optional[bool]:
    return parse_env_bool(os.getenv(name))


def env_str(name: str) -> Optional[str]:
    """Environment value with surrounding whitespace removed; blank counts as unset."""
    return (os.getenv(name) or "").strip() or None
