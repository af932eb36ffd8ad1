"""Track metadata sources.

``TrackMetadataSource`` is the seam the pipeline reads metadata through.
``MusicXmlMetadataSource`` reads the ``Music.xml`` file shipped in each
track folder of the game data::

    <MusicData>
      <name><id>8</id><str>True Love Song</str></name>
      <sortName>TRUELOVESONG</sortName>
      <artistName><str>Kai</str></artistName>
      <genreName><str>maimai</str></genreName>
      <bpm>150</bpm>
      <version>10000</version>
      <AddVersion><str>maimai</str></AddVersion>
      <utageKanjiName />
      <notesData>
        <Notes><level>3</level><levelDecimal>0</levelDecimal><isEnable>true</isEnable></Notes>
        ...
      </notesData>
    </MusicData>
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Protocol

from .errors import MetadataError
from .models import DELUXE_ID_THRESHOLD, SPECIAL_ID_THRESHOLD, TrackMetadata

METADATA_FILENAME = "Music.xml"
MASTER_CHART_INDEX = 3
PLUS_LEVEL_DECIMAL = 7


class TrackMetadataSource(Protocol):
    metadata_filename: str

    def load(self, track_dir: Path) -> TrackMetadata:
        """Read the metadata of the track stored in ``track_dir``."""


def _text(element: Optional[ET.Element], path: str, default: str = "") -> str:
    if element is None:
        return default
    found = element.find(path)
    if found is None or found.text is None:
        return default
    return found.text.strip()


def _labelled(root: ET.Element, tag: str) -> str:
    """Return the ``<str>`` label of a ``<tag><id/><str/></tag>`` pair, or the tag's own text."""
    label = _text(root, f"{tag}/str")
    return label or _text(root, tag)


def _symbolic_level(root: ET.Element) -> str:
    enabled: list[tuple[int, int]] = []
    for index, notes in enumerate(root.findall("notesData/Notes")):
        if _text(notes, "isEnable", "true").lower() != "true":
            continue
        try:
            level = int(_text(notes, "level", "0"))
            decimal = int(_text(notes, "levelDecimal", "0"))
        except ValueError:
            continue
        if level <= 0:
            continue
        enabled.append((index, level * 10 + decimal))
    if not enabled:
        return ""

    master = [value for index, value in enabled if index == MASTER_CHART_INDEX]
    value = master[0] if master else enabled[-1][1]
    level, decimal = divmod(value, 10)
    return f"{level}+" if decimal >= PLUS_LEVEL_DECIMAL else str(level)


def parse_music_xml(path: Path) -> TrackMetadata:
    """Parse a ``Music.xml`` file into TrackMetadata.

    Raises:
        MetadataError: The file is not well-formed or carries no usable track id.
    """
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as exc:
        raise MetadataError(f"Unable to read {path}: {exc}", path) from exc

    track_id = _text(root, "name/id")
    name = _text(root, "name/str")
    if not track_id.isdigit():
        raise MetadataError(f"{path} has no numeric track id (found {track_id!r})", path)

    numeric_id = int(track_id)
    special_label = _text(root, "utageKanjiName")
    special_mode = bool(special_label) or numeric_id >= SPECIAL_ID_THRESHOLD
    deluxe = DELUXE_ID_THRESHOLD <= numeric_id < SPECIAL_ID_THRESHOLD

    return TrackMetadata(
        track_id=track_id,
        name=name or track_id,
        sort_name=_text(root, "sortName") or name,
        genre=_labelled(root, "genreName"),
        symbolic_level=_symbolic_level(root),
        version=_labelled(root, "AddVersion"),
        version_number=_text(root, "version"),
        composer=_labelled(root, "artistName"),
        bpm=_text(root, "bpm"),
        standard_deluxe_prefix="DX" if deluxe else "SD",
        special_mode=special_mode,
        special_label=special_label,
    )


class MusicXmlMetadataSource:
    """Read track metadata from the ``Music.xml`` file in each track folder."""

    def __init__(self, metadata_filename: str = METADATA_FILENAME) -> None:
        self.metadata_filename = metadata_filename

    def load(self, track_dir: Path) -> TrackMetadata:
        return parse_music_xml(track_dir / self.metadata_filename)
