from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

DELUXE_ID_THRESHOLD = 10000
SPECIAL_ID_THRESHOLD = 100000


@dataclass(frozen=True, slots=True)
class TrackMetadata:
    track_id: str
    name: str
    sort_name: str = ""
    genre: str = ""
    symbolic_level: str = ""
    version: str = ""
    version_number: str = ""
    composer: str = ""
    bpm: str = ""
    standard_deluxe_prefix: str = "SD"
    special_mode: bool = False
    special_label: str = ""

    def __post_init__(self) -> None:
        if not self.track_id.isdigit():
            raise ValueError(f"Track id must be an unsigned integer, got {self.track_id!r}")

    @property
    def numeric_id(self) -> int:
        return int(self.track_id)

    @property
    def short_id(self) -> str:
        """Last four digits of the id padded to six, as used by asset file names."""
        return self.track_id.zfill(6)[2:]

    @property
    def is_deluxe(self) -> bool:
        return DELUXE_ID_THRESHOLD <= self.numeric_id < SPECIAL_ID_THRESHOLD

    @property
    def deluxe_path_suffix(self) -> str:
        return "_DX" if self.is_deluxe else ""

    @property
    def detail_key(self) -> Tuple[str, str]:
        return (self.name, self.track_id)


@dataclass(frozen=True, slots=True)
class AssetKind:
    key: str
    label: str
    base_name: str
    extensions: Tuple[str, ...]
    stem_template: str

    def source_stem(self, root: Path, metadata: TrackMetadata) -> Path:
        return root / self.stem_template.format(short_id=metadata.short_id, track_id=metadata.track_id)


# Extension order is priority order: lossless or preferred formats first
AUDIO = AssetKind(
    key="audio",
    label="Music",
    base_name="track",
    extensions=(".ogg", ".mp3"),
    stem_template="music00{short_id}",
)
IMAGE = AssetKind(
    key="image",
    label="Image",
    base_name="bg",
    extensions=(".png", ".jpg"),
    stem_template="UI_Jacket_00{short_id}",
)
VIDEO = AssetKind(
    key="video",
    label="BGA",
    base_name="pv",
    extensions=(".mp4",),
    stem_template="00{short_id}",
)

ASSET_KINDS: Tuple[AssetKind, ...] = (AUDIO, IMAGE, VIDEO)


@dataclass(frozen=True, slots=True)
class ExportResult:
    complete: bool
    action: str  # not-requested | missing | copied | already-present | copy-failed
    destination: Optional[Path] = None


@dataclass(frozen=True, slots=True)
class TrackOutcome:
    status: str  # committed | incomplete | skipped | failed
    source: Path
    complete: bool = True
    summary: str = ""
    destination: Optional[Path] = None
    metadata: Optional[TrackMetadata] = None
    errors: Tuple[str, ...] = field(default_factory=tuple)
    archive_path: Optional[Path] = None
    skip_reason: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.status == "committed"
