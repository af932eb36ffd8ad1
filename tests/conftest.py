from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import pytest

from chartbatch.config import AssetRoots, Settings
from chartbatch.models import TrackMetadata

MUSIC_XML_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<MusicData>
  <name><id>{track_id}</id><str>{name}</str></name>
  <sortName>{sort_name}</sortName>
  <artistName><id>1</id><str>{artist}</str></artistName>
  <genreName><id>1</id><str>{genre}</str></genreName>
  <bpm>{bpm}</bpm>
  <version>{version_number}</version>
  <AddVersion><id>0</id><str>{version}</str></AddVersion>
  <utageKanjiName>{utage}</utageKanjiName>
  <notesData>
{notes}
  </notesData>
</MusicData>
"""

NOTES_TEMPLATE = (
    "    <Notes><level>{level}</level><levelDecimal>{decimal}</levelDecimal>"
    "<isEnable>{enabled}</isEnable></Notes>"
)


def render_music_xml(
    track_id: str,
    name: str = "Sample Song",
    *,
    sort_name: str = "SAMPLESONG",
    genre: str = "Pop",
    version: str = "maimai",
    version_number: str = "10000",
    artist: str = "Sample Artist",
    bpm: str = "150",
    utage: str = "",
    levels: Iterable[tuple[int, int, bool]] = ((3, 0, True), (6, 0, True), (9, 0, True), (12, 7, True)),
) -> str:
    notes = "\n".join(
        NOTES_TEMPLATE.format(level=level, decimal=decimal, enabled="true" if enabled else "false")
        for level, decimal, enabled in levels
    )
    return MUSIC_XML_TEMPLATE.format(
        track_id=track_id,
        name=name,
        sort_name=sort_name,
        artist=artist,
        genre=genre,
        bpm=bpm,
        version_number=version_number,
        version=version,
        utage=utage,
        notes=notes,
    )


class TrackLibrary:
    """Builds a source tree with ``music/`` track folders and asset roots."""

    def __init__(self, root: Path) -> None:
        self.source = root / "source"
        self.output = root / "output"
        self.music = self.source / "music"
        self.audio = self.source / "SoundData"
        self.image = self.source / "AssetBundleImages" / "jacket"
        self.video = self.source / "MovieData"
        for directory in (self.music, self.audio, self.image, self.video):
            directory.mkdir(parents=True, exist_ok=True)

    def add_track(
        self,
        folder: str,
        track_id: str,
        *,
        chart: bool = True,
        metadata: bool = True,
        audio: Optional[str] = ".ogg",
        image: Optional[str] = ".png",
        video: Optional[str] = None,
        **xml_fields,
    ) -> Path:
        track_dir = self.music / folder
        track_dir.mkdir(parents=True, exist_ok=True)
        if chart:
            (track_dir / f"{track_id.zfill(6)}_00.ma2").write_text("chart", encoding="utf-8")
        if metadata:
            (track_dir / "Music.xml").write_text(render_music_xml(track_id, **xml_fields), encoding="utf-8")

        short_id = track_id.zfill(6)[2:]
        if audio:
            (self.audio / f"music00{short_id}{audio}").write_bytes(b"audio")
        if image:
            (self.image / f"UI_Jacket_00{short_id}{image}").write_bytes(b"image")
        if video:
            (self.video / f"00{short_id}{video}").write_bytes(b"video")
        return track_dir

    def settings(self, **overrides) -> Settings:
        values = {
            "source_root": self.source,
            "output_root": self.output,
            "assets": AssetRoots(audio="", image="", video=None),
        }
        values.update(overrides)
        return Settings(**values)


@pytest.fixture
def library(tmp_path: Path) -> TrackLibrary:
    return TrackLibrary(tmp_path)


@pytest.fixture
def sample_metadata() -> TrackMetadata:
    return TrackMetadata(
        track_id="12",
        name="Sample Song",
        sort_name="SAMPLESONG",
        genre="Pop",
        symbolic_level="12+",
        version="maimai",
        version_number="10000",
        composer="Sample Artist",
        bpm="150",
    )


def never_acknowledge(message: str) -> None:
    raise AssertionError(f"unexpected prompt: {message}")
