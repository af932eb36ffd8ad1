from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from chartbatch.destination_builder import (
    build_track_destination,
    category_root,
    format_relative_destination,
    incomplete_path,
    track_directory_name,
)


class TestTrackDirectoryName:
    def test_standard_naming_uses_id_and_sort_name(self, sample_metadata) -> None:
        assert track_directory_name(sample_metadata, id_as_folder_name=False) == "12_SAMPLESONG"

    def test_deluxe_tracks_get_suffix(self, sample_metadata) -> None:
        deluxe = replace(sample_metadata, track_id="11234")
        assert track_directory_name(deluxe, id_as_folder_name=False) == "11234_SAMPLESONG_DX"

    def test_id_as_folder_name_drops_sort_name_and_suffix(self, sample_metadata) -> None:
        deluxe = replace(sample_metadata, track_id="11234")
        assert track_directory_name(deluxe, id_as_folder_name=True) == "11234"

    def test_unsafe_characters_are_replaced(self, sample_metadata) -> None:
        metadata = replace(sample_metadata, sort_name="AC/DC: LIVE?")
        assert track_directory_name(metadata, id_as_folder_name=False) == "12_AC_DC_ LIVE"


class TestBuildTrackDestination:
    def test_places_track_under_category(self, tmp_path, sample_metadata) -> None:
        destination = build_track_destination(tmp_path, "Pop", sample_metadata, id_as_folder_name=False)
        assert destination == tmp_path / "Pop" / "12_SAMPLESONG"

    def test_flat_scheme_places_track_under_root(self, tmp_path, sample_metadata) -> None:
        destination = build_track_destination(tmp_path, "", sample_metadata, id_as_folder_name=True)
        assert destination == tmp_path / "12"

    def test_special_tracks_get_utage_suffix(self, tmp_path, sample_metadata) -> None:
        special = replace(sample_metadata, special_mode=True)
        destination = build_track_destination(tmp_path, "Pop", special, id_as_folder_name=False)
        assert destination.name == "12_SAMPLESONG_Utage"

    def test_category_is_sanitized_into_one_component(self, tmp_path) -> None:
        assert category_root(tmp_path, "../../etc") == tmp_path / ".._.._etc"
        assert category_root(tmp_path, "..") == tmp_path / "untitled"

    def test_symlinked_category_escaping_output_root_is_rejected(self, tmp_path, sample_metadata) -> None:
        output_root = tmp_path / "output"
        outside = tmp_path / "outside"
        output_root.mkdir()
        outside.mkdir()
        (output_root / "Pop").symlink_to(outside, target_is_directory=True)

        with pytest.raises(ValueError, match="escapes output root"):
            build_track_destination(output_root, "Pop", sample_metadata, id_as_folder_name=False)


def test_incomplete_path_appends_suffix() -> None:
    assert incomplete_path(Path("/out/Pop/12_SAMPLESONG")) == Path("/out/Pop/12_SAMPLESONG_Incomplete")


def test_format_relative_destination(tmp_path) -> None:
    assert format_relative_destination(tmp_path / "Pop" / "12", tmp_path) == str(Path("Pop") / "12")
    assert format_relative_destination(Path("/elsewhere"), tmp_path) == "/elsewhere"
