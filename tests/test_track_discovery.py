from __future__ import annotations

from chartbatch.track_discovery import list_track_folders, skip_reason_for_track_folder


def test_lists_immediate_directories_in_name_order(tmp_path) -> None:
    for name in ("000100", "000008", ".cache"):
        (tmp_path / name).mkdir()
    (tmp_path / "000008" / "nested").mkdir()
    (tmp_path / "readme.txt").write_text("not a track", encoding="utf-8")

    assert [path.name for path in list_track_folders(tmp_path)] == ["000008", "000100"]


class TestSkipReason:
    def test_folder_without_charts_is_skipped(self, tmp_path) -> None:
        (tmp_path / "Music.xml").write_text("<MusicData/>", encoding="utf-8")

        reason = skip_reason_for_track_folder(tmp_path, chart_extensions=(".ma2",), metadata_filename="Music.xml")

        assert reason == "no chart files (*.ma2)"

    def test_folder_without_metadata_is_skipped(self, tmp_path) -> None:
        (tmp_path / "000008_00.ma2").write_text("chart", encoding="utf-8")

        reason = skip_reason_for_track_folder(tmp_path, chart_extensions=(".ma2",), metadata_filename="Music.xml")

        assert reason == "no Music.xml"

    def test_complete_folder_is_not_skipped(self, tmp_path) -> None:
        (tmp_path / "000008_00.ma2").write_text("chart", encoding="utf-8")
        (tmp_path / "Music.xml").write_text("<MusicData/>", encoding="utf-8")

        assert skip_reason_for_track_folder(tmp_path, chart_extensions=(".ma2",), metadata_filename="Music.xml") is None

    def test_alternate_chart_extensions(self, tmp_path) -> None:
        (tmp_path / "maidata.txt").write_text("&title=x", encoding="utf-8")
        (tmp_path / "Music.xml").write_text("<MusicData/>", encoding="utf-8")

        assert (
            skip_reason_for_track_folder(tmp_path, chart_extensions=(".ma2", ".txt"), metadata_filename="Music.xml")
            is None
        )
