from __future__ import annotations

import zipfile

import pytest

from chartbatch.utils import (
    archive_directory,
    copy_file,
    env_bool,
    env_str,
    expand_env,
    load_yaml_file,
    parse_env_bool,
    replace_directory,
    sanitize_component,
)


def test_sanitize_component_replaces_disallowed_characters() -> None:
    assert sanitize_component('8_What/Is:"Love"?') == "8_What_Is_Love"


def test_sanitize_component_keeps_unicode_and_spaces() -> None:
    assert sanitize_component("1_ジングルベル Remix") == "1_ジングルベル Remix"


def test_sanitize_component_rejects_dot_segments() -> None:
    assert sanitize_component("..") == "untitled"
    assert sanitize_component("   ") == "untitled"


def test_copy_file_creates_destination_and_detects_existing(tmp_path) -> None:
    source = tmp_path / "music000008.ogg"
    source.write_bytes(b"audio")
    destination = tmp_path / "out" / "track.ogg"

    assert copy_file(source, destination) is True
    assert destination.read_bytes() == b"audio"
    assert copy_file(source, destination) is False


def test_copy_file_raises_for_missing_source(tmp_path) -> None:
    with pytest.raises(OSError):
        copy_file(tmp_path / "missing.ogg", tmp_path / "out" / "track.ogg")


def test_archive_directory_replaces_directory_with_zip(tmp_path) -> None:
    track_dir = tmp_path / "Pop" / "8_SONG"
    (track_dir / "nested").mkdir(parents=True)
    (track_dir / "maidata.txt").write_text("&title=Song\n", encoding="utf-8")
    (track_dir / "nested" / "track.ogg").write_bytes(b"audio")

    archive = archive_directory(track_dir)

    assert archive == tmp_path / "Pop" / "8_SONG.zip"
    assert not track_dir.exists()
    with zipfile.ZipFile(archive) as handle:
        assert sorted(handle.namelist()) == ["maidata.txt", "nested/track.ogg"]


def test_archive_directory_overwrites_stale_archive(tmp_path) -> None:
    track_dir = tmp_path / "8_SONG"
    track_dir.mkdir()
    (track_dir / "maidata.txt").write_text("new", encoding="utf-8")
    (tmp_path / "8_SONG.zip").write_bytes(b"stale")

    archive = archive_directory(track_dir)

    with zipfile.ZipFile(archive) as handle:
        assert handle.read("maidata.txt") == b"new"


def test_replace_directory_discards_stale_target(tmp_path) -> None:
    source = tmp_path / "8_SONG"
    source.mkdir()
    (source / "fresh.txt").write_text("fresh", encoding="utf-8")
    stale = tmp_path / "8_SONG_Incomplete"
    stale.mkdir()
    (stale / "stale.txt").write_text("stale", encoding="utf-8")

    result = replace_directory(source, stale)

    assert result == stale
    assert not source.exists()
    assert sorted(path.name for path in stale.iterdir()) == ["fresh.txt"]


def test_load_yaml_file_expands_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CHARTBATCH_TEST_ROOT", "/data/library")
    config = tmp_path / "chartbatch.yaml"
    config.write_text("source_dir: ${CHARTBATCH_TEST_ROOT}\n", encoding="utf-8")

    assert load_yaml_file(config) == {"source_dir": "/data/library"}


def test_load_yaml_file_rejects_non_mapping(tmp_path) -> None:
    config = tmp_path / "chartbatch.yaml"
    config.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_yaml_file(config)


def test_expand_env_walks_nested_structures(monkeypatch) -> None:
    monkeypatch.setenv("CHARTBATCH_TEST_DIR", "jackets")
    assert expand_env({"assets": {"image": "$CHARTBATCH_TEST_DIR"}, "list": ["$CHARTBATCH_TEST_DIR"]}) == {
        "assets": {"image": "jackets"},
        "list": ["jackets"],
    }


class TestParseEnvBool:
    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on"])
    def test_parses_truthy_values(self, value: str) -> None:
        assert parse_env_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "off"])
    def test_parses_falsy_values(self, value: str) -> None:
        assert parse_env_bool(value) is False

    def test_returns_none_for_unrecognized(self) -> None:
        assert parse_env_bool("maybe") is None
        assert parse_env_bool(None) is None


class TestEnvHelpers:
    def test_env_bool_reads_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("CHARTBATCH_IGNORE_INCOMPLETE", " yes ")
        assert env_bool("CHARTBATCH_IGNORE_INCOMPLETE") is True

    def test_env_bool_returns_none_when_not_set(self, monkeypatch) -> None:
        monkeypatch.delenv("CHARTBATCH_IGNORE_INCOMPLETE", raising=False)
        assert env_bool("CHARTBATCH_IGNORE_INCOMPLETE") is None

    def test_env_str_treats_blank_as_unset(self, monkeypatch) -> None:
        monkeypatch.setenv("CHARTBATCH_ON_MISSING", "   ")
        assert env_str("CHARTBATCH_ON_MISSING") is None
