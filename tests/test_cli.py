from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pytest

from chartbatch import cli
from chartbatch.runner import EXIT_FAILED


@pytest.fixture(autouse=True)
def _quiet_cli(monkeypatch) -> list[str]:
    printed: list[str] = []
    monkeypatch.setattr("chartbatch.cli.configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr("chartbatch.cli.CONSOLE.print", lambda *args, **kwargs: printed.append(str(args[0]) if args else ""))
    for name in ("CHARTBATCH_CONFIG", "CHARTBATCH_IGNORE_INCOMPLETE", "CHARTBATCH_ON_MISSING"):
        monkeypatch.delenv(name, raising=False)
    return printed


def test_parser_compile_options() -> None:
    args = cli.build_parser().parse_args(
        ["compile", "-p", "/src", "-o", "/out", "-m", "-c", "/jackets", "-g", "2", "-s", "-384", "-z", "--on-missing", "fail"]
    )

    assert args.handler is cli.run_compile
    assert args.music == ""
    assert args.cover == "/jackets"
    assert args.video is None
    assert args.genre == 2
    assert args.shift == -384
    assert args.zip is True
    assert args.on_missing == "fail"


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_log_level_is_case_insensitive() -> None:
    args = cli.build_parser().parse_args(["compile", "--log-level", "debug"])
    assert args.log_level == "DEBUG"


class TestCompile:
    def test_compiles_library(self, library) -> None:
        library.add_track("000012", "012")

        exit_code = cli.main(["compile", "-p", str(library.source), "-o", str(library.output), "-m", "-c"])

        assert exit_code == 0
        assert (library.output / "Pop" / "012_SAMPLESONG" / "track.ogg").is_file()
        assert (library.output / "log.txt").is_file()

    def test_unset_source_root_fails_run(self, tmp_path, caplog) -> None:
        caplog.set_level(logging.ERROR, logger="chartbatch.runner")

        exit_code = cli.main(["compile", "-o", str(tmp_path / "out")])

        assert exit_code == EXIT_FAILED
        assert "Source root was not specified" in caplog.text

    def test_missing_source_root_fails_run(self, tmp_path, caplog) -> None:
        caplog.set_level(logging.ERROR, logger="chartbatch.runner")

        exit_code = cli.main(["compile", "-p", str(tmp_path / "absent"), "-o", str(tmp_path / "out")])

        assert exit_code == EXIT_FAILED
        assert "Source root does not exist" in caplog.text
        assert not (tmp_path / "out").exists()

    def test_output_root_that_is_a_file_fails_run(self, library) -> None:
        library.add_track("000012", "012")
        library.output.write_text("not a folder", encoding="utf-8")

        exit_code = cli.main(["compile", "-p", str(library.source), "-o", str(library.output), "-m", "-c"])

        assert exit_code == EXIT_FAILED

    def test_fatal_code_differs_from_usage_and_config_codes(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            cli.build_parser().parse_args(["compile", "--on-missing", "shrug"])

        assert len({EXIT_FAILED, cli.EXIT_CONFIG_ERROR, excinfo.value.code}) == 3

    def test_invalid_rotation_is_a_config_error(self, library) -> None:
        exit_code = cli.main(["compile", "-p", str(library.source), "-o", str(library.output), "-r", "Sideways"])

        assert exit_code == cli.EXIT_CONFIG_ERROR
        assert not library.output.exists()

    def test_config_file_supplies_roots(self, library, tmp_path) -> None:
        library.add_track("000012", "012")
        config_path = tmp_path / "chartbatch.yaml"
        config_path.write_text(
            f"source_dir: {library.source}\noutput_dir: {library.output}\ncategory_scheme: 6\nassets:\n  audio: ''\n",
            encoding="utf-8",
        )

        exit_code = cli.main(["compile", "--config", str(config_path), "-n"])

        assert exit_code == 0
        assert (library.output / "012" / "track.ogg").is_file()


class TestValidateConfig:
    def _args(self, config: Path, no_suggestions: bool = False) -> argparse.Namespace:
        return argparse.Namespace(config=config, no_suggestions=no_suggestions, command="validate-config")

    def test_valid_config(self, tmp_path, _quiet_cli) -> None:
        config_path = tmp_path / "chartbatch.yaml"
        config_path.write_text("category_scheme: 1\n", encoding="utf-8")

        assert cli.run_validate_config(self._args(config_path)) == 0
        assert any("passed validation" in line for line in _quiet_cli)

    def test_invalid_config(self, tmp_path, _quiet_cli) -> None:
        config_path = tmp_path / "chartbatch.yaml"
        config_path.write_text("category_scheme: first\ncolour: red\n", encoding="utf-8")

        assert cli.run_validate_config(self._args(config_path)) == cli.EXIT_CONFIG_ERROR
        assert any("Validation Errors: 2 error(s) detected" in line for line in _quiet_cli)
        assert any("💡" in line for line in _quiet_cli)

    def test_out_of_range_scheme_passes_with_warnings(self, tmp_path, _quiet_cli) -> None:
        config_path = tmp_path / "chartbatch.yaml"
        config_path.write_text("category_scheme: 9\n", encoding="utf-8")

        assert cli.run_validate_config(self._args(config_path)) == 0
        assert any("Validation Warnings: 1 warning(s) detected" in line for line in _quiet_cli)
        assert any("passed validation (with warnings)" in line for line in _quiet_cli)

    def test_suggestions_can_be_disabled(self, tmp_path, _quiet_cli) -> None:
        config_path = tmp_path / "chartbatch.yaml"
        config_path.write_text("colour: red\n", encoding="utf-8")

        assert cli.run_validate_config(self._args(config_path, no_suggestions=True)) == cli.EXIT_CONFIG_ERROR
        assert not any("💡" in line for line in _quiet_cli)

    def test_missing_file(self, tmp_path, _quiet_cli) -> None:
        assert cli.run_validate_config(self._args(tmp_path / "absent.yaml")) == cli.EXIT_CONFIG_ERROR
        assert any("Configuration file not found" in line for line in _quiet_cli)


def test_schemes_lists_every_index(_quiet_cli) -> None:
    assert cli.main(["schemes"]) == 0
    assert "[0]Genre" in _quiet_cli[0]
    assert "[6]No Separate Folder" in _quiet_cli[0]
