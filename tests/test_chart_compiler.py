from __future__ import annotations

import pytest

from chartbatch.chart_compiler import (
    MAIDATA_FILENAME,
    CompileOptions,
    PassthroughChartCompiler,
    find_chart_sources,
    one_line_summary,
)


class TestCompileOptions:
    def test_defaults_leave_charts_untouched(self) -> None:
        options = CompileOptions()
        assert options.target_format is None
        assert options.rotation is None
        assert options.shift_tick == 0
        assert options.strict_decimal is False

    def test_choices_are_canonicalized_case_insensitively(self) -> None:
        options = CompileOptions(target_format="simaifes", rotation="upsidedown")
        assert options.target_format == "SimaiFes"
        assert options.rotation == "UpsideDown"

    @pytest.mark.parametrize(
        "kwargs",
        [{"target_format": "Ma2_999"}, {"rotation": "Sideways"}, {"shift_tick": "384"}, {"shift_tick": True}],
    )
    def test_rejects_invalid_values(self, kwargs) -> None:
        with pytest.raises(ValueError):
            CompileOptions(**kwargs)


def test_find_chart_sources_matches_suffix_case_insensitively(tmp_path) -> None:
    (tmp_path / "000008_00.ma2").write_text("a", encoding="utf-8")
    (tmp_path / "000008_01.MA2").write_text("b", encoding="utf-8")
    (tmp_path / "Music.xml").write_text("<MusicData/>", encoding="utf-8")

    assert [path.name for path in find_chart_sources(tmp_path)] == ["000008_00.ma2", "000008_01.MA2"]


def test_one_line_summary_is_tab_separated(sample_metadata) -> None:
    assert one_line_summary(sample_metadata, 2) == "12\tSample Song\tPop\tmaimai\tLv.12+\t2 chart(s)"


class TestPassthroughChartCompiler:
    def test_copies_charts_and_writes_header(self, tmp_path, sample_metadata) -> None:
        source = tmp_path / "music" / "000012"
        source.mkdir(parents=True)
        (source / "000012_00.ma2").write_text("chart", encoding="utf-8")
        output = tmp_path / "out" / "Pop" / "12_SAMPLESONG"

        summary = PassthroughChartCompiler().compile(
            source,
            output,
            sample_metadata,
            CompileOptions(target_format="Simai", rotation="Clockwise90", shift_tick=384, strict_decimal=True),
        )

        assert summary == one_line_summary(sample_metadata, 1)
        assert (output / "000012_00.ma2").read_text(encoding="utf-8") == "chart"
        header = (output / MAIDATA_FILENAME).read_text(encoding="utf-8").splitlines()
        assert header[0] == "&title=Sample Song"
        assert "&format=Simai" in header
        assert "&rotate=Clockwise90" in header
        assert "&shift=384" in header
        assert "&decimal=true" in header
        assert header[-1] == "&chart=000012_00.ma2"

    def test_default_options_omit_transform_lines(self, tmp_path, sample_metadata) -> None:
        source = tmp_path / "src"
        source.mkdir()
        (source / "a.ma2").write_text("chart", encoding="utf-8")
        output = tmp_path / "out"

        PassthroughChartCompiler().compile(source, output, sample_metadata, CompileOptions())

        header = (output / MAIDATA_FILENAME).read_text(encoding="utf-8")
        assert "&format=" not in header
        assert "&rotate=" not in header
        assert "&shift=" not in header
