"""Unit tests for GHCN-Daily conversion and input preparation."""

import pytest

from tests.factories.data_factory import ghcn_row, ghcn_text, sample_ghcn_export
from tmaxfit.data.ghcn import (
    GHCN_HEADER,
    OUTPUT_HEADER,
    convert_ghcn,
    date_to_years,
    is_ghcn,
)
from tmaxfit.data.preparation import prepare, resolve_dataset
from tmaxfit.data.types import Dataset, PreparedInput
from tmaxfit.exceptions import ParseError


class TestDateToYears:
    def test_year_one(self):
        # year 0 is a leap year: 366 days before 0001-01-01
        assert date_to_years("00010101") == pytest.approx(366 / 365.25)

    def test_modern_date(self):
        assert date_to_years("20000101") == pytest.approx(2000.0, abs=0.01)

    def test_monotonic(self):
        assert date_to_years("20200102") > date_to_years("20200101")

    @pytest.mark.parametrize("text", ["2020-01-01", "20201301", "2020011", "abcdefgh"])
    def test_invalid_dates(self, text):
        with pytest.raises(ParseError, match="expected YYYYMMDD"):
            date_to_years(text)


class TestConvertGhcn:
    def test_keeps_unflagged_tmax_rows(self):
        text, skipped = convert_ghcn(sample_ghcn_export())
        lines = text.strip().splitlines()
        assert lines[0] == OUTPUT_HEADER
        assert len(lines) == 4
        assert skipped == 0

    def test_tenths_of_degree_converted(self):
        text, _ = convert_ghcn(ghcn_text([ghcn_row("20200101", 56)]))
        years, tmax = text.strip().splitlines()[1].split(",")
        assert float(tmax) == pytest.approx(5.6)
        assert float(years) == pytest.approx(date_to_years("20200101"))

    def test_wrong_header(self):
        with pytest.raises(ParseError, match="Unexpected raw data header"):
            convert_ghcn("ID,DATE,VALUE\nA,20200101,1\n")

    def test_short_and_non_numeric_rows_skipped(self):
        raw = ghcn_text(
            [
                "USW00094728,20200101",
                ghcn_row("20200102", 0).replace(",0,", ",x,"),
                ghcn_row("20200103", 100),
            ]
        )
        text, skipped = convert_ghcn(raw)
        assert skipped == 2
        assert len(text.strip().splitlines()) == 2

    def test_is_ghcn(self):
        assert is_ghcn("\n" + GHCN_HEADER + "\n")
        assert not is_ghcn("x,y\n1,2\n")
        assert not is_ghcn("")


class TestPrepare:
    def test_ghcn_input(self):
        prepared = prepare(sample_ghcn_export())
        assert prepared.source_format == "ghcn"
        assert prepared.n_observations == 3
        assert prepared.dataset.columns == ("DATE", "TMAX")
        assert prepared.text.startswith("DATE,TMAX\n")

    def test_delimited_input(self):
        prepared = prepare("1,10\n2,12\nbad\n")
        assert prepared.source_format == "delimited"
        assert prepared.rows_skipped == 1
        assert prepared.text == "x,y\n1.0,10.0\n2.0,12.0\n"

    def test_prepared_text_parses_to_same_dataset(self):
        prepared = prepare(sample_ghcn_export())
        assert prepare(prepared.text).dataset == prepared.dataset

    def test_resolve_dataset_accepts_all_forms(self, scenario_a_dataset):
        prepared = PreparedInput(scenario_a_dataset, scenario_a_dataset.to_csv(), "delimited")
        assert resolve_dataset(scenario_a_dataset) is scenario_a_dataset
        assert resolve_dataset(prepared) is scenario_a_dataset
        assert isinstance(resolve_dataset("1,10\n2,12\n"), Dataset)
