"""Tests for delimited text parsing (F2)."""

import pytest

from proacademics.core.csv_parser import (
    CsvFormatError,
    detect_delimiter,
    find_value,
    normalize_header,
    parse_delimited,
    rows_as_dicts,
)


class TestParseDelimited:
    """Tests for parse_delimited."""

    def test_comma_separated(self):
        headers, rows = parse_delimited("Name,Subject\nCells,Biology\n")

        assert headers == ["Name", "Subject"]
        assert rows == [["Cells", "Biology"]]

    def test_tab_separated(self):
        headers, rows = parse_delimited("Week\tTopic\n1\tFractions, decimals\n")

        assert headers == ["Week", "Topic"]
        assert rows == [["1", "Fractions, decimals"]]

    def test_bom_and_blank_rows_dropped(self):
        headers, rows = parse_delimited("﻿A,B\n\n1,2\n,\n3,4\n")

        assert headers == ["A", "B"]
        assert rows == [["1", "2"], ["3", "4"]]

    def test_quoted_cells_keep_commas_and_newlines(self):
        _, rows = parse_delimited('Title,Notes\n"Algebra, part 1","line one\nline two"\n')

        assert rows == [["Algebra, part 1", "line one\nline two"]]

    def test_short_rows_keep_their_length(self):
        _, rows = parse_delimited("A,B,C\n1,2\n")
        assert rows == [["1", "2"]]

    def test_empty_file(self):
        with pytest.raises(CsvFormatError, match="File is empty"):
            parse_delimited("  \n ")

    def test_header_only(self):
        with pytest.raises(CsvFormatError, match="at least one data row"):
            parse_delimited("A,B\n")


class TestHelpers:
    def test_detect_delimiter(self):
        assert detect_delimiter("a\tb") == "\t"
        assert detect_delimiter("a,b") == ","

    def test_normalize_header(self):
        assert normalize_header("Est.Time") == "est_time"
        assert normalize_header(" Date Due ") == "date_due"
        assert normalize_header("Sub-topic") == "sub_topic"

    def test_rows_as_dicts_pads(self):
        assert rows_as_dicts(["A", "B"], [["1"]]) == [{"A": "1", "B": ""}]

    def test_find_value_first_non_empty_alias(self):
        row = {"Title": "", "Topic": "Fractions", "Subject": "Maths"}
        assert find_value(row, ["title", "topic"]) == "Fractions"
        assert find_value(row, ["teacher"]) == ""
