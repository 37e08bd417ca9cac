"""Tests for grouping and ordering helpers (F2)."""

import pytest

from proacademics.core.grouping import (
    ALL_GROUP,
    UNKNOWN_PROGRAM,
    ensure_url_protocol,
    group_records,
    hierarchical_groups,
    move_item,
)

RECORDS = [
    {"name": "a", "subject": "Maths", "program": "GCSE"},
    {"name": "b", "subject": "Physics", "program": "GCSE"},
    {"name": "c", "subject": "Maths", "program": "A-Level"},
    {"name": "d", "subject": "Maths", "program": ""},
]


def names(groups):
    return {key: [r["name"] for r in items] for key, items in groups.items()}


class TestGroupRecords:
    """Tests for group_records."""

    def test_none(self):
        assert names(group_records(RECORDS, "none")) == {ALL_GROUP: ["a", "b", "c", "d"]}

    def test_by_subject_first_seen_order(self):
        groups = group_records(RECORDS, "subject")
        assert list(groups) == ["Maths", "Physics"]
        assert names(groups)["Maths"] == ["a", "c", "d"]

    def test_by_program_with_unknown(self):
        groups = names(group_records(RECORDS, "program"))
        assert groups["GCSE"] == ["a", "b"]
        assert groups[UNKNOWN_PROGRAM] == ["d"]

    def test_by_subject_program(self):
        groups = names(group_records(RECORDS, "subject-program"))
        assert list(groups) == [
            "Maths - GCSE",
            "Physics - GCSE",
            "Maths - A-Level",
            f"Maths - {UNKNOWN_PROGRAM}",
        ]

    def test_invalid_group_by(self):
        with pytest.raises(ValueError, match="Invalid group_by"):
            group_records(RECORDS, "teacher")

    def test_hierarchical(self):
        tree = hierarchical_groups(RECORDS)
        assert list(tree) == ["Maths", "Physics"]
        assert [r["name"] for r in tree["Maths"]["GCSE"]] == ["a"]


class TestMoveItem:
    def test_move_forward_and_back(self):
        assert move_item(["a", "b", "c"], 0, 2) == ["b", "c", "a"]
        assert move_item(["a", "b", "c"], 2, 0) == ["c", "a", "b"]

    def test_original_untouched(self):
        items = ["a", "b"]
        move_item(items, 0, 1)
        assert items == ["a", "b"]

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            move_item(["a"], 0, 1)


class TestEnsureUrlProtocol:
    def test_adds_https(self):
        assert ensure_url_protocol("zoom.us/j/1") == "https://zoom.us/j/1"

    def test_keeps_existing_scheme(self):
        assert ensure_url_protocol("http://x.org") == "http://x.org"

    def test_blank(self):
        assert ensure_url_protocol("  ") == ""
