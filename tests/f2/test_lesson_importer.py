"""Tests for lesson schedule import (F2)."""

import pytest

from proacademics.core.homework_importer import ImportValidationError
from proacademics.core.lesson_importer import (
    MISSING,
    clean_multiline,
    commit_lessons,
    format_grade,
    format_week,
    is_break_row,
    preview_lessons_csv,
    validate_lesson_row,
)
from proacademics.db.lessons_repository import list_all_lessons

SCHEDULE_TSV = (
    "Week\tSubject\tModule\tTopic\tInstructor\tVideo URL\tGrade\n"
    "Week 1\tMathematics\tNumber\tFractions\tMr. Smith\thttps://youtu.be/abc\tGrade 9\n"
    "Week 2\tMathematics\tNumber\tHalf term break\t\t\t\n"
    "Week 3\t\tAlgebra\tLinear equations\tMs. Lee\thttps://example.com/v.mp4\t9\n"
)


class TestHelpers:
    def test_clean_multiline(self):
        assert clean_multiline("Fractions\n  decimals \n\npercentages") == "Fractions, decimals, percentages"

    def test_format_week(self):
        assert format_week("Week 12") == "12"
        assert format_week("TBC") == "TBC"

    def test_format_grade(self):
        assert format_grade("Grade 10") == "10"
        assert format_grade("") == ""

    def test_is_break_row(self):
        assert is_break_row("Christmas Holiday", "")
        assert is_break_row("", "Half term BREAK")
        assert not is_break_row("Fractions", "Number")

    def test_validate_lesson_row(self):
        assert validate_lesson_row({"title": "", "subject": MISSING}) == [
            "Title is required",
            "Subject is required",
        ]
        assert validate_lesson_row(
            {"title": "A", "subject": "B", "video_url": "https://example.com/x"}
        ) == ["Video URL must be a YouTube or Vimeo link"]


class TestPreviewLessonsCsv:
    """Tests for preview_lessons_csv."""

    def test_maps_aliases_and_skips_breaks(self):
        preview = preview_lessons_csv(SCHEDULE_TSV, "active")

        assert preview.skipped_rows == 1
        assert len(preview.rows) == 2

        first = preview.rows[0]
        assert first.row == 2
        assert first.title == "Fractions"
        assert first.subject == "Mathematics"
        assert first.program == "Number"
        assert first.teacher == "Mr. Smith"
        assert first.week == "1"
        assert first.grade == "9"
        assert first.status == "active"
        assert first.errors == []

    def test_row_errors_reported(self):
        preview = preview_lessons_csv(SCHEDULE_TSV)

        second = preview.rows[1]
        assert second.row == 4
        assert second.subject == MISSING
        assert "Subject is required" in second.errors
        assert "Video URL must be a YouTube or Vimeo link" in second.errors
        assert preview.valid_count == 1

    def test_to_dict_counts(self):
        data = preview_lessons_csv(SCHEDULE_TSV).to_dict()

        assert data["total_rows"] == 2
        assert data["valid_rows"] == 1
        assert data["invalid_rows"] == 1
        assert data["skipped_rows"] == 1
        assert data["rows"][0]["title"] == "Fractions"

    def test_invalid_status_falls_back_to_draft(self):
        preview = preview_lessons_csv("Title,Subject\nCells,Biology\n", "published")
        assert preview.rows[0].status == "draft"

    def test_title_fallback(self):
        preview = preview_lessons_csv("Subject,Module\nBiology,Cells\n")
        assert preview.rows[0].title == "Cells - Lesson 1"


class TestCommitLessons:
    """Tests for commit_lessons."""

    def test_saves_rows(self, db):
        records = commit_lessons(
            [
                {"title": "Fractions", "subject": "Mathematics", "instructor": "Mr. Smith", "row": 2, "errors": []},
                {"title": "Decimals", "subject": "Mathematics", "status": "active"},
            ]
        )

        assert [r.title for r in records] == ["Fractions", "Decimals"]
        assert records[0].teacher == "Mr. Smith"
        assert records[0].status == "draft"
        assert records[1].status == "active"
        assert len(list_all_lessons()) == 2

    def test_numeric_title_saved_as_text(self, db):
        records = commit_lessons([{"title": 5, "subject": " Mathematics "}])

        assert records[0].title == "5"
        assert records[0].subject == "Mathematics"

    def test_empty_batch(self, db):
        with pytest.raises(ImportValidationError, match="No lessons data provided"):
            commit_lessons([])

    def test_one_bad_row_rejects_all(self, db):
        with pytest.raises(ImportValidationError, match="Row 2: missing required fields"):
            commit_lessons(
                [
                    {"title": "Fractions", "subject": "Mathematics"},
                    {"title": "Decimals", "subject": MISSING},
                ]
            )

        assert list_all_lessons() == []
