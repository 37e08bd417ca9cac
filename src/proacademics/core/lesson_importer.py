"""Lesson schedule import.

Import is two steps:
1. preview_lessons_csv() maps a loosely formatted schedule (CSV or TSV,
   headers vary between teachers) to lesson rows and reports per-row
   problems without saving anything.
2. commit_lessons() saves rows the admin confirmed, all or nothing.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from proacademics.core.csv_parser import find_value, parse_delimited, rows_as_dicts
from proacademics.core.homework_importer import ImportValidationError
from proacademics.db.lessons_repository import LessonRecord, insert_many_lessons, new_lesson
from proacademics.utils.validators import coerce_status, is_valid_video_url

logger = structlog.get_logger(__name__)

TITLE_ALIASES = ["Topic", "Title", "Lesson Title", "Lesson Name", "Sub-topic", "Subtopic", "Sub topic"]
SUBJECT_ALIASES = ["Subject", "Course", "Class"]
PROGRAM_ALIASES = ["Module", "Program", "Topic", "Unit", "Chapter"]
SUBTOPIC_ALIASES = ["Sub-topic", "Subtopic", "Sub topic", "Detail", "Description"]
TEACHER_ALIASES = ["Instructor", "Teacher", "Tutor", "Educator"]
DURATION_ALIASES = ["Duration", "Time", "Length"]
VIDEO_ALIASES = ["Video URL", "VideoURL", "Video Link", "URL", "Link"]
DESCRIPTION_ALIASES = ["Description", "Details", "Notes", "Content"]
WEEK_ALIASES = ["Week", "Week Number", "Week #"]
DATE_ALIASES = ["Date", "Scheduled Date", "Lesson Date"]
GRADE_ALIASES = ["Grade", "Class", "Level", "Year"]

# Schedule rows mentioning these are not lessons
BREAK_TERMS = ("break", "holiday", "vacation", "recess")

MISSING = "-"

_WEEK_RE = re.compile(r"(\d+)")
_GRADE_RE = re.compile(r"(?:Grade\s*)?(\d+|[A-Z]+)", re.IGNORECASE)


@dataclass
class LessonPreviewRow:
    """A lesson parsed from a schedule row, not yet saved."""

    row: int
    title: str
    subject: str
    program: str = ""
    subtopic: str = ""
    teacher: str = ""
    duration: str = ""
    video_url: str = ""
    description: str = ""
    scheduled_date: str = ""
    week: str = ""
    grade: str = ""
    status: str = "draft"
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LessonPreview:
    """Preview of a schedule upload."""

    rows: list[LessonPreviewRow] = field(default_factory=list)
    skipped_rows: int = 0

    @property
    def valid_count(self) -> int:
        return sum(1 for r in self.rows if not r.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": [r.to_dict() for r in self.rows],
            "total_rows": len(self.rows),
            "valid_rows": self.valid_count,
            "invalid_rows": len(self.rows) - self.valid_count,
            "skipped_rows": self.skipped_rows,
        }


def clean_multiline(value: str) -> str:
    """Collapse a multi-line cell into one ", "-joined line."""
    if not value:
        return ""
    parts = [re.sub(r"\s+", " ", line).strip() for line in value.splitlines()]
    return ", ".join(p for p in parts if p)


def format_week(value: str) -> str:
    """Extract the week number ("Week 3" -> "3"); other values are kept."""
    text = (value or "").strip()
    match = _WEEK_RE.search(text)
    return match.group(1) if match else text


def format_grade(value: str) -> str:
    """Extract the grade ("Grade 10" -> "10")."""
    text = (value or "").strip()
    match = _GRADE_RE.search(text)
    return match.group(1) if match else text


def is_break_row(*values: str) -> bool:
    """True if any value names a break in the schedule."""
    return any(term in (v or "").lower() for v in values for term in BREAK_TERMS)


def validate_lesson_row(row: LessonPreviewRow | dict[str, Any]) -> list[str]:
    """Problems that would stop a row being imported."""
    data = row.to_dict() if isinstance(row, LessonPreviewRow) else row
    errors = []

    title = (data.get("title") or "").strip()
    subject = (data.get("subject") or "").strip()
    video_url = (data.get("video_url") or "").strip()

    if not title:
        errors.append("Title is required")
    if not subject or subject == MISSING:
        errors.append("Subject is required")
    if video_url and not is_valid_video_url(video_url):
        errors.append("Video URL must be a YouTube or Vimeo link")

    return errors


def preview_lessons_csv(text: str, default_status: str = "draft") -> LessonPreview:
    """Map a schedule upload to lesson rows without saving.

    Args:
        text: CSV or TSV contents
        default_status: Status given to every row (draft or active)

    Raises:
        CsvFormatError: If the file is empty or has no data rows
    """
    status = coerce_status(default_status)
    headers, rows = parse_delimited(text)
    preview = LessonPreview()

    for index, data in enumerate(rows_as_dicts(headers, rows)):
        title = clean_multiline(find_value(data, TITLE_ALIASES))
        subtopic = clean_multiline(find_value(data, SUBTOPIC_ALIASES))
        program = find_value(data, PROGRAM_ALIASES)

        if is_break_row(title, program, subtopic):
            preview.skipped_rows += 1
            continue

        if not title:
            title = subtopic
        if not title:
            title = f"{program} - Lesson {index + 1}" if program else f"Lesson {index + 1}"

        lesson = LessonPreviewRow(
            row=index + 2,
            title=title,
            subject=find_value(data, SUBJECT_ALIASES) or MISSING,
            program=program,
            subtopic=subtopic,
            teacher=find_value(data, TEACHER_ALIASES),
            duration=find_value(data, DURATION_ALIASES),
            video_url=find_value(data, VIDEO_ALIASES),
            description=find_value(data, DESCRIPTION_ALIASES),
            scheduled_date=re.sub(r"\s+", " ", find_value(data, DATE_ALIASES)),
            week=format_week(find_value(data, WEEK_ALIASES)),
            grade=format_grade(find_value(data, GRADE_ALIASES)),
            status=status,
        )
        lesson.errors = validate_lesson_row(lesson)
        preview.rows.append(lesson)

    logger.info(
        "lessons.import_previewed",
        rows=len(preview.rows),
        invalid=len(preview.rows) - preview.valid_count,
        skipped=preview.skipped_rows,
    )
    return preview


def commit_lessons(rows: list[dict[str, Any]]) -> list[LessonRecord]:
    """Save confirmed lesson rows.

    Every row needs a title and subject; one bad row rejects the batch.

    Raises:
        ImportValidationError: If no rows are given or a row is invalid
    """
    if not rows:
        raise ImportValidationError("No lessons data provided")

    records = []
    for position, row in enumerate(rows, start=1):
        title = str(row.get("title") or "").strip()
        subject = str(row.get("subject") or "").strip()
        if not title or not subject or subject == MISSING:
            raise ImportValidationError(
                f"Row {position}: missing required fields title, subject "
                f"(title={title!r}, subject={subject!r})"
            )
        values = {**row, "title": title, "subject": subject}
        values["status"] = coerce_status(row.get("status"))
        if not values.get("teacher") and row.get("instructor"):
            values["teacher"] = row["instructor"]
        records.append(new_lesson(**values))

    insert_many_lessons(records)
    logger.info("lessons.imported", count=len(records))
    return records
