"""Homework CSV import.

One CSV row is one question. Rows sharing (subject, program, homework name)
become one assignment; the first such row supplies the assignment fields.

Expected columns:
    Subject, Program, Homework Name, Date Assigned, Teacher, Date Due,
    Est.Time, XP Awarded, Question ID, Topic, Subtopic, Level, Question,
    Mark Scheme, Image
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from proacademics.core.csv_parser import normalize_header, parse_delimited
from proacademics.db.homework_repository import (
    HomeworkQuestion,
    HomeworkRecord,
    insert_many_homework,
    new_homework,
)
from proacademics.utils.validators import generate_id, normalize_level, parse_date, parse_int

logger = structlog.get_logger(__name__)

REQUIRED_HEADERS = [
    "Subject",
    "Program",
    "Homework Name",
    "Date Assigned",
    "Teacher",
    "Date Due",
    "Est.Time",
    "XP Awarded",
    "Question ID",
    "Topic",
    "Subtopic",
    "Level",
    "Question",
    "Mark Scheme",
    "Image",
]

DEFAULT_ESTIMATED_TIME = 30
DEFAULT_XP = 100

# Image cell value meaning "no image"
NO_IMAGE = "n"


class ImportValidationError(Exception):
    """Raised when an upload cannot be imported at all."""

    def __init__(self, message: str, expected: list[str] | None = None, found: list[str] | None = None):
        self.expected = expected or []
        self.found = found or []
        super().__init__(message)


@dataclass
class HomeworkImportResult:
    """Outcome of parsing (and optionally saving) a homework CSV."""

    assignments: list[HomeworkRecord] = field(default_factory=list)
    valid_rows: int = 0
    invalid_rows: list[str] = field(default_factory=list)
    inserted_count: int = 0

    def to_dict(self) -> dict:
        return {
            "inserted_count": self.inserted_count,
            "valid_rows": self.valid_rows,
            "invalid_rows": self.invalid_rows,
            "total_homework": len(self.assignments),
        }


def missing_headers(headers: list[str]) -> list[str]:
    """Required headers not contained in any header (case-insensitive)."""
    lowered = [h.lower() for h in headers]
    return [
        required
        for required in REQUIRED_HEADERS
        if not any(required.lower() in h for h in lowered)
    ]


def parse_homework_csv(text: str) -> HomeworkImportResult:
    """Parse a homework CSV into unsaved assignments.

    Raises:
        CsvFormatError: If the file is empty or has no data rows
        ImportValidationError: If required columns are missing
    """
    headers, rows = parse_delimited(text)

    missing = missing_headers(headers)
    if missing:
        raise ImportValidationError(
            f"Missing required columns: {', '.join(missing)}",
            expected=REQUIRED_HEADERS,
            found=headers,
        )

    keys = [normalize_header(h) for h in headers]
    result = HomeworkImportResult()
    grouped: dict[tuple[str, str, str], HomeworkRecord] = {}

    for index, row in enumerate(rows):
        line = index + 2
        if len(row) != len(headers):
            result.invalid_rows.append(f"Row {line}: Column count mismatch")
            continue

        data = dict(zip(keys, row))
        try:
            question = _row_to_question(data)
            key = (data.get("subject", ""), data.get("program", ""), data.get("homework_name", ""))
            if key not in grouped:
                grouped[key] = _row_to_assignment(data, question.level)
        except ValueError as e:
            result.invalid_rows.append(f"Row {line}: {e}")
            continue

        grouped[key].question_set.append(question)
        result.valid_rows += 1

    for assignment in grouped.values():
        assignment.total_questions = len(assignment.question_set)

    result.assignments = list(grouped.values())

    if result.invalid_rows:
        logger.warning("homework.import_rows_rejected", count=len(result.invalid_rows))

    return result


def import_homework_csv(text: str) -> HomeworkImportResult:
    """Parse a homework CSV and insert the resulting assignments."""
    result = parse_homework_csv(text)
    result.inserted_count = insert_many_homework(result.assignments)

    logger.info(
        "homework.imported",
        inserted=result.inserted_count,
        valid_rows=result.valid_rows,
        invalid_rows=len(result.invalid_rows),
    )
    return result


def _row_to_question(data: dict[str, str]) -> HomeworkQuestion:
    image = data.get("image", "")
    return HomeworkQuestion(
        question_id=data.get("question_id") or generate_id("q"),
        topic=data.get("topic", ""),
        subtopic=data.get("subtopic", ""),
        level=normalize_level(data.get("level")),
        question=data.get("question", ""),
        mark_scheme=data.get("mark_scheme", ""),
        image=None if not image or image.lower() == NO_IMAGE else image,
    )


def _row_to_assignment(data: dict[str, str], level: str) -> HomeworkRecord:
    """Build the assignment from its first row; raises ValueError on bad dates."""
    return new_homework(
        homework_name=data.get("homework_name", ""),
        subject=data.get("subject", ""),
        program=data.get("program", ""),
        topic=data.get("topic", ""),
        subtopic=data.get("subtopic", ""),
        level=level,
        teacher=data.get("teacher", ""),
        date_assigned=parse_date(data.get("date_assigned", "")),
        due_date=parse_date(data.get("date_due", "")),
        estimated_time=parse_int(data.get("est_time"), DEFAULT_ESTIMATED_TIME) or DEFAULT_ESTIMATED_TIME,
        xp_awarded=parse_int(data.get("xp_awarded"), DEFAULT_XP) or DEFAULT_XP,
        status="draft",
    )
