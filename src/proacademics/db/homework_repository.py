"""Repository functions for homework assignments.

An assignment carries its questions inline (question_set, stored as JSON).
total_questions always equals len(question_set).
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from proacademics.db.database import get_db
from proacademics.db.query import ListQuery, Page, build_where, count_by, distinct_column
from proacademics.utils.validators import generate_id, utc_now

logger = structlog.get_logger(__name__)

SEARCH_COLUMNS = ["homework_name", "topic", "subtopic", "teacher"]
FILTER_COLUMNS = {
    "subject": "subject = ?",
    "program": "program = ?",
    "status": "status = ?",
    "level": "level = ?",
    "teacher": "teacher = ?",
}
DISTINCT_FIELDS = ("subject", "program", "teacher")

_COLUMNS = (
    "id",
    "homework_name",
    "subject",
    "program",
    "topic",
    "subtopic",
    "level",
    "teacher",
    "date_assigned",
    "due_date",
    "estimated_time",
    "xp_awarded",
    "question_set",
    "total_questions",
    "completed_questions",
    "completion_status",
    "xp_earned",
    "status",
    "created_at",
    "updated_at",
)
_UPDATABLE = (
    "homework_name",
    "subject",
    "program",
    "topic",
    "subtopic",
    "level",
    "teacher",
    "date_assigned",
    "due_date",
    "estimated_time",
    "xp_awarded",
    "question_set",
    "status",
)


@dataclass
class HomeworkQuestion:
    """A question inside a homework assignment."""

    question_id: str
    topic: str
    subtopic: str
    level: str
    question: str
    mark_scheme: str
    image: str | None = None


@dataclass
class HomeworkRecord:
    """Homework assignment record from database."""

    id: str
    homework_name: str
    subject: str
    program: str
    topic: str
    subtopic: str
    level: str
    teacher: str
    date_assigned: str
    due_date: str
    estimated_time: int = 30
    xp_awarded: int = 100
    question_set: list[HomeworkQuestion] = field(default_factory=list)
    total_questions: int = 0
    completed_questions: int = 0
    completion_status: str = "not_started"
    xp_earned: int = 0
    status: str = "draft"
    created_at: str = ""
    updated_at: str = ""


def new_homework(**fields: Any) -> HomeworkRecord:
    """Build an unsaved HomeworkRecord with id and timestamps filled in."""
    questions = [_to_question(q) for q in fields.pop("question_set", None) or []]
    now = utc_now()
    record = HomeworkRecord(
        id=fields.pop("id", None) or generate_id("hw"),
        question_set=questions,
        created_at=now,
        updated_at=now,
        **fields,
    )
    record.total_questions = len(record.question_set)
    return record


def insert_homework(record: HomeworkRecord) -> HomeworkRecord:
    """Insert a homework assignment.

    Raises:
        sqlite3.IntegrityError: If the id already exists or a value
            violates a CHECK constraint
    """
    with get_db() as conn:
        _insert(conn, record)

    logger.debug("homework.inserted", homework_id=record.id)
    return record


def insert_many_homework(records: list[HomeworkRecord]) -> int:
    """Insert several assignments in one transaction.

    Returns:
        Number of inserted assignments
    """
    if not records:
        return 0

    with get_db() as conn:
        for record in records:
            _insert(conn, record)

    logger.info("homework.bulk_inserted", count=len(records))
    return len(records)


def get_homework(homework_id: str) -> HomeworkRecord | None:
    """Get homework by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM homework WHERE id = ?", (homework_id,)
        ).fetchone()

    return _row_to_record(row) if row else None


def list_homework(query: ListQuery) -> Page[HomeworkRecord]:
    """List homework newest first with search, filters and paging."""
    where, params = build_where(query.search, SEARCH_COLUMNS, query.filters, FILTER_COLUMNS)

    with get_db() as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM homework{where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM homework{where} ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
            (*params, query.limit, query.offset),
        ).fetchall()

    return Page(
        items=[_row_to_record(row) for row in rows],
        total=total,
        page=query.page,
        limit=query.limit,
    )


def list_all_homework(filters: dict[str, Any] | None = None, search: str = "") -> list[HomeworkRecord]:
    """All matching assignments, unpaged (for export)."""
    where, params = build_where(search, SEARCH_COLUMNS, filters or {}, FILTER_COLUMNS)
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM homework{where} ORDER BY created_at DESC, rowid DESC", params
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def update_homework(homework_id: str, changes: dict[str, Any]) -> HomeworkRecord | None:
    """Apply a partial update.

    Args:
        homework_id: Assignment identifier
        changes: Field -> new value; None values are ignored. A new
            question_set also resets total_questions.

    Returns:
        Updated record, or None if not found
    """
    fields = {k: v for k, v in changes.items() if k in _UPDATABLE and v is not None}

    if "question_set" in fields:
        questions = [_to_question(q) for q in fields["question_set"]]
        fields["question_set"] = json.dumps([asdict(q) for q in questions])
        fields["total_questions"] = len(questions)

    fields["updated_at"] = utc_now()
    assignments = ", ".join(f"{k} = ?" for k in fields)

    with get_db() as conn:
        cursor = conn.execute(
            f"UPDATE homework SET {assignments} WHERE id = ?",
            (*fields.values(), homework_id),
        )

    if cursor.rowcount == 0:
        return None

    logger.debug("homework.updated", homework_id=homework_id, fields=sorted(fields))
    return get_homework(homework_id)


def delete_homework(homework_id: str) -> bool:
    """Delete homework by ID."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM homework WHERE id = ?", (homework_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("homework.deleted", homework_id=homework_id)

    return deleted


def distinct_values(field_name: str, subject: str | None = None) -> list[str]:
    """Distinct values of subject, program or teacher for filter dropdowns.

    Args:
        field_name: One of subject, program, teacher
        subject: Restrict to assignments of this subject

    Raises:
        ValueError: For an unsupported field
    """
    if field_name not in DISTINCT_FIELDS:
        raise ValueError(f"Unsupported filter field: {field_name}")

    where, params = build_where("", [], {"subject": subject}, {"subject": "subject = ?"})
    with get_db() as conn:
        return distinct_column(conn, "homework", field_name, where, params)


def homework_stats() -> dict[str, Any]:
    """Counts by status, subject and level, plus the five newest assignments."""
    with get_db() as conn:
        total = conn.execute("SELECT COUNT(*) FROM homework").fetchone()[0]
        active = conn.execute(
            "SELECT COUNT(*) FROM homework WHERE status = 'active'"
        ).fetchone()[0]
        draft = conn.execute(
            "SELECT COUNT(*) FROM homework WHERE status = 'draft'"
        ).fetchone()[0]
        by_subject = count_by(conn, "homework", "subject")
        by_level = count_by(conn, "homework", "level")
        recent = conn.execute(
            """
            SELECT id, homework_name, subject, status, created_at FROM homework
            ORDER BY created_at DESC, rowid DESC LIMIT 5
            """
        ).fetchall()

    return {
        "total": total,
        "active": active,
        "draft": draft,
        "by_subject": [{"subject": s, "count": c} for s, c in by_subject],
        "by_level": [{"level": lv, "count": c} for lv, c in by_level],
        "recent_activity": [dict(row) for row in recent],
    }


def _insert(conn, record: HomeworkRecord) -> None:
    values = asdict(record)
    values["question_set"] = json.dumps(values["question_set"])
    placeholders = ", ".join("?" for _ in _COLUMNS)
    conn.execute(
        f"INSERT INTO homework ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
        tuple(values[c] for c in _COLUMNS),
    )


def _to_question(value: HomeworkQuestion | dict[str, Any]) -> HomeworkQuestion:
    if isinstance(value, HomeworkQuestion):
        return value
    return HomeworkQuestion(
        question_id=value.get("question_id") or generate_id("q"),
        topic=value.get("topic", ""),
        subtopic=value.get("subtopic", ""),
        level=value.get("level", "hard"),
        question=value.get("question", ""),
        mark_scheme=value.get("mark_scheme", ""),
        image=value.get("image") or None,
    )


def _row_to_record(row) -> HomeworkRecord:
    """Convert database row to HomeworkRecord."""
    questions = json.loads(row["question_set"]) if row["question_set"] else []
    return HomeworkRecord(
        id=row["id"],
        homework_name=row["homework_name"],
        subject=row["subject"],
        program=row["program"],
        topic=row["topic"],
        subtopic=row["subtopic"],
        level=row["level"],
        teacher=row["teacher"],
        date_assigned=row["date_assigned"],
        due_date=row["due_date"],
        estimated_time=row["estimated_time"],
        xp_awarded=row["xp_awarded"],
        question_set=[_to_question(q) for q in questions],
        total_questions=row["total_questions"],
        completed_questions=row["completed_questions"],
        completion_status=row["completion_status"],
        xp_earned=row["xp_earned"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
