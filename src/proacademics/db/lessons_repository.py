"""Repository functions for lessons table."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any

import structlog

from proacademics.db.database import get_db
from proacademics.db.query import ListQuery, Page, build_where, count_by, distinct_column
from proacademics.utils.validators import generate_id, utc_now

logger = structlog.get_logger(__name__)

SEARCH_COLUMNS = ["title", "subject", "program", "subtopic", "teacher", "description"]
FILTER_COLUMNS = {
    "subject": "subject = ?",
    "program": "program = ?",
    "teacher": "teacher = ?",
    "status": "status = ?",
    "type": "type = ?",
}
DISTINCT_FIELDS = ("subject", "program", "teacher")


@dataclass
class LessonRecord:
    """Lesson record from database."""

    id: str
    title: str
    subject: str
    program: str = ""
    subtopic: str = ""
    type: str = "Lesson"
    teacher: str = ""
    duration: str = ""
    description: str = ""
    video_url: str = ""
    zoom_link: str = ""
    scheduled_date: str = ""
    time: str = ""
    week: str = ""
    grade: str = ""
    status: str = "draft"
    created_at: str = ""
    updated_at: str = ""


_COLUMNS = tuple(f.name for f in fields(LessonRecord))
_UPDATABLE = tuple(c for c in _COLUMNS if c not in ("id", "created_at", "updated_at"))


def new_lesson(**values: Any) -> LessonRecord:
    """Build an unsaved LessonRecord; unknown keys are ignored, None -> default."""
    now = utc_now()
    known = {k: v for k, v in values.items() if k in _UPDATABLE and v is not None}
    return LessonRecord(
        id=values.get("id") or generate_id("lesson"),
        created_at=now,
        updated_at=now,
        **known,
    )


def insert_lesson(record: LessonRecord) -> LessonRecord:
    """Insert a lesson."""
    with get_db() as conn:
        _insert(conn, record)

    logger.debug("lessons.inserted", lesson_id=record.id)
    return record


def insert_many_lessons(records: list[LessonRecord]) -> list[LessonRecord]:
    """Insert lessons in one transaction."""
    if not records:
        return []

    with get_db() as conn:
        for record in records:
            _insert(conn, record)

    logger.info("lessons.bulk_inserted", count=len(records))
    return records


def get_lesson(lesson_id: str) -> LessonRecord | None:
    """Get lesson by ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM lessons WHERE id = ?", (lesson_id,)).fetchone()

    return _row_to_record(row) if row else None


def list_lessons(query: ListQuery) -> Page[LessonRecord]:
    """List lessons newest first with search, filters and paging."""
    where, params = build_where(query.search, SEARCH_COLUMNS, query.filters, FILTER_COLUMNS)

    with get_db() as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM lessons{where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM lessons{where} ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
            (*params, query.limit, query.offset),
        ).fetchall()

    return Page(
        items=[_row_to_record(row) for row in rows],
        total=total,
        page=query.page,
        limit=query.limit,
    )


def list_all_lessons(filters: dict[str, Any] | None = None, search: str = "") -> list[LessonRecord]:
    """All matching lessons, unpaged (for export)."""
    where, params = build_where(search, SEARCH_COLUMNS, filters or {}, FILTER_COLUMNS)
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM lessons{where} ORDER BY created_at DESC, rowid DESC", params
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def update_lesson(lesson_id: str, changes: dict[str, Any]) -> LessonRecord | None:
    """Apply a partial update; None values are ignored.

    Returns:
        Updated record, or None if not found
    """
    updates = {k: v for k, v in changes.items() if k in _UPDATABLE and v is not None}
    updates["updated_at"] = utc_now()
    assignments = ", ".join(f"{k} = ?" for k in updates)

    with get_db() as conn:
        cursor = conn.execute(
            f"UPDATE lessons SET {assignments} WHERE id = ?",
            (*updates.values(), lesson_id),
        )

    if cursor.rowcount == 0:
        return None

    logger.debug("lessons.updated", lesson_id=lesson_id)
    return get_lesson(lesson_id)


def delete_lesson(lesson_id: str) -> bool:
    """Delete lesson by ID."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM lessons WHERE id = ?", (lesson_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("lessons.deleted", lesson_id=lesson_id)

    return deleted


def delete_all_lessons() -> int:
    """Delete every lesson.

    Returns:
        Number of deleted lessons
    """
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM lessons")

    logger.info("lessons.deleted_all", count=cursor.rowcount)
    return cursor.rowcount


def distinct_values(field_name: str, subject: str | None = None) -> list[str]:
    """Distinct subject, program or teacher values for filter dropdowns."""
    if field_name not in DISTINCT_FIELDS:
        raise ValueError(f"Unsupported filter field: {field_name}")

    where, params = build_where("", [], {"subject": subject}, {"subject": "subject = ?"})
    with get_db() as conn:
        return distinct_column(conn, "lessons", field_name, where, params)


def lesson_stats() -> dict[str, Any]:
    """Lesson totals and per-subject breakdown."""
    with get_db() as conn:
        total = conn.execute("SELECT COUNT(*) FROM lessons").fetchone()[0]
        active = conn.execute(
            "SELECT COUNT(*) FROM lessons WHERE status = 'active'"
        ).fetchone()[0]
        teachers = conn.execute(
            "SELECT COUNT(DISTINCT teacher) FROM lessons WHERE TRIM(teacher) != ''"
        ).fetchone()[0]
        by_subject = count_by(conn, "lessons", "subject")

    return {
        "total_lessons": total,
        "active_lessons": active,
        "draft_lessons": total - active,
        "total_teachers": teachers,
        "subject_breakdown": [{"subject": s, "count": c} for s, c in by_subject],
    }


def _insert(conn, record: LessonRecord) -> None:
    values = asdict(record)
    placeholders = ", ".join("?" for _ in _COLUMNS)
    conn.execute(
        f"INSERT INTO lessons ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
        tuple(values[c] for c in _COLUMNS),
    )


def _row_to_record(row) -> LessonRecord:
    """Convert database row to LessonRecord."""
    return LessonRecord(**{c: row[c] for c in _COLUMNS})
