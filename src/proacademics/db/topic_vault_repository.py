"""Repository functions for the topic vault.

A topic is a container (subject, program, topic_name) holding an ordered
list of video subtopics, stored as JSON. Nested search and filters run
through SQLite's json_each.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from proacademics.core.grouping import move_item
from proacademics.db.database import get_db
from proacademics.db.query import ListQuery, Page, build_where, count_by, distinct_column
from proacademics.utils.validators import generate_id, utc_now

logger = structlog.get_logger(__name__)


def _subtopic_concat(key: str) -> str:
    return (
        f"(SELECT group_concat(json_extract(s.value, '$.{key}'), ' ') "
        "FROM json_each(topics.subtopics) AS s)"
    )


def _subtopic_match(key: str) -> str:
    return (
        "EXISTS (SELECT 1 FROM json_each(topics.subtopics) AS s "
        f"WHERE json_extract(s.value, '$.{key}') = ?)"
    )


SEARCH_COLUMNS = [
    "topic_name",
    "subject",
    "program",
    "description",
    _subtopic_concat("video_name"),
    _subtopic_concat("teacher"),
]
FILTER_COLUMNS = {
    "subject": "subject = ?",
    "program": "program = ?",
    "status": "status = ?",
    "teacher": _subtopic_match("teacher"),
    "type": _subtopic_match("type"),
}
DISTINCT_FIELDS = ("subject", "program", "teacher")

_SUBTOPIC_FIELDS = (
    "video_name",
    "type",
    "duration",
    "teacher",
    "description",
    "zoom_link",
    "video_embed_link",
    "status",
)


class SubtopicNotFoundError(Exception):
    """Raised when a subtopic id is not part of a topic."""

    def __init__(self, topic_id: str, subtopic_id: str):
        self.topic_id = topic_id
        self.subtopic_id = subtopic_id
        super().__init__(f"Subtopic '{subtopic_id}' not found in topic '{topic_id}'")


@dataclass
class Subtopic:
    """A video inside a topic."""

    id: str
    video_name: str
    type: str = "Lesson"
    duration: str = ""
    teacher: str = ""
    description: str = ""
    zoom_link: str = ""
    video_embed_link: str = ""
    status: str = "draft"


@dataclass
class TopicRecord:
    """Topic vault record from database."""

    id: str
    topic_name: str
    subject: str
    program: str
    description: str = ""
    status: str = "draft"
    subtopics: list[Subtopic] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


def new_subtopic(values: dict[str, Any]) -> Subtopic:
    """Build a Subtopic from a dict, generating an id when missing."""
    known = {k: values[k] for k in _SUBTOPIC_FIELDS if values.get(k) is not None}
    return Subtopic(id=values.get("id") or generate_id("vid"), **known)


def new_topic(
    topic_name: str,
    subject: str,
    program: str,
    description: str = "",
    status: str = "draft",
    subtopics: list[dict[str, Any]] | None = None,
) -> TopicRecord:
    """Build an unsaved TopicRecord."""
    now = utc_now()
    return TopicRecord(
        id=generate_id("topic"),
        topic_name=topic_name.strip(),
        subject=subject.strip(),
        program=program.strip(),
        description=description or "",
        status=status,
        subtopics=[_to_subtopic(s) for s in subtopics or []],
        created_at=now,
        updated_at=now,
    )


def insert_topic(record: TopicRecord) -> TopicRecord:
    """Insert a topic."""
    with get_db() as conn:
        _insert(conn, record)

    logger.debug("topics.inserted", topic_id=record.id)
    return record


def insert_many_topics(records: list[TopicRecord]) -> list[TopicRecord]:
    """Insert topics in one transaction."""
    if not records:
        return []

    with get_db() as conn:
        for record in records:
            _insert(conn, record)

    logger.info("topics.bulk_inserted", count=len(records))
    return records


def get_topic(topic_id: str) -> TopicRecord | None:
    """Get topic by ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM topics WHERE id = ?", (topic_id,)).fetchone()

    return _row_to_record(row) if row else None


def find_topic(subject: str, program: str, topic_name: str) -> TopicRecord | None:
    """Find a topic by subject, program and name (case-insensitive)."""
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT * FROM topics
            WHERE LOWER(subject) = LOWER(?) AND LOWER(program) = LOWER(?)
              AND LOWER(topic_name) = LOWER(?)
            ORDER BY created_at LIMIT 1
            """,
            (subject.strip(), program.strip(), topic_name.strip()),
        ).fetchone()

    return _row_to_record(row) if row else None


def list_topics(query: ListQuery) -> Page[TopicRecord]:
    """List topics newest first with search, filters and paging."""
    where, params = build_where(query.search, SEARCH_COLUMNS, query.filters, FILTER_COLUMNS)

    with get_db() as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM topics{where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM topics{where} ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
            (*params, query.limit, query.offset),
        ).fetchall()

    return Page(
        items=[_row_to_record(row) for row in rows],
        total=total,
        page=query.page,
        limit=query.limit,
    )


def list_all_topics(filters: dict[str, Any] | None = None, search: str = "") -> list[TopicRecord]:
    """All matching topics, oldest first, unpaged (for grouping and export)."""
    where, params = build_where(search, SEARCH_COLUMNS, filters or {}, FILTER_COLUMNS)
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM topics{where} ORDER BY created_at, rowid", params
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def update_topic(topic_id: str, changes: dict[str, Any]) -> TopicRecord | None:
    """Apply a partial update; a subtopics list replaces the stored one.

    Returns:
        Updated record, or None if not found
    """
    allowed = ("topic_name", "subject", "program", "description", "status", "subtopics")
    updates = {k: v for k, v in changes.items() if k in allowed and v is not None}
    if "subtopics" in updates:
        updates["subtopics"] = _dump_subtopics([_to_subtopic(s) for s in updates["subtopics"]])
    updates["updated_at"] = utc_now()
    assignments = ", ".join(f"{k} = ?" for k in updates)

    with get_db() as conn:
        cursor = conn.execute(
            f"UPDATE topics SET {assignments} WHERE id = ?",
            (*updates.values(), topic_id),
        )

    if cursor.rowcount == 0:
        return None

    logger.debug("topics.updated", topic_id=topic_id)
    return get_topic(topic_id)


def delete_topic(topic_id: str) -> bool:
    """Delete topic by ID."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM topics WHERE id = ?", (topic_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("topics.deleted", topic_id=topic_id)

    return deleted


def delete_all_topics() -> int:
    """Delete every topic; returns the count."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM topics")

    logger.info("topics.deleted_all", count=cursor.rowcount)
    return cursor.rowcount


# =============================================================================
# SUBTOPICS
# =============================================================================


def add_subtopics(topic_id: str, values: list[dict[str, Any] | Subtopic]) -> TopicRecord | None:
    """Append subtopics to a topic, keeping their order.

    Returns:
        Updated record, or None if the topic does not exist
    """
    record = get_topic(topic_id)
    if record is None:
        return None

    record.subtopics.extend(_to_subtopic(v) for v in values)
    _save_subtopics(record)
    logger.debug("topics.subtopics_added", topic_id=topic_id, count=len(values))
    return record


def add_subtopic(topic_id: str, values: dict[str, Any]) -> Subtopic | None:
    """Append one subtopic.

    Returns:
        The new subtopic, or None if the topic does not exist
    """
    record = add_subtopics(topic_id, [values])
    if record is None:
        return None
    return record.subtopics[-1]


def update_subtopic(topic_id: str, subtopic_id: str, changes: dict[str, Any]) -> Subtopic | None:
    """Update a subtopic in place.

    Returns:
        Updated subtopic, or None if the topic does not exist

    Raises:
        SubtopicNotFoundError: If the subtopic is not in the topic
    """
    record = get_topic(topic_id)
    if record is None:
        return None

    subtopic = _find_subtopic(record, subtopic_id)
    for name in _SUBTOPIC_FIELDS:
        if changes.get(name) is not None:
            setattr(subtopic, name, changes[name])

    _save_subtopics(record)
    logger.debug("topics.subtopic_updated", topic_id=topic_id, subtopic_id=subtopic_id)
    return subtopic


def delete_subtopic(topic_id: str, subtopic_id: str) -> bool:
    """Remove a subtopic.

    Returns:
        True if removed, False if the topic does not exist

    Raises:
        SubtopicNotFoundError: If the subtopic is not in the topic
    """
    record = get_topic(topic_id)
    if record is None:
        return False

    subtopic = _find_subtopic(record, subtopic_id)
    record.subtopics.remove(subtopic)
    _save_subtopics(record)
    logger.debug("topics.subtopic_deleted", topic_id=topic_id, subtopic_id=subtopic_id)
    return True


def reorder_subtopics(topic_id: str, from_index: int, to_index: int) -> TopicRecord | None:
    """Move the subtopic at from_index to to_index.

    Returns:
        Updated record, or None if the topic does not exist

    Raises:
        IndexError: If either index is out of range
    """
    record = get_topic(topic_id)
    if record is None:
        return None

    record.subtopics = move_item(record.subtopics, from_index, to_index)
    _save_subtopics(record)
    logger.debug("topics.subtopics_reordered", topic_id=topic_id, src=from_index, dst=to_index)
    return record


# =============================================================================
# FILTERS AND STATS
# =============================================================================


def distinct_values(field_name: str, subject: str | None = None) -> list[str]:
    """Distinct subjects or programs, or teachers across all subtopics."""
    if field_name not in DISTINCT_FIELDS:
        raise ValueError(f"Unsupported filter field: {field_name}")

    where, params = build_where("", [], {"subject": subject}, {"subject": "subject = ?"})
    with get_db() as conn:
        if field_name != "teacher":
            return distinct_column(conn, "topics", field_name, where, params)

        rows = conn.execute(
            "SELECT DISTINCT json_extract(s.value, '$.teacher') AS teacher "
            f"FROM topics, json_each(topics.subtopics) AS s{where}",
            params,
        ).fetchall()

    return sorted({row["teacher"] for row in rows if row["teacher"] and row["teacher"].strip()})


def topic_vault_stats() -> dict[str, Any]:
    """Totals, distinct teachers and subject/type breakdowns."""
    with get_db() as conn:
        total = conn.execute("SELECT COUNT(*) FROM topics").fetchone()[0]
        active = conn.execute(
            "SELECT COUNT(*) FROM topics WHERE status = 'active'"
        ).fetchone()[0]
        draft = conn.execute(
            "SELECT COUNT(*) FROM topics WHERE status = 'draft'"
        ).fetchone()[0]
        subtopics = conn.execute(
            "SELECT COUNT(*) FROM topics, json_each(topics.subtopics)"
        ).fetchone()[0]
        teachers = conn.execute(
            """
            SELECT COUNT(DISTINCT json_extract(s.value, '$.teacher'))
            FROM topics, json_each(topics.subtopics) AS s
            WHERE TRIM(COALESCE(json_extract(s.value, '$.teacher'), '')) != ''
            """
        ).fetchone()[0]
        by_subject = count_by(conn, "topics", "subject")
        by_type = conn.execute(
            """
            SELECT json_extract(s.value, '$.type') AS type_name, COUNT(*) AS count
            FROM topics, json_each(topics.subtopics) AS s
            GROUP BY type_name ORDER BY count DESC, type_name ASC
            """
        ).fetchall()

    return {
        "total_topics": total,
        "active_topics": active,
        "draft_topics": draft,
        "total_subtopics": subtopics,
        "total_teachers": teachers,
        "subject_breakdown": [{"subject": s, "count": c} for s, c in by_subject],
        "type_breakdown": [{"type": row["type_name"], "count": row["count"]} for row in by_type],
    }


def _find_subtopic(record: TopicRecord, subtopic_id: str) -> Subtopic:
    for subtopic in record.subtopics:
        if subtopic.id == subtopic_id:
            return subtopic
    raise SubtopicNotFoundError(record.id, subtopic_id)


def _save_subtopics(record: TopicRecord) -> None:
    record.updated_at = utc_now()
    with get_db() as conn:
        conn.execute(
            "UPDATE topics SET subtopics = ?, updated_at = ? WHERE id = ?",
            (_dump_subtopics(record.subtopics), record.updated_at, record.id),
        )


def _insert(conn, record: TopicRecord) -> None:
    conn.execute(
        """
        INSERT INTO topics (
            id, topic_name, subject, program, description, status,
            subtopics, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            record.id,
            record.topic_name,
            record.subject,
            record.program,
            record.description,
            record.status,
            _dump_subtopics(record.subtopics),
            record.created_at,
            record.updated_at,
        ),
    )


def _to_subtopic(value: Subtopic | dict[str, Any]) -> Subtopic:
    if isinstance(value, Subtopic):
        return value
    return new_subtopic(value)


def _dump_subtopics(subtopics: list[Subtopic]) -> str:
    return json.dumps([asdict(s) for s in subtopics])


def _row_to_record(row) -> TopicRecord:
    """Convert database row to TopicRecord."""
    subtopics = json.loads(row["subtopics"]) if row["subtopics"] else []
    return TopicRecord(
        id=row["id"],
        topic_name=row["topic_name"],
        subject=row["subject"],
        program=row["program"],
        description=row["description"],
        status=row["status"],
        subtopics=[_to_subtopic(s) for s in subtopics],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
