"""Topic vault CSV import.

A topic vault CSV is flat: one row per video. Rows are validated, then
grouped into topic containers keyed by (subject, program, topic). Saving
merges each container into an existing topic with the same key, or creates
a new topic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from proacademics.core.csv_parser import parse_delimited
from proacademics.core.grouping import ensure_url_protocol
from proacademics.core.homework_importer import ImportValidationError
from proacademics.db.topic_vault_repository import (
    TopicRecord,
    add_subtopics,
    find_topic,
    insert_topic,
    new_subtopic,
    new_topic,
)
from proacademics.utils.validators import VALID_CONTENT_TYPES, VALID_STATUSES

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("video_name", "topic", "subject", "program", "teacher", "video_embed_link")

# Normalized header -> field
HEADER_ALIASES = {
    "videoname": "video_name",
    "video": "video_name",
    "name": "video_name",
    "topic": "topic",
    "title": "topic",
    "subject": "subject",
    "program": "program",
    "programme": "program",
    "type": "type",
    "contenttype": "type",
    "duration": "duration",
    "length": "duration",
    "time": "duration",
    "teacher": "teacher",
    "instructor": "teacher",
    "tutor": "teacher",
    "description": "description",
    "desc": "description",
    "summary": "description",
    "zoomlink": "zoom_link",
    "zoom": "zoom_link",
    "meetinglink": "zoom_link",
    "videoembedlink": "video_embed_link",
    "videolink": "video_embed_link",
    "embedlink": "video_embed_link",
    "videourl": "video_embed_link",
    "url": "video_embed_link",
    "status": "status",
}

TEMPLATE_CSV = (
    "video_name,topic,subject,program,type,duration,teacher,description,zoom_link,video_embed_link,status\n"
    '"Introduction to Algebra","Basic Algebra","Mathematics","GCSE","Lesson","45 minutes",'
    '"Mr. Smith","Introduction to algebraic concepts","https://zoom.us/j/123456789",'
    '"https://youtube.com/embed/abc123","active"\n'
    '"Chemical Reactions","Acids and Bases","Chemistry","A-Level","Tutorial","30 minutes",'
    '"Dr. Johnson","Understanding chemical reactions","",'
    '"https://youtube.com/embed/def456","draft"\n'
)


@dataclass
class RowError:
    """A validation problem in one CSV row."""

    row: int
    field: str
    message: str


@dataclass
class TopicImportPreview:
    """Valid video rows and the errors of the rejected ones."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": self.rows,
            "errors": [e.__dict__ for e in self.errors],
            "valid_rows": len(self.rows),
            "topics": [
                {**topic, "subtopic_count": len(topic["subtopics"])}
                for topic in group_rows_into_topics(self.rows)
            ],
        }


def normalize_topic_header(header: str) -> str:
    """Lower-case and drop underscores and whitespace."""
    return "".join(ch for ch in header.lower() if ch != "_" and not ch.isspace())


def map_header(header: str) -> str | None:
    """Field a CSV header feeds, or None for unknown headers."""
    normalized = normalize_topic_header(header)
    if normalized in HEADER_ALIASES:
        return HEADER_ALIASES[normalized]
    if "video" in normalized and "name" in normalized:
        return "video_name"
    if "embed" in normalized or "url" in normalized:
        return "video_embed_link"
    if "zoom" in normalized:
        return "zoom_link"
    return None


def validate_topic_row(row: dict[str, Any], line: int) -> list[RowError]:
    """Validation errors for one mapped row."""
    errors = [
        RowError(line, name, f"{name} is required")
        for name in REQUIRED_FIELDS
        if not str(row.get(name) or "").strip()
    ]
    if row.get("type") and row["type"] not in VALID_CONTENT_TYPES:
        errors.append(RowError(line, "type", "Type must be Lesson, Tutorial, or Workshop"))
    if row.get("status") and row["status"] not in VALID_STATUSES:
        errors.append(RowError(line, "status", "Status must be draft or active"))
    return errors


def preview_topics_csv(text: str) -> TopicImportPreview:
    """Map and validate a topic vault CSV without saving.

    Raises:
        CsvFormatError: If the file is empty or has no data rows
    """
    headers, rows = parse_delimited(text)
    fields = [map_header(h) for h in headers]
    preview = TopicImportPreview()

    for index, cells in enumerate(rows):
        line = index + 2
        row: dict[str, Any] = {}
        for name, value in zip(fields, cells):
            if name and value and not row.get(name):
                row[name] = value

        errors = validate_topic_row(row, line)
        if errors:
            preview.errors.extend(errors)
            continue

        row.setdefault("type", "Lesson")
        row.setdefault("status", "draft")
        preview.rows.append(row)

    if preview.errors:
        logger.warning("topics.import_rows_rejected", count=len(preview.errors))

    return preview


def group_rows_into_topics(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Group flat video rows into topic containers.

    Returns:
        One dict per (subject, program, topic) in first-seen order, with the
        rows' videos as subtopics in row order
    """
    topics: dict[tuple[str, str, str], dict[str, Any]] = {}
    for row in rows:
        key = (row["subject"].strip(), row["program"].strip(), row["topic"].strip())
        if key not in topics:
            topics[key] = {
                "subject": key[0],
                "program": key[1],
                "topic_name": key[2],
                "status": row.get("status") or "draft",
                "subtopics": [],
            }
        topics[key]["subtopics"].append(
            {
                "video_name": row["video_name"],
                "type": row.get("type") or "Lesson",
                "duration": row.get("duration") or "",
                "teacher": row["teacher"],
                "description": row.get("description") or "",
                "zoom_link": ensure_url_protocol(row.get("zoom_link") or ""),
                "video_embed_link": ensure_url_protocol(row["video_embed_link"]),
                "status": row.get("status") or "draft",
            }
        )
    return list(topics.values())


def commit_topics(rows: list[dict[str, Any]]) -> dict[str, Any]:
    """Save confirmed video rows into the topic vault.

    Every row must pass validation; one bad row rejects the batch.

    Returns:
        {"created": n, "updated": n, "subtopics_added": n, "topics": [TopicRecord]}

    Raises:
        ImportValidationError: If no rows are given or a row is invalid
    """
    if not rows:
        raise ImportValidationError("No topic vault data provided")

    for position, row in enumerate(rows, start=1):
        errors = validate_topic_row(row, position)
        if errors:
            messages = "; ".join(e.message for e in errors)
            raise ImportValidationError(f"Row {position}: {messages}")

    created = 0
    updated = 0
    added = 0
    saved: list[TopicRecord] = []

    for group in group_rows_into_topics(rows):
        subtopics = [new_subtopic(s) for s in group["subtopics"]]
        existing = find_topic(group["subject"], group["program"], group["topic_name"])
        if existing is not None:
            record = add_subtopics(existing.id, subtopics)
            updated += 1
        else:
            record = insert_topic(
                new_topic(
                    topic_name=group["topic_name"],
                    subject=group["subject"],
                    program=group["program"],
                    status=group["status"],
                    subtopics=subtopics,
                )
            )
            created += 1
        added += len(subtopics)
        saved.append(record)

    logger.info("topics.imported", created=created, updated=updated, subtopics=added)
    return {"created": created, "updated": updated, "subtopics_added": added, "topics": saved}
