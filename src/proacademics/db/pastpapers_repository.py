"""Repository functions for past papers.

A past paper (e.g. "AQA Maths June 2023") groups several paper sections
(Paper 1, Paper 2, ...). Each section carries its question-paper and
mark-scheme links plus an ordered list of question walkthrough videos.
Sections are addressed by their index in the papers list.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from proacademics.db.database import get_db
from proacademics.db.query import ListQuery, Page, build_where, distinct_column
from proacademics.utils.validators import generate_id, utc_now

logger = structlog.get_logger(__name__)

SEARCH_COLUMNS = ["paper_name", "board", "subject"]
FILTER_COLUMNS = {
    "subject": "subject = ?",
    "program": "program = ?",
    "board": "board = ?",
    "status": "status = ?",
    "year": "year = ?",
}
DISTINCT_FIELDS = ("subject", "program", "board", "year")

_QUESTION_FIELDS = (
    "question_number",
    "topic",
    "question_name",
    "question_description",
    "duration",
    "teacher",
    "video_embed_link",
)


class PaperIndexError(Exception):
    """Raised when a paper section index does not exist."""

    def __init__(self, past_paper_id: str, paper_index: int):
        self.past_paper_id = past_paper_id
        self.paper_index = paper_index
        super().__init__(f"Paper not found at index {paper_index}")


@dataclass
class QuestionVideo:
    """Walkthrough video for one exam question."""

    id: str
    question_number: int
    topic: str
    question_name: str
    question_description: str
    duration: str
    teacher: str
    video_embed_link: str
    created_at: str = ""
    updated_at: str = ""


@dataclass
class PaperSection:
    """One paper within a past paper set."""

    name: str
    question_paper_url: str
    mark_scheme_url: str
    questions: list[QuestionVideo] = field(default_factory=list)


@dataclass
class PastPaperRecord:
    """Past paper record from database."""

    id: str
    paper_name: str
    board: str
    year: int
    subject: str
    program: str
    status: str = "draft"
    papers: list[PaperSection] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


def insert_past_paper(
    paper_name: str,
    board: str,
    year: int,
    subject: str,
    program: str,
    status: str,
    papers: list[dict[str, Any]] | None = None,
) -> PastPaperRecord:
    """Insert a new past paper.

    Papers may be empty: a past paper can be created as an empty container
    and filled later.
    """
    now = utc_now()
    record = PastPaperRecord(
        id=generate_id("pp"),
        paper_name=paper_name,
        board=board,
        year=int(year),
        subject=subject,
        program=program,
        status=status,
        papers=[_to_section(p) for p in papers or []],
        created_at=now,
        updated_at=now,
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO pastpapers (
                id, paper_name, board, year, subject, program, status,
                papers, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.paper_name,
                record.board,
                record.year,
                record.subject,
                record.program,
                record.status,
                _dump_papers(record.papers),
                record.created_at,
                record.updated_at,
            ),
        )

    logger.debug("pastpapers.inserted", past_paper_id=record.id)
    return record


def get_past_paper(past_paper_id: str) -> PastPaperRecord | None:
    """Get past paper by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM pastpapers WHERE id = ?", (past_paper_id,)
        ).fetchone()

    return _row_to_record(row) if row else None


def list_past_papers(query: ListQuery) -> Page[PastPaperRecord]:
    """List past papers newest first with search, filters and paging."""
    where, params = build_where(query.search, SEARCH_COLUMNS, query.filters, FILTER_COLUMNS)

    with get_db() as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM pastpapers{where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM pastpapers{where} ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
            (*params, query.limit, query.offset),
        ).fetchall()

    return Page(
        items=[_row_to_record(row) for row in rows],
        total=total,
        page=query.page,
        limit=query.limit,
    )


def list_all_past_papers(filters: dict[str, Any] | None = None, search: str = "") -> list[PastPaperRecord]:
    """All matching past papers, unpaged (for export)."""
    where, params = build_where(search, SEARCH_COLUMNS, filters or {}, FILTER_COLUMNS)
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM pastpapers{where} ORDER BY created_at DESC, rowid DESC", params
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def update_past_paper(past_paper_id: str, changes: dict[str, Any]) -> PastPaperRecord | None:
    """Replace past paper fields.

    A section in changes["papers"] given without a questions list keeps the
    questions currently stored at the same index.

    Returns:
        Updated record, or None if not found
    """
    current = get_past_paper(past_paper_id)
    if current is None:
        return None

    allowed = ("paper_name", "board", "year", "subject", "program", "status")
    updates: dict[str, Any] = {k: v for k, v in changes.items() if k in allowed and v is not None}
    if "year" in updates:
        updates["year"] = int(updates["year"])

    if changes.get("papers") is not None:
        sections = []
        for index, paper in enumerate(changes["papers"]):
            section = _to_section(paper)
            if _questions_omitted(paper) and index < len(current.papers):
                section.questions = current.papers[index].questions
            sections.append(section)
        updates["papers"] = _dump_papers(sections)

    updates["updated_at"] = utc_now()
    assignments = ", ".join(f"{k} = ?" for k in updates)

    with get_db() as conn:
        conn.execute(
            f"UPDATE pastpapers SET {assignments} WHERE id = ?",
            (*updates.values(), past_paper_id),
        )

    logger.debug("pastpapers.updated", past_paper_id=past_paper_id)
    return get_past_paper(past_paper_id)


def delete_past_paper(past_paper_id: str) -> bool:
    """Delete past paper by ID."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM pastpapers WHERE id = ?", (past_paper_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("pastpapers.deleted", past_paper_id=past_paper_id)

    return deleted


def delete_all_past_papers() -> int:
    """Delete every past paper; returns the count."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM pastpapers")

    logger.info("pastpapers.deleted_all", count=cursor.rowcount)
    return cursor.rowcount


def distinct_values(field_name: str, subject: str | None = None) -> list:
    """Distinct subject, program, board or year values."""
    if field_name not in DISTINCT_FIELDS:
        raise ValueError(f"Unsupported filter field: {field_name}")

    where, params = build_where("", [], {"subject": subject}, {"subject": "subject = ?"})
    with get_db() as conn:
        return distinct_column(conn, "pastpapers", field_name, where, params)


# =============================================================================
# QUESTIONS
# =============================================================================


def list_questions(past_paper_id: str, paper_index: int) -> list[QuestionVideo] | None:
    """Questions of one paper section.

    Returns:
        Questions, or None if the past paper does not exist

    Raises:
        PaperIndexError: If the section index is out of range
    """
    record = get_past_paper(past_paper_id)
    if record is None:
        return None

    return _section(record, paper_index).questions


def add_question(
    past_paper_id: str, paper_index: int, values: dict[str, Any]
) -> QuestionVideo | None:
    """Append a question video to a paper section.

    Returns:
        The new question, or None if the past paper does not exist

    Raises:
        PaperIndexError: If the section index is out of range
    """
    record = get_past_paper(past_paper_id)
    if record is None:
        return None

    section = _section(record, paper_index)
    now = utc_now()
    question = QuestionVideo(
        id=generate_id("q"),
        question_number=int(values["question_number"]),
        topic=values["topic"],
        question_name=values["question_name"],
        question_description=values["question_description"],
        duration=values["duration"],
        teacher=values["teacher"],
        video_embed_link=values["video_embed_link"],
        created_at=now,
        updated_at=now,
    )
    section.questions.append(question)
    _save_papers(record)

    logger.debug(
        "pastpapers.question_added",
        past_paper_id=past_paper_id,
        paper_index=paper_index,
        question_id=question.id,
    )
    return question


def update_question(
    past_paper_id: str, paper_index: int, question_id: str, changes: dict[str, Any]
) -> QuestionVideo | None:
    """Update a question in place.

    Returns:
        Updated question, or None if the past paper or question is missing

    Raises:
        PaperIndexError: If the section index is out of range
    """
    record = get_past_paper(past_paper_id)
    if record is None:
        return None

    section = _section(record, paper_index)
    for question in section.questions:
        if question.id != question_id:
            continue
        for name in _QUESTION_FIELDS:
            if changes.get(name) is not None:
                value = changes[name]
                setattr(question, name, int(value) if name == "question_number" else value)
        question.updated_at = utc_now()
        _save_papers(record)
        logger.debug("pastpapers.question_updated", question_id=question_id)
        return question

    return None


def delete_question(past_paper_id: str, paper_index: int, question_id: str) -> bool:
    """Remove a question from a paper section.

    Returns:
        True if removed, False if the past paper or question is missing

    Raises:
        PaperIndexError: If the section index is out of range
    """
    record = get_past_paper(past_paper_id)
    if record is None:
        return False

    section = _section(record, paper_index)
    remaining = [q for q in section.questions if q.id != question_id]
    if len(remaining) == len(section.questions):
        return False

    section.questions = remaining
    _save_papers(record)
    logger.debug("pastpapers.question_deleted", question_id=question_id)
    return True


def _section(record: PastPaperRecord, paper_index: int) -> PaperSection:
    if paper_index < 0 or paper_index >= len(record.papers):
        raise PaperIndexError(record.id, paper_index)
    return record.papers[paper_index]


def _save_papers(record: PastPaperRecord) -> None:
    with get_db() as conn:
        conn.execute(
            "UPDATE pastpapers SET papers = ?, updated_at = ? WHERE id = ?",
            (_dump_papers(record.papers), utc_now(), record.id),
        )


def _questions_omitted(paper: PaperSection | dict[str, Any]) -> bool:
    if isinstance(paper, PaperSection):
        return False
    return paper.get("questions") is None


def _to_question(value: QuestionVideo | dict[str, Any]) -> QuestionVideo:
    if isinstance(value, QuestionVideo):
        return value
    return QuestionVideo(
        id=value.get("id") or generate_id("q"),
        question_number=int(value.get("question_number") or 0),
        topic=value.get("topic", ""),
        question_name=value.get("question_name", ""),
        question_description=value.get("question_description", ""),
        duration=value.get("duration", ""),
        teacher=value.get("teacher", ""),
        video_embed_link=value.get("video_embed_link", ""),
        created_at=value.get("created_at", ""),
        updated_at=value.get("updated_at", ""),
    )


def _to_section(value: PaperSection | dict[str, Any]) -> PaperSection:
    if isinstance(value, PaperSection):
        return value
    return PaperSection(
        name=value["name"],
        question_paper_url=value["question_paper_url"],
        mark_scheme_url=value["mark_scheme_url"],
        questions=[_to_question(q) for q in value.get("questions") or []],
    )


def _dump_papers(papers: list[PaperSection]) -> str:
    return json.dumps([asdict(p) for p in papers])


def _row_to_record(row) -> PastPaperRecord:
    """Convert database row to PastPaperRecord."""
    papers = json.loads(row["papers"]) if row["papers"] else []
    return PastPaperRecord(
        id=row["id"],
        paper_name=row["paper_name"],
        board=row["board"],
        year=row["year"],
        subject=row["subject"],
        program=row["program"],
        status=row["status"],
        papers=[_to_section(p) for p in papers],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
