"""Repository functions for subjects and programs.

A subject owns many programs. Deleting a subject deletes its programs.
Content records (homework, lessons, topics, past papers) reference
subjects and programs by name, so the helpers at the bottom of this module
expose the active hierarchy in the shape the content screens need.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from proacademics.db.database import get_db
from proacademics.utils.validators import generate_id, utc_now

logger = structlog.get_logger(__name__)


class SubjectNotFoundError(Exception):
    """Raised when a program references a subject that does not exist."""

    def __init__(self, subject_id: str):
        self.subject_id = subject_id
        super().__init__(f"Subject '{subject_id}' not found")


class DuplicateNameError(Exception):
    """Raised when a subject or program name is already taken."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} '{name}' already exists")


@dataclass
class ProgramRecord:
    """Program record from database."""

    id: str
    name: str
    subject_id: str
    color: str
    is_active: bool
    created_at: str
    updated_at: str


@dataclass
class SubjectRecord:
    """Subject record from database."""

    id: str
    name: str
    color: str
    is_active: bool
    created_at: str
    updated_at: str
    programs: list[ProgramRecord] = field(default_factory=list)


# =============================================================================
# SUBJECTS
# =============================================================================


def create_subject(name: str, color: str, is_active: bool = True) -> SubjectRecord:
    """Insert a new subject.

    Args:
        name: Display name (trimmed)
        color: UI color token or hex
        is_active: Whether the subject shows up in content screens

    Returns:
        The created SubjectRecord

    Raises:
        DuplicateNameError: If another subject has this name
    """
    if subject_name_exists(name):
        raise DuplicateNameError("subject", name.strip())

    now = utc_now()
    record = SubjectRecord(
        id=generate_id("sub"),
        name=name.strip(),
        color=color,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO subjects (id, name, color, is_active, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.name,
                record.color,
                int(record.is_active),
                record.created_at,
                record.updated_at,
            ),
        )

    logger.debug("subjects.inserted", subject_id=record.id, name=record.name)
    return record


def get_subject(subject_id: str) -> SubjectRecord | None:
    """Get subject by ID, with its programs."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM subjects WHERE id = ?", (subject_id,)
        ).fetchone()
        if row is None:
            return None
        program_rows = conn.execute(
            "SELECT * FROM programs WHERE subject_id = ? ORDER BY name COLLATE NOCASE",
            (subject_id,),
        ).fetchall()

    subject = _row_to_subject(row)
    subject.programs = [_row_to_program(r) for r in program_rows]
    return subject


def list_subjects() -> list[SubjectRecord]:
    """Get all subjects sorted by name (programs not loaded)."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM subjects ORDER BY name COLLATE NOCASE"
        ).fetchall()

    return [_row_to_subject(row) for row in rows]


def update_subject(subject_id: str, changes: dict[str, Any]) -> SubjectRecord | None:
    """Update subject fields.

    Args:
        subject_id: Subject identifier
        changes: Any of name, color, is_active (None values are ignored)

    Returns:
        Updated record, or None if not found

    Raises:
        DuplicateNameError: If another subject has the new name
    """
    fields = {k: v for k, v in changes.items() if k in ("name", "color", "is_active") and v is not None}
    if "name" in fields:
        fields["name"] = fields["name"].strip()
        if subject_name_exists(fields["name"], exclude_id=subject_id):
            raise DuplicateNameError("subject", fields["name"])
    if "is_active" in fields:
        fields["is_active"] = int(bool(fields["is_active"]))
    fields["updated_at"] = utc_now()

    assignments = ", ".join(f"{k} = ?" for k in fields)
    with get_db() as conn:
        cursor = conn.execute(
            f"UPDATE subjects SET {assignments} WHERE id = ?",
            (*fields.values(), subject_id),
        )

    if cursor.rowcount == 0:
        return None

    logger.debug("subjects.updated", subject_id=subject_id)
    return get_subject(subject_id)


def delete_subject(subject_id: str) -> bool:
    """Delete a subject and all of its programs.

    Returns:
        True if deleted, False if not found
    """
    with get_db() as conn:
        programs = conn.execute(
            "DELETE FROM programs WHERE subject_id = ?", (subject_id,)
        ).rowcount
        cursor = conn.execute("DELETE FROM subjects WHERE id = ?", (subject_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.info("subjects.deleted", subject_id=subject_id, programs_deleted=programs)

    return deleted


def subject_name_exists(name: str, exclude_id: str | None = None) -> bool:
    """Check for a subject with this name (case-insensitive)."""
    return _name_exists("subjects", name, exclude_id)


# =============================================================================
# PROGRAMS
# =============================================================================


def create_program(
    name: str, subject_id: str, color: str, is_active: bool = True
) -> ProgramRecord:
    """Insert a new program under a subject.

    Raises:
        SubjectNotFoundError: If subject_id does not exist
        DuplicateNameError: If another program has this name
    """
    if program_name_exists(name):
        raise DuplicateNameError("program", name.strip())

    now = utc_now()
    record = ProgramRecord(
        id=generate_id("prg"),
        name=name.strip(),
        subject_id=subject_id,
        color=color,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )

    with get_db() as conn:
        exists = conn.execute(
            "SELECT 1 FROM subjects WHERE id = ?", (subject_id,)
        ).fetchone()
        if exists is None:
            raise SubjectNotFoundError(subject_id)

        conn.execute(
            """
            INSERT INTO programs (id, name, subject_id, color, is_active, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.name,
                record.subject_id,
                record.color,
                int(record.is_active),
                record.created_at,
                record.updated_at,
            ),
        )

    logger.debug("programs.inserted", program_id=record.id, subject_id=subject_id)
    return record


def get_program(program_id: str) -> ProgramRecord | None:
    """Get program by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM programs WHERE id = ?", (program_id,)
        ).fetchone()

    return _row_to_program(row) if row else None


def list_programs(subject_id: str | None = None) -> list[ProgramRecord]:
    """Get programs sorted by name, optionally for one subject."""
    with get_db() as conn:
        if subject_id:
            rows = conn.execute(
                "SELECT * FROM programs WHERE subject_id = ? ORDER BY name COLLATE NOCASE",
                (subject_id,),
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM programs ORDER BY name COLLATE NOCASE"
            ).fetchall()

    return [_row_to_program(row) for row in rows]


def update_program(program_id: str, changes: dict[str, Any]) -> ProgramRecord | None:
    """Update program fields.

    Raises:
        SubjectNotFoundError: If the program is moved to an unknown subject
        DuplicateNameError: If another program has the new name
    """
    allowed = ("name", "subject_id", "color", "is_active")
    fields = {k: v for k, v in changes.items() if k in allowed and v is not None}
    if "name" in fields:
        fields["name"] = fields["name"].strip()
        if program_name_exists(fields["name"], exclude_id=program_id):
            raise DuplicateNameError("program", fields["name"])
    if "is_active" in fields:
        fields["is_active"] = int(bool(fields["is_active"]))
    fields["updated_at"] = utc_now()

    assignments = ", ".join(f"{k} = ?" for k in fields)
    with get_db() as conn:
        if "subject_id" in fields:
            exists = conn.execute(
                "SELECT 1 FROM subjects WHERE id = ?", (fields["subject_id"],)
            ).fetchone()
            if exists is None:
                raise SubjectNotFoundError(fields["subject_id"])

        cursor = conn.execute(
            f"UPDATE programs SET {assignments} WHERE id = ?",
            (*fields.values(), program_id),
        )

    if cursor.rowcount == 0:
        return None

    logger.debug("programs.updated", program_id=program_id)
    return get_program(program_id)


def delete_program(program_id: str) -> bool:
    """Delete program by ID."""
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM programs WHERE id = ?", (program_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("programs.deleted", program_id=program_id)

    return deleted


def program_name_exists(name: str, exclude_id: str | None = None) -> bool:
    """Check for a program with this name (case-insensitive)."""
    return _name_exists("programs", name, exclude_id)


# =============================================================================
# HIERARCHY
# =============================================================================


def list_subjects_with_programs() -> list[SubjectRecord]:
    """All subjects (by name) with their programs attached."""
    subjects = list_subjects()
    programs = list_programs()

    by_subject: dict[str, list[ProgramRecord]] = {}
    for program in programs:
        by_subject.setdefault(program.subject_id, []).append(program)

    for subject in subjects:
        subject.programs = by_subject.get(subject.id, [])

    return subjects


def get_subject_programs_map() -> dict[str, list[str]]:
    """Active subject name -> names of its active programs."""
    result: dict[str, list[str]] = {}
    for subject in list_subjects_with_programs():
        if not subject.is_active:
            continue
        result[subject.name] = [p.name for p in subject.programs if p.is_active]
    return result


def get_subject_colors_map() -> dict[str, str]:
    """Active subject name -> color."""
    return {s.name: s.color for s in list_subjects() if s.is_active}


def find_duplicate_programs() -> dict[str, list[ProgramRecord]]:
    """Group programs sharing a name (case-insensitive).

    Returns:
        Lower-cased name -> programs, only for groups with more than one entry
    """
    groups: dict[str, list[ProgramRecord]] = {}
    for program in list_programs():
        groups.setdefault(program.name.lower(), []).append(program)

    return {name: group for name, group in groups.items() if len(group) > 1}


def remove_duplicate_programs() -> tuple[int, int]:
    """Delete duplicate programs, keeping the oldest of each name group.

    Returns:
        (deleted_count, kept_count)
    """
    deleted = 0
    kept = 0
    for name, group in find_duplicate_programs().items():
        ordered = sorted(group, key=lambda p: p.created_at)
        kept += 1
        for program in ordered[1:]:
            if delete_program(program.id):
                deleted += 1
        logger.info("programs.duplicates_removed", name=name, removed=len(ordered) - 1)

    return deleted, kept


def _name_exists(table: str, name: str, exclude_id: str | None) -> bool:
    sql = f"SELECT 1 FROM {table} WHERE LOWER(name) = LOWER(?)"
    params: list[Any] = [name.strip()]
    if exclude_id:
        sql += " AND id != ?"
        params.append(exclude_id)

    with get_db() as conn:
        row = conn.execute(sql, params).fetchone()

    return row is not None


def _row_to_subject(row) -> SubjectRecord:
    """Convert database row to SubjectRecord."""
    return SubjectRecord(
        id=row["id"],
        name=row["name"],
        color=row["color"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_program(row) -> ProgramRecord:
    """Convert database row to ProgramRecord."""
    return ProgramRecord(
        id=row["id"],
        name=row["name"],
        subject_id=row["subject_id"],
        color=row["color"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
