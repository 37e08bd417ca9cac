"""Tests for subject and program persistence (F1)."""

import pytest

from proacademics.db.database import get_db
from proacademics.db.subjects_repository import (
    DuplicateNameError,
    SubjectNotFoundError,
    create_program,
    create_subject,
    delete_subject,
    find_duplicate_programs,
    get_program,
    get_subject,
    get_subject_colors_map,
    get_subject_programs_map,
    list_programs,
    list_subjects_with_programs,
    remove_duplicate_programs,
    update_program,
    update_subject,
)


def _insert_raw_program(program_id: str, name: str, subject_id: str, created_at: str) -> None:
    """Insert a program bypassing the unique-name check (legacy data)."""
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO programs (id, name, subject_id, color, is_active, created_at, updated_at)
            VALUES (?, ?, ?, 'blue', 1, ?, ?)
            """,
            (program_id, name, subject_id, created_at, created_at),
        )


class TestSubjects:
    """Tests for subject CRUD."""

    def test_create_and_get(self, db):
        subject = create_subject("  Mathematics ", "blue")

        assert subject.id.startswith("sub-")
        assert subject.name == "Mathematics"
        fetched = get_subject(subject.id)
        assert fetched.name == "Mathematics"
        assert fetched.is_active is True
        assert fetched.programs == []

    def test_duplicate_name_case_insensitive(self, db):
        create_subject("Physics", "red")

        with pytest.raises(DuplicateNameError, match="Subject 'physics' already exists"):
            create_subject("physics", "green")

    def test_update_keeps_own_name(self, db):
        """Renaming to the same name is not a conflict."""
        subject = create_subject("Biology", "green")

        updated = update_subject(subject.id, {"name": "Biology", "color": "teal", "is_active": False})

        assert updated.color == "teal"
        assert updated.is_active is False

    def test_update_to_taken_name(self, db):
        create_subject("Biology", "green")
        chemistry = create_subject("Chemistry", "purple")

        with pytest.raises(DuplicateNameError):
            update_subject(chemistry.id, {"name": "BIOLOGY"})

    def test_update_missing_returns_none(self, db):
        assert update_subject("sub-missing", {"color": "red"}) is None

    def test_delete_removes_programs(self, db):
        subject = create_subject("Mathematics", "blue")
        program = create_program("GCSE", subject.id, "blue")

        assert delete_subject(subject.id) is True
        assert get_subject(subject.id) is None
        assert get_program(program.id) is None
        assert delete_subject(subject.id) is False


class TestPrograms:
    """Tests for program CRUD and the subject hierarchy."""

    def test_create_requires_subject(self, db):
        with pytest.raises(SubjectNotFoundError):
            create_program("GCSE", "sub-missing", "blue")

    def test_duplicate_program_name(self, db):
        subject = create_subject("Mathematics", "blue")
        create_program("GCSE", subject.id, "blue")

        with pytest.raises(DuplicateNameError, match="Program"):
            create_program("gcse", subject.id, "red")

    def test_list_for_subject(self, db):
        maths = create_subject("Mathematics", "blue")
        physics = create_subject("Physics", "red")
        create_program("GCSE", maths.id, "blue")
        create_program("A-Level", maths.id, "blue")
        create_program("IB", physics.id, "red")

        names = [p.name for p in list_programs(maths.id)]

        assert names == ["A-Level", "GCSE"]
        assert len(list_programs()) == 3

    def test_move_to_unknown_subject(self, db):
        subject = create_subject("Mathematics", "blue")
        program = create_program("GCSE", subject.id, "blue")

        with pytest.raises(SubjectNotFoundError):
            update_program(program.id, {"subject_id": "sub-missing"})

    def test_hierarchy_and_programs_map(self, db):
        maths = create_subject("Mathematics", "blue")
        hidden = create_subject("Latin", "grey", is_active=False)
        create_program("GCSE", maths.id, "blue")
        create_program("Old Spec", maths.id, "blue", is_active=False)
        create_program("Classics", hidden.id, "grey")

        tree = list_subjects_with_programs()
        assert [s.name for s in tree] == ["Latin", "Mathematics"]
        assert len(tree[1].programs) == 2

        assert get_subject_programs_map() == {"Mathematics": ["GCSE"]}
        assert get_subject_colors_map() == {"Mathematics": "blue"}


class TestDuplicatePrograms:
    """Tests for duplicate program cleanup."""

    def test_find_and_remove_keeps_oldest(self, db):
        subject = create_subject("Mathematics", "blue")
        _insert_raw_program("prg-new", "gcse", subject.id, "2025-02-01T00:00:00+00:00")
        _insert_raw_program("prg-old", "GCSE", subject.id, "2025-01-01T00:00:00+00:00")
        _insert_raw_program("prg-ib", "IB", subject.id, "2025-01-01T00:00:00+00:00")

        groups = find_duplicate_programs()
        assert list(groups) == ["gcse"]
        assert len(groups["gcse"]) == 2

        deleted, kept = remove_duplicate_programs()

        assert (deleted, kept) == (1, 1)
        assert get_program("prg-old") is not None
        assert get_program("prg-new") is None
        assert find_duplicate_programs() == {}

    def test_nothing_to_remove(self, db):
        assert remove_duplicate_programs() == (0, 0)
