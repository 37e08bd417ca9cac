"""Tests for homework persistence (F1)."""

import sqlite3

import pytest

from proacademics.db.homework_repository import (
    delete_homework,
    distinct_values,
    get_homework,
    homework_stats,
    insert_homework,
    insert_many_homework,
    list_all_homework,
    list_homework,
    new_homework,
    update_homework,
)
from proacademics.db.query import ListQuery


def make_homework(**overrides):
    values = {
        "homework_name": "Quadratics 1",
        "subject": "Mathematics",
        "program": "GCSE",
        "topic": "Algebra",
        "subtopic": "Quadratics",
        "level": "medium",
        "teacher": "Mr. Smith",
        "date_assigned": "2025-01-10",
        "due_date": "2025-01-17",
    }
    values.update(overrides)
    return new_homework(**values)


class TestHomeworkCrud:
    """Tests for insert/get/update/delete."""

    def test_insert_and_get_with_questions(self, db):
        record = make_homework(
            question_set=[
                {"question_id": "Q1", "question": "Solve x^2 = 4", "mark_scheme": "x = 2 or -2"},
                {"question": "Factorise x^2 + 3x + 2", "level": "easy"},
            ]
        )
        insert_homework(record)

        fetched = get_homework(record.id)

        assert fetched.homework_name == "Quadratics 1"
        assert fetched.total_questions == 2
        assert fetched.question_set[0].question_id == "Q1"
        assert fetched.question_set[1].question_id.startswith("q-")
        assert fetched.question_set[1].level == "easy"
        assert fetched.completion_status == "not_started"
        assert fetched.status == "draft"

    def test_bad_level_rejected_by_schema(self, db):
        with pytest.raises(sqlite3.IntegrityError):
            insert_homework(make_homework(level="impossible"))

    def test_update_question_set_resets_total(self, db):
        record = insert_homework(make_homework())

        updated = update_homework(
            record.id,
            {"question_set": [{"question": "a"}, {"question": "b"}, {"question": "c"}], "status": "active"},
        )

        assert updated.total_questions == 3
        assert updated.status == "active"
        assert updated.updated_at >= record.updated_at

    def test_update_ignores_none_and_unknown(self, db):
        record = insert_homework(make_homework())

        updated = update_homework(record.id, {"teacher": None, "xp_earned": 500})

        assert updated.teacher == "Mr. Smith"
        assert updated.xp_earned == 0

    def test_update_missing(self, db):
        assert update_homework("hw-missing", {"status": "active"}) is None

    def test_delete(self, db):
        record = insert_homework(make_homework())

        assert delete_homework(record.id) is True
        assert get_homework(record.id) is None
        assert delete_homework(record.id) is False


class TestHomeworkListing:
    """Tests for list, filters and stats."""

    @pytest.fixture
    def seeded(self, db):
        insert_many_homework(
            [
                make_homework(homework_name="Quadratics 1"),
                make_homework(homework_name="Forces", subject="Physics", program="A-Level",
                              topic="Mechanics", teacher="Dr. Jones", level="hard"),
                make_homework(homework_name="Vectors", status="active", teacher="Ms. Lee"),
            ]
        )

    def test_newest_first(self, seeded):
        page = list_homework(ListQuery())

        assert page.total == 3
        assert [h.homework_name for h in page.items] == ["Vectors", "Forces", "Quadratics 1"]

    def test_paging(self, seeded):
        page = list_homework(ListQuery(page=2, limit=2))

        assert page.total == 3
        assert page.total_pages == 2
        assert [h.homework_name for h in page.items] == ["Quadratics 1"]

    def test_search_case_insensitive(self, seeded):
        page = list_homework(ListQuery(search="MECHAN"))
        assert [h.homework_name for h in page.items] == ["Forces"]

    def test_search_folds_accented_capitals(self, db):
        insert_homework(make_homework(homework_name="École test"))

        assert list_homework(ListQuery(search="école")).total == 1
        assert list_homework(ListQuery(search="ÉCOLE")).total == 1

    def test_filters(self, seeded):
        page = list_homework(ListQuery(filters={"subject": "Mathematics", "status": "active"}))
        assert [h.homework_name for h in page.items] == ["Vectors"]

    def test_all_filter_value_ignored(self, seeded):
        assert list_homework(ListQuery(filters={"subject": "all"})).total == 3

    def test_list_all_unpaged(self, seeded):
        assert len(list_all_homework({"level": "medium"})) == 2

    def test_distinct_values(self, seeded):
        assert distinct_values("subject") == ["Mathematics", "Physics"]
        assert distinct_values("teacher", subject="Mathematics") == ["Mr. Smith", "Ms. Lee"]
        with pytest.raises(ValueError):
            distinct_values("due_date")

    def test_stats(self, seeded):
        stats = homework_stats()

        assert stats["total"] == 3
        assert stats["active"] == 1
        assert stats["draft"] == 2
        assert stats["by_subject"][0] == {"subject": "Mathematics", "count": 2}
        assert len(stats["recent_activity"]) == 3
        assert stats["recent_activity"][0]["homework_name"] == "Vectors"

    def test_insert_many_empty(self, db):
        assert insert_many_homework([]) == 0
