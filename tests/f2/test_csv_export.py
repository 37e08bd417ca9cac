"""Tests for CSV export (F2)."""

import csv
import io

from proacademics.core.csv_export import (
    HOMEWORK_HEADERS,
    LESSON_HEADERS,
    PAST_PAPER_HEADERS,
    TOPIC_HEADERS,
    export_homework_csv,
    export_lessons_csv,
    export_past_papers_csv,
    export_topics_csv,
    format_date,
    write_csv,
)
from proacademics.db.homework_repository import new_homework
from proacademics.db.lessons_repository import new_lesson
from proacademics.db.pastpapers_repository import (
    PaperSection,
    PastPaperRecord,
    QuestionVideo,
)
from proacademics.db.topic_vault_repository import new_topic


def read_back(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


class TestWriteCsv:
    def test_every_cell_quoted(self):
        text = write_csv(["A", "B"], [["x", 1], [None, "y, z"]])
        assert text == '"A","B"\n"x","1"\n"","y, z"\n'

    def test_format_date(self):
        assert format_date("2025-01-31T09:00:00+00:00") == "2025-01-31"
        assert format_date("") == ""


class TestExports:
    """Tests for the per-collection exporters."""

    def test_lessons(self):
        lesson = new_lesson(title="Cells", subject="Biology", program="GCSE", teacher="Dr. Green",
                            video_url="https://youtu.be/a")
        rows = read_back(export_lessons_csv([lesson]))

        assert rows[0] == LESSON_HEADERS
        assert rows[1][:4] == ["Cells", "Biology", "GCSE", "Dr. Green"]
        assert rows[1][5] == lesson.created_at[:10]
        assert rows[1][7] == "https://youtu.be/a"

    def test_homework(self):
        hw = new_homework(
            homework_name="Forces", subject="Physics", program="A-Level", topic="Mechanics",
            subtopic="", level="hard", teacher="Dr. Jones",
            date_assigned="2025-02-01", due_date="2025-02-08",
            question_set=[{"question": "a"}, {"question": "b"}],
        )
        rows = read_back(export_homework_csv([hw]))

        assert rows[0] == HOMEWORK_HEADERS
        assert rows[1][0] == "Forces"
        assert rows[1][5:10] == ["2025-02-01", "2025-02-08", "30", "100", "2"]

    def test_topics_one_row_per_subtopic(self):
        topics = [
            new_topic("Basic Algebra", "Mathematics", "GCSE",
                      subtopics=[{"video_name": "Intro"}, {"video_name": "Brackets", "type": "Tutorial"}]),
            new_topic("Empty", "Chemistry", "GCSE", status="active"),
        ]
        rows = read_back(export_topics_csv(topics))

        assert rows[0] == TOPIC_HEADERS
        assert len(rows) == 4
        assert rows[2][3:5] == ["Brackets", "Tutorial"]
        assert rows[3] == ["Empty", "Chemistry", "GCSE"] + [""] * 7 + ["active"]

    def test_past_papers_one_row_per_question(self):
        question = QuestionVideo(
            id="q-1", question_number=3, topic="Algebra", question_name="Q3",
            question_description="", duration="5 min", teacher="Mr. Smith",
            video_embed_link="https://youtube.com/embed/x",
        )
        with_questions = PastPaperRecord(
            id="pp-1", paper_name="June 2023", board="AQA", year=2023, subject="Mathematics",
            program="GCSE", status="active",
            papers=[PaperSection("Paper 1", "u", "m", [question])],
        )
        empty = PastPaperRecord(
            id="pp-2", paper_name="Nov 2023", board="AQA", year=2023, subject="Mathematics",
            program="GCSE",
        )
        rows = read_back(export_past_papers_csv([with_questions, empty]))

        assert rows[0] == PAST_PAPER_HEADERS
        assert rows[1] == [
            "June 2023", "AQA", "2023", "Mathematics", "GCSE", "Paper 1", "3",
            "Algebra", "Q3", "5 min", "Mr. Smith", "https://youtube.com/embed/x", "active",
        ]
        assert rows[2][:5] == ["Nov 2023", "AQA", "2023", "Mathematics", "GCSE"]
        assert rows[2][-1] == "draft"
        assert len(rows[2]) == len(PAST_PAPER_HEADERS)
