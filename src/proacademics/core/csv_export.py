"""CSV export of content records.

Every cell is quoted; dates are rendered as YYYY-MM-DD.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable

from proacademics.db.homework_repository import HomeworkRecord
from proacademics.db.lessons_repository import LessonRecord
from proacademics.db.pastpapers_repository import PastPaperRecord
from proacademics.db.topic_vault_repository import TopicRecord

LESSON_HEADERS = [
    "Title",
    "Subject",
    "Module",
    "Instructor",
    "Duration",
    "Created",
    "Description",
    "Video URL",
]

HOMEWORK_HEADERS = [
    "Homework Name",
    "Subject",
    "Program",
    "Teacher",
    "Level",
    "Date Assigned",
    "Date Due",
    "Est.Time",
    "XP Awarded",
    "Total Questions",
    "Status",
    "Created",
]

TOPIC_HEADERS = [
    "Topic",
    "Subject",
    "Program",
    "Video Name",
    "Type",
    "Duration",
    "Teacher",
    "Description",
    "Zoom Link",
    "Video Embed Link",
    "Status",
]

PAST_PAPER_HEADERS = [
    "Paper Name",
    "Board",
    "Year",
    "Subject",
    "Program",
    "Paper",
    "Question Number",
    "Topic",
    "Question Name",
    "Duration",
    "Teacher",
    "Video Embed Link",
    "Status",
]


def format_date(value: str) -> str:
    """First ten chars of an ISO timestamp ("2025-01-31T09:00:00+00:00" -> "2025-01-31")."""
    return (value or "")[:10]


def write_csv(headers: list[str], rows: Iterable[list]) -> str:
    """Render header plus rows with every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])
    return buffer.getvalue()


def export_lessons_csv(lessons: list[LessonRecord]) -> str:
    return write_csv(
        LESSON_HEADERS,
        (
            [
                lesson.title,
                lesson.subject,
                lesson.program,
                lesson.teacher,
                lesson.duration,
                format_date(lesson.created_at),
                lesson.description,
                lesson.video_url,
            ]
            for lesson in lessons
        ),
    )


def export_homework_csv(assignments: list[HomeworkRecord]) -> str:
    return write_csv(
        HOMEWORK_HEADERS,
        (
            [
                hw.homework_name,
                hw.subject,
                hw.program,
                hw.teacher,
                hw.level,
                format_date(hw.date_assigned),
                format_date(hw.due_date),
                hw.estimated_time,
                hw.xp_awarded,
                hw.total_questions,
                hw.status,
                format_date(hw.created_at),
            ]
            for hw in assignments
        ),
    )


def export_topics_csv(topics: list[TopicRecord]) -> str:
    """One row per subtopic; topics without subtopics get a single row."""
    rows = []
    for topic in topics:
        if not topic.subtopics:
            rows.append([topic.topic_name, topic.subject, topic.program] + [""] * 7 + [topic.status])
            continue
        for sub in topic.subtopics:
            rows.append(
                [
                    topic.topic_name,
                    topic.subject,
                    topic.program,
                    sub.video_name,
                    sub.type,
                    sub.duration,
                    sub.teacher,
                    sub.description,
                    sub.zoom_link,
                    sub.video_embed_link,
                    sub.status,
                ]
            )
    return write_csv(TOPIC_HEADERS, rows)


def export_past_papers_csv(papers: list[PastPaperRecord]) -> str:
    """One row per question video; papers without questions get one row."""
    rows = []
    for paper in papers:
        base = [paper.paper_name, paper.board, paper.year, paper.subject, paper.program]
        questions = [
            (section.name, question)
            for section in paper.papers
            for question in section.questions
        ]
        if not questions:
            rows.append(base + [""] * 7 + [paper.status])
            continue
        for section_name, q in questions:
            rows.append(
                base
                + [
                    section_name,
                    q.question_number,
                    q.topic,
                    q.question_name,
                    q.duration,
                    q.teacher,
                    q.video_embed_link,
                    paper.status,
                ]
            )
    return write_csv(PAST_PAPER_HEADERS, rows)
