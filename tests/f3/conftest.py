"""Fixtures for F3 tests - Admin web API."""

import pytest
from fastapi.testclient import TestClient

from proacademics.web.api import create_app


@pytest.fixture
def client(db):
    """Test client bound to the isolated test database."""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def subject(client):
    """A subject created through the API."""
    response = client.post("/api/admin/subjects", json={"name": "Mathematics", "color": "blue"})
    return response.json()["data"]


@pytest.fixture
def homework_payload():
    return {
        "homework_name": "Quadratics 1",
        "subject": "Mathematics",
        "program": "GCSE",
        "topic": "Algebra",
        "subtopic": "Quadratics",
        "level": "medium",
        "teacher": "Mr. Smith",
        "date_assigned": "10/01/2025",
        "due_date": "2025-01-17",
        "question_set": [{"question_id": "Q1", "question": "Solve x^2 = 4", "mark_scheme": "x = 2"}],
    }


@pytest.fixture
def section():
    return {
        "name": "Paper 1",
        "question_paper_url": "https://example.com/p1.pdf",
        "mark_scheme_url": "https://example.com/p1-ms.pdf",
    }


@pytest.fixture
def question():
    return {
        "paper_index": 0,
        "question_number": 1,
        "topic": "Algebra",
        "question_name": "Simultaneous equations",
        "question_description": "Solve for x and y",
        "duration": "6 min",
        "teacher": "Mr. Smith",
        "video_embed_link": "https://youtube.com/embed/abc",
    }
