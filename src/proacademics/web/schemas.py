"""Pydantic schemas for the admin API.

Request bodies validate input; response models describe the "data" part
of the {"success": ..., "data": ...} envelope.
"""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field, field_validator

from proacademics.utils.validators import parse_date

T = TypeVar("T")

Status = Literal["draft", "active"]
ContentType = Literal["Lesson", "Tutorial", "Workshop"]
Level = Literal["easy", "medium", "hard"]


def cell_text(value: Any) -> Any:
    """Spreadsheet numbers become strings and None becomes ""."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def blank_to(value: Any, default: str, lower: bool = False) -> Any:
    """Blank choice fields fall back to default."""
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
        return value.lower() if lower else value
    return value


# =============================================================================
# ENVELOPE
# =============================================================================


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """Error envelope."""

    success: bool = False
    error: str


class PageResponse(BaseModel, Generic[T]):
    """One page of a list."""

    items: list[T]
    total: int
    page: int
    limit: int
    total_pages: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    checks: dict[str, str]


# =============================================================================
# SUBJECT / PROGRAM SCHEMAS
# =============================================================================


class SubjectCreate(BaseModel):
    """Request body for creating a subject."""

    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., min_length=1, max_length=50)
    is_active: bool = True


class SubjectUpdate(BaseModel):
    """Request body for updating a subject."""

    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., min_length=1, max_length=50)
    is_active: bool | None = None


class ProgramCreate(BaseModel):
    """Request body for creating a program."""

    name: str = Field(..., min_length=1, max_length=100)
    subject_id: str = Field(..., min_length=1)
    color: str = Field(..., min_length=1, max_length=50)
    is_active: bool = True


class ProgramUpdate(BaseModel):
    """Request body for updating a program."""

    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., min_length=1, max_length=50)
    subject_id: str | None = None
    is_active: bool | None = None


class ProgramResponse(BaseModel):
    """Response for a program."""

    id: str
    name: str
    subject_id: str
    color: str
    is_active: bool
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class SubjectResponse(BaseModel):
    """Response for a subject with its programs."""

    id: str
    name: str
    color: str
    is_active: bool
    created_at: str
    updated_at: str
    programs: list[ProgramResponse] = []

    model_config = {"from_attributes": True}


class DuplicateProgramGroup(BaseModel):
    """Programs sharing one (case-insensitive) name."""

    name: str
    count: int
    programs: list[ProgramResponse]


class SubjectMapsResponse(BaseModel):
    """Lookup maps for subject/program pickers."""

    subject_programs: dict[str, list[str]]
    subject_colors: dict[str, str]


# =============================================================================
# HOMEWORK SCHEMAS
# =============================================================================


class HomeworkQuestionSchema(BaseModel):
    """A question inside a homework assignment."""

    question_id: str = ""
    topic: str = ""
    subtopic: str = ""
    level: Level = "hard"
    question: str = ""
    mark_scheme: str = ""
    image: str | None = None

    model_config = {"from_attributes": True}


class HomeworkCreate(BaseModel):
    """Request body for creating a homework assignment."""

    homework_name: str = Field(..., min_length=1, max_length=200)
    subject: str = Field(..., min_length=1)
    program: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    subtopic: str = ""
    level: Level = "hard"
    teacher: str = Field(..., min_length=1)
    date_assigned: str
    due_date: str
    estimated_time: int = Field(default=30, ge=1)
    xp_awarded: int = Field(default=100, ge=0)
    question_set: list[HomeworkQuestionSchema] = []
    status: Status = "draft"

    @field_validator("date_assigned", "due_date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        return parse_date(value)


class HomeworkUpdate(BaseModel):
    """Request body for updating a homework assignment (partial)."""

    homework_name: str | None = Field(default=None, min_length=1, max_length=200)
    subject: str | None = Field(default=None, min_length=1)
    program: str | None = Field(default=None, min_length=1)
    topic: str | None = None
    subtopic: str | None = None
    level: Level | None = None
    teacher: str | None = None
    date_assigned: str | None = None
    due_date: str | None = None
    estimated_time: int | None = Field(default=None, ge=1)
    xp_awarded: int | None = Field(default=None, ge=0)
    question_set: list[HomeworkQuestionSchema] | None = None
    status: Status | None = None

    @field_validator("date_assigned", "due_date")
    @classmethod
    def _iso_date(cls, value: str | None) -> str | None:
        return parse_date(value) if value is not None else None


class HomeworkResponse(BaseModel):
    """Response for a homework assignment."""

    id: str
    homework_name: str
    subject: str
    program: str
    topic: str
    subtopic: str
    level: str
    teacher: str
    date_assigned: str
    due_date: str
    estimated_time: int
    xp_awarded: int
    question_set: list[HomeworkQuestionSchema]
    total_questions: int
    completed_questions: int
    completion_status: str
    xp_earned: int
    status: str
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class HomeworkImportResponse(BaseModel):
    """Outcome of a homework CSV import."""

    inserted_count: int
    valid_rows: int
    invalid_rows: list[str]
    total_homework: int


# =============================================================================
# LESSON SCHEMAS
# =============================================================================


class LessonCreate(BaseModel):
    """Request body for creating a lesson."""

    title: str = Field(..., min_length=1, max_length=300)
    subject: str = Field(..., min_length=1)
    program: str = ""
    subtopic: str = ""
    type: ContentType = "Lesson"
    teacher: str = ""
    duration: str = ""
    description: str = ""
    video_url: str = ""
    zoom_link: str = ""
    scheduled_date: str = ""
    time: str = ""
    week: str = ""
    grade: str = ""
    status: Status = "draft"


class LessonUpdate(BaseModel):
    """Request body for updating a lesson (partial)."""

    title: str | None = Field(default=None, min_length=1, max_length=300)
    subject: str | None = Field(default=None, min_length=1)
    program: str | None = None
    subtopic: str | None = None
    type: ContentType | None = None
    teacher: str | None = None
    duration: str | None = None
    description: str | None = None
    video_url: str | None = None
    zoom_link: str | None = None
    scheduled_date: str | None = None
    time: str | None = None
    week: str | None = None
    grade: str | None = None
    status: Status | None = None


class LessonResponse(BaseModel):
    """Response for a lesson."""

    id: str
    title: str
    subject: str
    program: str
    subtopic: str
    type: str
    teacher: str
    duration: str
    description: str
    video_url: str
    zoom_link: str
    scheduled_date: str
    time: str
    week: str
    grade: str
    status: str
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class LessonImportRow(BaseModel):
    """One confirmed lesson row; title and subject are checked on commit."""

    title: str = ""
    subject: str = ""
    program: str = ""
    subtopic: str = ""
    type: ContentType = "Lesson"
    teacher: str = ""
    instructor: str = ""
    duration: str = ""
    description: str = ""
    video_url: str = ""
    zoom_link: str = ""
    scheduled_date: str = ""
    time: str = ""
    week: str = ""
    grade: str = ""
    status: Status = "draft"

    @field_validator(
        "title", "subject", "program", "subtopic", "teacher", "instructor", "duration",
        "description", "video_url", "zoom_link", "scheduled_date", "time", "week", "grade",
        mode="before",
    )
    @classmethod
    def _cell_text(cls, value: Any) -> Any:
        return cell_text(value)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> Any:
        return blank_to(value, "Lesson")

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return blank_to(value, "draft", lower=True)


class LessonImportRequest(BaseModel):
    """Confirmed lesson rows from an import preview."""

    lessons: list[LessonImportRow] = []


# =============================================================================
# PAST PAPER SCHEMAS
# =============================================================================


class QuestionVideoResponse(BaseModel):
    """Response for a question walkthrough video."""

    id: str
    question_number: int
    topic: str
    question_name: str
    question_description: str
    duration: str
    teacher: str
    video_embed_link: str
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class QuestionVideoIn(BaseModel):
    """A question carried inside a paper section on create/update."""

    id: str = ""
    question_number: int = Field(..., ge=1)
    topic: str = ""
    question_name: str = ""
    question_description: str = ""
    duration: str = ""
    teacher: str = ""
    video_embed_link: str = ""
    created_at: str = ""
    updated_at: str = ""


class PaperSectionIn(BaseModel):
    """A paper section in a create/update body.

    questions omitted (null) on update keeps the stored questions.
    """

    name: str = Field(..., min_length=1)
    question_paper_url: str = Field(..., min_length=1)
    mark_scheme_url: str = Field(..., min_length=1)
    questions: list[QuestionVideoIn] | None = None


class PaperSectionResponse(BaseModel):
    """Response for a paper section."""

    name: str
    question_paper_url: str
    mark_scheme_url: str
    questions: list[QuestionVideoResponse]

    model_config = {"from_attributes": True}


class PastPaperCreate(BaseModel):
    """Request body for creating a past paper."""

    paper_name: str = Field(..., min_length=1, max_length=200)
    board: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)
    subject: str = Field(..., min_length=1)
    program: str = Field(..., min_length=1)
    status: Status
    papers: list[PaperSectionIn] = []


class PastPaperUpdate(PastPaperCreate):
    """Request body for updating a past paper; at least one paper."""

    papers: list[PaperSectionIn] = Field(..., min_length=1)


class PastPaperResponse(BaseModel):
    """Response for a past paper."""

    id: str
    paper_name: str
    board: str
    year: int
    subject: str
    program: str
    status: str
    papers: list[PaperSectionResponse]
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class QuestionCreate(BaseModel):
    """Request body for adding a question video to a paper."""

    paper_index: int = Field(..., ge=0)
    question_number: int = Field(..., ge=1)
    topic: str = Field(..., min_length=1)
    question_name: str = Field(..., min_length=1)
    question_description: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)
    teacher: str = Field(..., min_length=1)
    video_embed_link: str = Field(..., min_length=1)


class QuestionUpdate(BaseModel):
    """Request body for updating a question video."""

    paper_index: int = Field(..., ge=0)
    question_id: str = Field(..., min_length=1)
    question_number: int | None = Field(default=None, ge=1)
    topic: str | None = None
    question_name: str | None = None
    question_description: str | None = None
    duration: str | None = None
    teacher: str | None = None
    video_embed_link: str | None = None


# =============================================================================
# TOPIC VAULT SCHEMAS
# =============================================================================


class SubtopicCreate(BaseModel):
    """Request body for a subtopic video."""

    video_name: str = Field(..., min_length=1, max_length=300)
    type: ContentType = "Lesson"
    duration: str = ""
    teacher: str = ""
    description: str = ""
    zoom_link: str = ""
    video_embed_link: str = ""
    status: Status = "draft"


class SubtopicUpdate(BaseModel):
    """Request body for updating a subtopic (partial)."""

    video_name: str | None = Field(default=None, min_length=1, max_length=300)
    type: ContentType | None = None
    duration: str | None = None
    teacher: str | None = None
    description: str | None = None
    zoom_link: str | None = None
    video_embed_link: str | None = None
    status: Status | None = None


class SubtopicResponse(BaseModel):
    """Response for a subtopic."""

    id: str
    video_name: str
    type: str
    duration: str
    teacher: str
    description: str
    zoom_link: str
    video_embed_link: str
    status: str

    model_config = {"from_attributes": True}


class TopicCreate(BaseModel):
    """Request body for creating a topic."""

    topic_name: str = Field(..., min_length=1, max_length=200)
    subject: str = Field(..., min_length=1)
    program: str = Field(..., min_length=1)
    description: str = ""
    status: Status = "draft"
    subtopics: list[SubtopicCreate] = []


class TopicUpdate(BaseModel):
    """Request body for updating a topic (partial)."""

    topic_name: str | None = Field(default=None, min_length=1, max_length=200)
    subject: str | None = Field(default=None, min_length=1)
    program: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: Status | None = None


class TopicResponse(BaseModel):
    """Response for a topic with its subtopics."""

    id: str
    topic_name: str
    subject: str
    program: str
    description: str
    status: str
    subtopics: list[SubtopicResponse]
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class ReorderRequest(BaseModel):
    """Move one subtopic to a new position."""

    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class TopicImportRow(BaseModel):
    """One confirmed video row; required fields are checked on commit."""

    video_name: str = ""
    topic: str = ""
    subject: str = ""
    program: str = ""
    type: ContentType = "Lesson"
    duration: str = ""
    teacher: str = ""
    description: str = ""
    zoom_link: str = ""
    video_embed_link: str = ""
    status: Status = "draft"

    @field_validator(
        "video_name", "topic", "subject", "program", "duration", "teacher",
        "description", "zoom_link", "video_embed_link",
        mode="before",
    )
    @classmethod
    def _cell_text(cls, value: Any) -> Any:
        return cell_text(value)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> Any:
        return blank_to(value, "Lesson")

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return blank_to(value, "draft", lower=True)


class TopicImportRequest(BaseModel):
    """Confirmed video rows from a topic vault import preview."""

    rows: list[TopicImportRow] = []
