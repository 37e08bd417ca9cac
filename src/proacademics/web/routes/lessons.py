"""Lesson endpoints."""

import structlog
from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import Response

from proacademics.core.csv_export import export_lessons_csv
from proacademics.core.csv_parser import CsvFormatError
from proacademics.core.homework_importer import ImportValidationError
from proacademics.core.lesson_importer import commit_lessons, preview_lessons_csv
from proacademics.db.lessons_repository import (
    delete_all_lessons,
    delete_lesson,
    distinct_values,
    get_lesson,
    insert_lesson,
    lesson_stats,
    list_all_lessons,
    list_lessons,
    new_lesson,
    update_lesson,
)
from proacademics.db.query import ListQuery
from proacademics.web.responses import bad_request, csv_download, not_found, ok, read_upload_text
from proacademics.web.schemas import (
    ApiResponse,
    LessonCreate,
    LessonImportRequest,
    LessonResponse,
    LessonUpdate,
    PageResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/lessons", tags=["lessons"])


def _filters(subject, program, teacher, instructor, status_filter, type_filter) -> dict:
    return {
        "subject": subject,
        "program": program,
        "teacher": teacher or instructor,
        "status": status_filter,
        "type": type_filter,
    }


@router.get("", response_model=ApiResponse[PageResponse[LessonResponse]])
async def list_all(
    page: int = 1,
    limit: int | None = None,
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    teacher: str | None = None,
    instructor: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    type_filter: str | None = Query(None, alias="type"),
) -> dict:
    """List lessons with search, filters and paging.

    instructor is accepted as an alias of teacher.
    """
    query = ListQuery(
        page=page,
        limit=limit,
        search=search,
        filters=_filters(subject, program, teacher, instructor, status_filter, type_filter),
    )
    return ok(list_lessons(query).to_dict())


@router.get("/stats", response_model=ApiResponse[dict])
async def stats() -> dict:
    """Lesson totals and per-subject breakdown."""
    return ok(lesson_stats())


@router.get("/export")
async def export(
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    teacher: str | None = None,
    instructor: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    type_filter: str | None = Query(None, alias="type"),
) -> Response:
    """Download matching lessons as CSV."""
    filters = _filters(subject, program, teacher, instructor, status_filter, type_filter)
    records = list_all_lessons(filters, search)
    logger.info("lessons.exported", count=len(records))
    return csv_download(export_lessons_csv(records), "lessons_export")


@router.get("/filters/subjects", response_model=ApiResponse[list[str]])
async def filter_subjects() -> dict:
    return ok(distinct_values("subject"))


@router.get("/filters/programs", response_model=ApiResponse[list[str]])
async def filter_programs(subject: str | None = None) -> dict:
    return ok(distinct_values("program", subject))


@router.get("/filters/teachers", response_model=ApiResponse[list[str]])
async def filter_teachers() -> dict:
    return ok(distinct_values("teacher"))


@router.get("/filters/instructors", response_model=ApiResponse[list[str]])
async def filter_instructors() -> dict:
    """Same list as /filters/teachers, kept for older clients."""
    return ok(distinct_values("teacher"))


@router.delete("/delete-all", response_model=ApiResponse[dict[str, int]])
async def delete_all() -> dict:
    """Delete every lesson."""
    count = delete_all_lessons()
    return ok({"deleted_count": count}, message=f"Deleted {count} lessons")


@router.post("/import/preview", response_model=ApiResponse[dict])
async def import_preview(
    file: UploadFile | None = File(None),
    default_status: str = Form("draft"),
) -> dict:
    """Parse a schedule upload and return rows with per-row errors."""
    text = await read_upload_text(file)
    try:
        preview = preview_lessons_csv(text, default_status)
    except CsvFormatError as e:
        raise bad_request(str(e))
    return ok(preview.to_dict())


@router.post(
    "/import",
    response_model=ApiResponse[list[LessonResponse]],
    status_code=status.HTTP_201_CREATED,
)
async def import_rows(body: LessonImportRequest) -> dict:
    """Save confirmed lesson rows; one invalid row rejects the batch."""
    try:
        records = commit_lessons([row.model_dump() for row in body.lessons])
    except ImportValidationError as e:
        raise bad_request(str(e))
    return ok(records, message=f"Successfully imported {len(records)} lessons")


@router.post(
    "",
    response_model=ApiResponse[LessonResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create(body: LessonCreate) -> dict:
    """Create a lesson."""
    record = insert_lesson(new_lesson(**body.model_dump()))
    logger.info("lessons.created", lesson_id=record.id)
    return ok(record, message="Lesson created successfully")


@router.get("/{lesson_id}", response_model=ApiResponse[LessonResponse])
async def get(lesson_id: str) -> dict:
    """Get a lesson."""
    record = get_lesson(lesson_id)
    if record is None:
        raise not_found("Lesson", lesson_id)
    return ok(record)


@router.put("/{lesson_id}", response_model=ApiResponse[LessonResponse])
async def update(lesson_id: str, body: LessonUpdate) -> dict:
    """Update a lesson (partial)."""
    record = update_lesson(lesson_id, body.model_dump(exclude_unset=True))
    if record is None:
        raise not_found("Lesson", lesson_id)
    return ok(record, message="Lesson updated successfully")


@router.delete("/{lesson_id}", response_model=ApiResponse[None])
async def delete(lesson_id: str) -> dict:
    """Delete a lesson."""
    if not delete_lesson(lesson_id):
        raise not_found("Lesson", lesson_id)
    return ok(message="Lesson deleted successfully")
