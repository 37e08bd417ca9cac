"""Homework endpoints."""

import structlog
from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from proacademics.core.csv_export import export_homework_csv
from proacademics.core.csv_parser import CsvFormatError
from proacademics.core.homework_importer import ImportValidationError, import_homework_csv
from proacademics.db.homework_repository import (
    delete_homework,
    distinct_values,
    get_homework,
    homework_stats,
    insert_homework,
    list_all_homework,
    list_homework,
    new_homework,
    update_homework,
)
from proacademics.db.query import ListQuery
from proacademics.web.responses import bad_request, csv_download, not_found, ok, read_upload_text
from proacademics.web.schemas import (
    ApiResponse,
    HomeworkCreate,
    HomeworkImportResponse,
    HomeworkResponse,
    HomeworkUpdate,
    PageResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/homework", tags=["homework"])


def _filters(subject, program, status_filter, level, teacher) -> dict:
    return {
        "subject": subject,
        "program": program,
        "status": status_filter,
        "level": level,
        "teacher": teacher,
    }


@router.get("", response_model=ApiResponse[PageResponse[HomeworkResponse]])
async def list_all(
    page: int = 1,
    limit: int | None = None,
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    level: str | None = None,
    teacher: str | None = None,
) -> dict:
    """List homework with search, filters and paging."""
    query = ListQuery(
        page=page,
        limit=limit,
        search=search,
        filters=_filters(subject, program, status_filter, level, teacher),
    )
    return ok(list_homework(query).to_dict())


@router.get("/stats", response_model=ApiResponse[dict])
async def stats() -> dict:
    """Counts by status, subject and level, plus recent assignments."""
    return ok(homework_stats())


@router.get("/export")
async def export(
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    level: str | None = None,
    teacher: str | None = None,
) -> Response:
    """Download matching homework as CSV."""
    records = list_all_homework(_filters(subject, program, status_filter, level, teacher), search)
    logger.info("homework.exported", count=len(records))
    return csv_download(export_homework_csv(records), "homework")


@router.get("/filters/subjects", response_model=ApiResponse[list[str]])
async def filter_subjects() -> dict:
    return ok(distinct_values("subject"))


@router.get("/filters/programs", response_model=ApiResponse[list[str]])
async def filter_programs(subject: str | None = None) -> dict:
    """Programs in use, optionally for one subject."""
    return ok(distinct_values("program", subject))


@router.get("/filters/teachers", response_model=ApiResponse[list[str]])
async def filter_teachers() -> dict:
    return ok(distinct_values("teacher"))


@router.post(
    "/import",
    response_model=ApiResponse[HomeworkImportResponse],
    status_code=status.HTTP_201_CREATED,
)
async def import_csv(file: UploadFile | None = File(None)) -> dict:
    """Import homework from a CSV upload (one row per question)."""
    text = await read_upload_text(file)
    try:
        result = import_homework_csv(text)
    except CsvFormatError as e:
        raise bad_request(str(e))
    except ImportValidationError as e:
        raise bad_request(f"{e}. Found columns: {', '.join(e.found)}")

    return ok(
        result.to_dict(),
        message=f"Imported {result.inserted_count} homework assignments",
    )


@router.post(
    "",
    response_model=ApiResponse[HomeworkResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create(body: HomeworkCreate) -> dict:
    """Create a homework assignment."""
    record = insert_homework(new_homework(**body.model_dump()))
    logger.info("homework.created", homework_id=record.id)
    return ok(record, message="Homework created successfully")


@router.get("/{homework_id}", response_model=ApiResponse[HomeworkResponse])
async def get(homework_id: str) -> dict:
    """Get a homework assignment."""
    record = get_homework(homework_id)
    if record is None:
        raise not_found("Homework", homework_id)
    return ok(record)


@router.put("/{homework_id}", response_model=ApiResponse[HomeworkResponse])
async def update(homework_id: str, body: HomeworkUpdate) -> dict:
    """Update a homework assignment (partial)."""
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    record = update_homework(homework_id, changes)
    if record is None:
        raise not_found("Homework", homework_id)
    return ok(record, message="Homework updated successfully")


@router.delete("/{homework_id}", response_model=ApiResponse[None])
async def delete(homework_id: str) -> dict:
    """Delete a homework assignment."""
    if not delete_homework(homework_id):
        raise not_found("Homework", homework_id)
    return ok(message="Homework deleted successfully")
