"""Subject endpoints."""

import structlog
from fastapi import APIRouter, HTTPException, status

from proacademics.db.subjects_repository import (
    DuplicateNameError,
    create_subject,
    delete_subject,
    get_subject,
    get_subject_colors_map,
    get_subject_programs_map,
    list_subjects_with_programs,
    update_subject,
)
from proacademics.web.responses import not_found, ok
from proacademics.web.schemas import (
    ApiResponse,
    SubjectCreate,
    SubjectMapsResponse,
    SubjectResponse,
    SubjectUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/subjects", tags=["subjects"])


@router.get("", response_model=ApiResponse[list[SubjectResponse]])
async def list_subjects() -> dict:
    """List all subjects with their programs."""
    return ok(list_subjects_with_programs())


@router.get("/programs-map", response_model=ApiResponse[SubjectMapsResponse])
async def programs_map() -> dict:
    """Active subjects mapped to their active program names and to their colors."""
    return ok(
        {
            "subject_programs": get_subject_programs_map(),
            "subject_colors": get_subject_colors_map(),
        }
    )


@router.post(
    "",
    response_model=ApiResponse[SubjectResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create(body: SubjectCreate) -> dict:
    """Create a new subject."""
    try:
        subject = create_subject(body.name, body.color, body.is_active)
    except DuplicateNameError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    logger.info("subjects.created", subject_id=subject.id, name=subject.name)
    return ok(subject, message="Subject created successfully")


@router.get("/{subject_id}", response_model=ApiResponse[SubjectResponse])
async def get(subject_id: str) -> dict:
    """Get a subject with its programs."""
    subject = get_subject(subject_id)
    if subject is None:
        raise not_found("Subject", subject_id)
    return ok(subject)


@router.put("/{subject_id}", response_model=ApiResponse[SubjectResponse])
async def update(subject_id: str, body: SubjectUpdate) -> dict:
    """Update a subject's name, color or active flag."""
    if get_subject(subject_id) is None:
        raise not_found("Subject", subject_id)

    try:
        subject = update_subject(subject_id, body.model_dump())
    except DuplicateNameError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if subject is None:
        raise not_found("Subject", subject_id)
    return ok(subject, message="Subject updated successfully")


@router.delete("/{subject_id}", response_model=ApiResponse[None])
async def delete(subject_id: str) -> dict:
    """Delete a subject and all of its programs."""
    if not delete_subject(subject_id):
        raise not_found("Subject", subject_id)
    return ok(message="Subject deleted successfully")
