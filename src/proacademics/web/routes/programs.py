"""Program endpoints."""

import structlog
from fastapi import APIRouter, HTTPException, status

from proacademics.db.subjects_repository import (
    DuplicateNameError,
    SubjectNotFoundError,
    create_program,
    delete_program,
    find_duplicate_programs,
    get_program,
    list_programs,
    remove_duplicate_programs,
    update_program,
)
from proacademics.web.responses import not_found, ok
from proacademics.web.schemas import (
    ApiResponse,
    DuplicateProgramGroup,
    ProgramCreate,
    ProgramResponse,
    ProgramUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/programs", tags=["programs"])


@router.get("", response_model=ApiResponse[list[ProgramResponse]])
async def list_all(subject_id: str | None = None) -> dict:
    """List programs, optionally for one subject."""
    return ok(list_programs(subject_id))


@router.get("/duplicates", response_model=ApiResponse[list[DuplicateProgramGroup]])
async def duplicates() -> dict:
    """Programs that share a name (case-insensitive)."""
    groups = [
        DuplicateProgramGroup(
            name=name,
            count=len(programs),
            programs=[ProgramResponse.model_validate(p) for p in programs],
        )
        for name, programs in find_duplicate_programs().items()
    ]
    return ok(groups)


@router.delete("/duplicates", response_model=ApiResponse[dict[str, int]])
async def remove_duplicates() -> dict:
    """Delete duplicate programs, keeping the oldest of each name."""
    deleted, kept = remove_duplicate_programs()
    return ok(
        {"deleted_count": deleted, "kept_count": kept},
        message=f"Removed {deleted} duplicate programs",
    )


@router.post(
    "",
    response_model=ApiResponse[ProgramResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create(body: ProgramCreate) -> dict:
    """Create a program under a subject."""
    try:
        program = create_program(body.name, body.subject_id, body.color, body.is_active)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateNameError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    logger.info("programs.created", program_id=program.id, subject_id=program.subject_id)
    return ok(program, message="Program created successfully")


@router.get("/{program_id}", response_model=ApiResponse[ProgramResponse])
async def get(program_id: str) -> dict:
    """Get a program."""
    program = get_program(program_id)
    if program is None:
        raise not_found("Program", program_id)
    return ok(program)


@router.put("/{program_id}", response_model=ApiResponse[ProgramResponse])
async def update(program_id: str, body: ProgramUpdate) -> dict:
    """Update a program."""
    if get_program(program_id) is None:
        raise not_found("Program", program_id)

    try:
        program = update_program(program_id, body.model_dump())
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateNameError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if program is None:
        raise not_found("Program", program_id)
    return ok(program, message="Program updated successfully")


@router.delete("/{program_id}", response_model=ApiResponse[None])
async def delete(program_id: str) -> dict:
    """Delete a program."""
    if not delete_program(program_id):
        raise not_found("Program", program_id)
    return ok(message="Program deleted successfully")
