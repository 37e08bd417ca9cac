"""Past paper endpoints, including per-paper question videos."""

import structlog
from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import Response

from proacademics.core.csv_export import export_past_papers_csv
from proacademics.db.pastpapers_repository import (
    PaperIndexError,
    add_question,
    delete_all_past_papers,
    delete_past_paper,
    delete_question,
    distinct_values,
    get_past_paper,
    insert_past_paper,
    list_all_past_papers,
    list_past_papers,
    list_questions,
    update_past_paper,
    update_question,
)
from proacademics.db.query import ListQuery
from proacademics.web.responses import csv_download, not_found, ok
from proacademics.web.schemas import (
    ApiResponse,
    PageResponse,
    PastPaperCreate,
    PastPaperResponse,
    PastPaperUpdate,
    QuestionCreate,
    QuestionUpdate,
    QuestionVideoResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/pastpapers", tags=["pastpapers"])


def _filters(subject, program, board, year, status_filter) -> dict:
    return {
        "subject": subject,
        "program": program,
        "board": board,
        "year": year,
        "status": status_filter,
    }


def _paper_index_error(e: PaperIndexError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=ApiResponse[PageResponse[PastPaperResponse]])
async def list_all(
    page: int = 1,
    limit: int | None = None,
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    board: str | None = None,
    year: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
) -> dict:
    """List past papers with search, filters and paging."""
    query = ListQuery(
        page=page,
        limit=limit,
        search=search,
        filters=_filters(subject, program, board, year, status_filter),
    )
    return ok(list_past_papers(query).to_dict())


@router.post(
    "",
    response_model=ApiResponse[PastPaperResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create(body: PastPaperCreate) -> dict:
    """Create a past paper; papers may be added later."""
    data = body.model_dump()
    record = insert_past_paper(**data)
    logger.info("pastpapers.created", past_paper_id=record.id, papers=len(record.papers))
    return ok(record, message="Past paper created successfully")


@router.delete("", response_model=ApiResponse[dict[str, int]])
async def delete_all() -> dict:
    """Delete every past paper."""
    count = delete_all_past_papers()
    return ok({"deleted_count": count}, message=f"Deleted {count} past papers")


@router.get("/export")
async def export(
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    board: str | None = None,
    year: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
) -> Response:
    """Download matching past papers as CSV (one row per question)."""
    records = list_all_past_papers(_filters(subject, program, board, year, status_filter), search)
    logger.info("pastpapers.exported", count=len(records))
    return csv_download(export_past_papers_csv(records), "pastpapers")


@router.get("/filters/subjects", response_model=ApiResponse[list[str]])
async def filter_subjects() -> dict:
    return ok(distinct_values("subject"))


@router.get("/filters/boards", response_model=ApiResponse[list[str]])
async def filter_boards(subject: str | None = None) -> dict:
    return ok(distinct_values("board", subject))


@router.get("/filters/years", response_model=ApiResponse[list[int]])
async def filter_years(subject: str | None = None) -> dict:
    """Years in use, newest first."""
    return ok(sorted(distinct_values("year", subject), reverse=True))


@router.get("/{past_paper_id}", response_model=ApiResponse[PastPaperResponse])
async def get(past_paper_id: str) -> dict:
    """Get a past paper with its papers and questions."""
    record = get_past_paper(past_paper_id)
    if record is None:
        raise not_found("Past paper", past_paper_id)
    return ok(record)


@router.put("/{past_paper_id}", response_model=ApiResponse[PastPaperResponse])
async def update(past_paper_id: str, body: PastPaperUpdate) -> dict:
    """Replace a past paper.

    A paper sent without "questions" keeps the questions stored at the
    same position.
    """
    record = update_past_paper(past_paper_id, body.model_dump())
    if record is None:
        raise not_found("Past paper", past_paper_id)
    return ok(record, message="Past paper updated successfully")


@router.delete("/{past_paper_id}", response_model=ApiResponse[None])
async def delete(past_paper_id: str) -> dict:
    """Delete a past paper."""
    if not delete_past_paper(past_paper_id):
        raise not_found("Past paper", past_paper_id)
    return ok(message="Past paper deleted successfully")


# =============================================================================
# QUESTIONS
# =============================================================================


@router.get("/{past_paper_id}/questions", response_model=ApiResponse[list[QuestionVideoResponse]])
async def get_questions(past_paper_id: str, paper: int = Query(0, ge=0)) -> dict:
    """Question videos of one paper (by index)."""
    try:
        questions = list_questions(past_paper_id, paper)
    except PaperIndexError as e:
        raise _paper_index_error(e)

    if questions is None:
        raise not_found("Past paper", past_paper_id)
    return ok(questions)


@router.post(
    "/{past_paper_id}/questions",
    response_model=ApiResponse[QuestionVideoResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_question(past_paper_id: str, body: QuestionCreate) -> dict:
    """Add a question video to a paper."""
    values = body.model_dump(exclude={"paper_index"})
    try:
        question = add_question(past_paper_id, body.paper_index, values)
    except PaperIndexError as e:
        raise _paper_index_error(e)

    if question is None:
        raise not_found("Past paper", past_paper_id)
    return ok(question, message="Question added successfully")


@router.put("/{past_paper_id}/questions", response_model=ApiResponse[QuestionVideoResponse])
async def edit_question(past_paper_id: str, body: QuestionUpdate) -> dict:
    """Update a question video."""
    if get_past_paper(past_paper_id) is None:
        raise not_found("Past paper", past_paper_id)

    changes = body.model_dump(exclude={"paper_index", "question_id"})
    try:
        question = update_question(past_paper_id, body.paper_index, body.question_id, changes)
    except PaperIndexError as e:
        raise _paper_index_error(e)

    if question is None:
        raise not_found("Question", body.question_id)
    return ok(question, message="Question updated successfully")


@router.delete("/{past_paper_id}/questions", response_model=ApiResponse[None])
async def remove_question(
    past_paper_id: str,
    question_id: str = Query(..., min_length=1),
    paper: int = Query(0, ge=0),
) -> dict:
    """Delete a question video."""
    if get_past_paper(past_paper_id) is None:
        raise not_found("Past paper", past_paper_id)

    try:
        deleted = delete_question(past_paper_id, paper, question_id)
    except PaperIndexError as e:
        raise _paper_index_error(e)

    if not deleted:
        raise not_found("Question", question_id)
    return ok(message="Question deleted successfully")
