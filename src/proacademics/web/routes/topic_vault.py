"""Topic vault endpoints: topics, their subtopic videos, and CSV import."""

import structlog
from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from proacademics.core.csv_export import export_topics_csv
from proacademics.core.csv_parser import CsvFormatError
from proacademics.core.grouping import group_records, hierarchical_groups
from proacademics.core.homework_importer import ImportValidationError
from proacademics.core.topic_vault_importer import (
    TEMPLATE_CSV,
    commit_topics,
    preview_topics_csv,
)
from proacademics.db.query import ListQuery
from proacademics.db.topic_vault_repository import (
    SubtopicNotFoundError,
    add_subtopic,
    delete_all_topics,
    delete_subtopic,
    delete_topic,
    distinct_values,
    get_topic,
    insert_topic,
    list_all_topics,
    list_topics,
    new_topic,
    reorder_subtopics,
    topic_vault_stats,
    update_subtopic,
    update_topic,
)
from proacademics.web.responses import bad_request, csv_download, not_found, ok, read_upload_text
from proacademics.web.schemas import (
    ApiResponse,
    PageResponse,
    ReorderRequest,
    SubtopicCreate,
    SubtopicResponse,
    SubtopicUpdate,
    TopicCreate,
    TopicImportRequest,
    TopicResponse,
    TopicUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/topic-vault", tags=["topic-vault"])


def _filters(subject, program, teacher, status_filter, type_filter) -> dict:
    return {
        "subject": subject,
        "program": program,
        "teacher": teacher,
        "status": status_filter,
        "type": type_filter,
    }


def _subtopic_not_found(e: SubtopicNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=ApiResponse[PageResponse[TopicResponse]])
async def list_all(
    page: int = 1,
    limit: int | None = None,
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    teacher: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    type_filter: str | None = Query(None, alias="type"),
) -> dict:
    """List topics with search, filters and paging.

    teacher and type match any subtopic of the topic.
    """
    query = ListQuery(
        page=page,
        limit=limit,
        search=search,
        filters=_filters(subject, program, teacher, status_filter, type_filter),
    )
    return ok(list_topics(query).to_dict())


@router.get("/grouped", response_model=ApiResponse[dict[str, list[TopicResponse]]])
async def grouped(
    group_by: str = "subject-program",
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    teacher: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    type_filter: str | None = Query(None, alias="type"),
) -> dict:
    """All matching topics grouped by subject, program or both."""
    topics = list_all_topics(_filters(subject, program, teacher, status_filter, type_filter), search)
    try:
        groups = group_records(topics, group_by)
    except ValueError as e:
        raise bad_request(str(e))
    return ok(groups)


@router.get("/tree", response_model=ApiResponse[dict[str, dict[str, list[TopicResponse]]]])
async def tree(
    search: str = "",
    status_filter: str | None = Query(None, alias="status"),
) -> dict:
    """Topics nested as subject -> program -> topics."""
    topics = list_all_topics({"status": status_filter}, search)
    return ok(hierarchical_groups(topics))


@router.get("/stats", response_model=ApiResponse[dict])
async def stats() -> dict:
    """Topic and subtopic totals with subject and type breakdowns."""
    return ok(topic_vault_stats())


@router.get("/export")
async def export(
    search: str = "",
    subject: str | None = None,
    program: str | None = None,
    teacher: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    type_filter: str | None = Query(None, alias="type"),
) -> Response:
    """Download matching topics as CSV (one row per subtopic)."""
    topics = list_all_topics(_filters(subject, program, teacher, status_filter, type_filter), search)
    logger.info("topics.exported", count=len(topics))
    return csv_download(export_topics_csv(topics), "topic_vault")


@router.get("/filters/subjects", response_model=ApiResponse[list[str]])
async def filter_subjects() -> dict:
    return ok(distinct_values("subject"))


@router.get("/filters/programs", response_model=ApiResponse[list[str]])
async def filter_programs(subject: str | None = None) -> dict:
    return ok(distinct_values("program", subject))


@router.get("/filters/teachers", response_model=ApiResponse[list[str]])
async def filter_teachers() -> dict:
    """Teachers across all subtopic videos."""
    return ok(distinct_values("teacher"))


@router.delete("/delete-all", response_model=ApiResponse[dict[str, int]])
async def delete_all() -> dict:
    """Delete every topic."""
    count = delete_all_topics()
    return ok({"deleted_count": count}, message=f"Deleted {count} topics")


@router.get("/import/template")
async def import_template() -> Response:
    """Example CSV with the expected columns."""
    return Response(
        content=TEMPLATE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="topic_vault_template.csv"'},
    )


@router.post("/import/preview", response_model=ApiResponse[dict])
async def import_preview(file: UploadFile | None = File(None)) -> dict:
    """Validate a CSV upload and show how rows group into topics."""
    text = await read_upload_text(file)
    try:
        preview = preview_topics_csv(text)
    except CsvFormatError as e:
        raise bad_request(str(e))
    return ok(preview.to_dict())


@router.post(
    "/import",
    response_model=ApiResponse[dict],
    status_code=status.HTTP_201_CREATED,
)
async def import_rows(body: TopicImportRequest) -> dict:
    """Save confirmed video rows, merging into existing topics."""
    try:
        result = commit_topics([row.model_dump() for row in body.rows])
    except ImportValidationError as e:
        raise bad_request(str(e))

    result["topics"] = [TopicResponse.model_validate(t) for t in result["topics"]]
    return ok(
        result,
        message=(
            f"Imported {result['subtopics_added']} videos into "
            f"{result['created'] + result['updated']} topics"
        ),
    )


@router.post(
    "",
    response_model=ApiResponse[TopicResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create(body: TopicCreate) -> dict:
    """Create a topic, optionally with subtopics."""
    record = insert_topic(new_topic(**body.model_dump()))
    logger.info("topics.created", topic_id=record.id, subtopics=len(record.subtopics))
    return ok(record, message="Topic created successfully")


@router.get("/{topic_id}", response_model=ApiResponse[TopicResponse])
async def get(topic_id: str) -> dict:
    """Get a topic with its subtopics."""
    record = get_topic(topic_id)
    if record is None:
        raise not_found("Topic", topic_id)
    return ok(record)


@router.put("/{topic_id}", response_model=ApiResponse[TopicResponse])
async def update(topic_id: str, body: TopicUpdate) -> dict:
    """Update topic fields (partial; subtopics are edited separately)."""
    record = update_topic(topic_id, body.model_dump(exclude_unset=True))
    if record is None:
        raise not_found("Topic", topic_id)
    return ok(record, message="Topic updated successfully")


@router.delete("/{topic_id}", response_model=ApiResponse[None])
async def delete(topic_id: str) -> dict:
    """Delete a topic and its subtopics."""
    if not delete_topic(topic_id):
        raise not_found("Topic", topic_id)
    return ok(message="Topic deleted successfully")


# =============================================================================
# SUBTOPICS
# =============================================================================


@router.post(
    "/{topic_id}/subtopics",
    response_model=ApiResponse[SubtopicResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_subtopic(topic_id: str, body: SubtopicCreate) -> dict:
    """Append a subtopic video to a topic."""
    subtopic = add_subtopic(topic_id, body.model_dump())
    if subtopic is None:
        raise not_found("Topic", topic_id)
    return ok(subtopic, message="Subtopic added successfully")


@router.post("/{topic_id}/subtopics/reorder", response_model=ApiResponse[TopicResponse])
async def reorder(topic_id: str, body: ReorderRequest) -> dict:
    """Move a subtopic to a new position."""
    try:
        record = reorder_subtopics(topic_id, body.from_index, body.to_index)
    except IndexError as e:
        raise bad_request(str(e))

    if record is None:
        raise not_found("Topic", topic_id)
    return ok(record, message="Subtopics reordered")


@router.put("/{topic_id}/subtopics/{subtopic_id}", response_model=ApiResponse[SubtopicResponse])
async def edit_subtopic(topic_id: str, subtopic_id: str, body: SubtopicUpdate) -> dict:
    """Update a subtopic video."""
    try:
        subtopic = update_subtopic(topic_id, subtopic_id, body.model_dump(exclude_unset=True))
    except SubtopicNotFoundError as e:
        raise _subtopic_not_found(e)

    if subtopic is None:
        raise not_found("Topic", topic_id)
    return ok(subtopic, message="Subtopic updated successfully")


@router.delete("/{topic_id}/subtopics/{subtopic_id}", response_model=ApiResponse[None])
async def remove_subtopic(topic_id: str, subtopic_id: str) -> dict:
    """Delete a subtopic video."""
    try:
        deleted = delete_subtopic(topic_id, subtopic_id)
    except SubtopicNotFoundError as e:
        raise _subtopic_not_found(e)

    if not deleted:
        raise not_found("Topic", topic_id)
    return ok(message="Subtopic deleted successfully")
