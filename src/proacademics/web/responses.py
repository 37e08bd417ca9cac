"""Response helpers: success envelope, CSV downloads and common errors."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, Request, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from proacademics.config import load_app_config

logger = structlog.get_logger(__name__)


def ok(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Success envelope."""
    return {"success": True, "data": data, "message": message}


def error_body(message: str) -> dict[str, Any]:
    """Error envelope."""
    return {"success": False, "error": message}


def not_found(kind: str, record_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{kind} '{record_id}' not found",
    )


def bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def csv_download(content: str, prefix: str) -> Response:
    """CSV attachment named <prefix>_<YYYY-MM-DD>.csv."""
    today = datetime.now(timezone.utc).date().isoformat()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{prefix}_{today}.csv"'},
    )


async def read_upload_text(file: UploadFile | None) -> str:
    """Decode an uploaded CSV file.

    Raises:
        HTTPException: 400 if no file was sent or it is not UTF-8 text,
            413 if it is larger than api.max_upload_bytes
    """
    if file is None:
        raise bad_request("No file provided")

    limit = load_app_config().api.max_upload_bytes
    raw = await file.read(limit + 1)
    if len(raw) > limit:
        logger.warning("upload.too_large", filename=file.filename, limit=limit)
        raise HTTPException(status_code=413, detail=f"File is larger than {limit} bytes")

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise bad_request("File must be UTF-8 encoded text")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as the error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation errors as a 422 error envelope."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"

    logger.info("request.invalid", path=request.url.path, error=message)
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(error_body(message)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render unexpected failures as a 500 error envelope."""
    logger.error("request.failed", path=request.url.path, error=str(exc), exc_type=type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )
