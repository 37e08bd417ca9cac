"""Data validation helpers.

ID conventions:
- Every record id is "<prefix>-<12 hex chars>" (e.g. "hw-3f9a0c1d2e4b")
- Timestamps are UTC ISO-8601 strings
- Dates (due dates, assigned dates) are ISO "YYYY-MM-DD"

Functions:
- generate_id(prefix) -> str: New record id
- parse_date(value) -> str: Normalize a user-provided date to ISO
- normalize_level(value) -> str: easy | medium | hard
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone

VALID_STATUSES = ("draft", "active")
VALID_CONTENT_TYPES = ("Lesson", "Tutorial", "Workshop")
VALID_LEVELS = ("easy", "medium", "hard")

# Accepted date layouts, tried in order after ISO
_DATE_FORMATS = (
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%Y/%m/%d",
)

_YOUTUBE_ID_RE = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})"
)


def generate_id(prefix: str) -> str:
    """Generate a new record id with the given prefix."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def utc_now() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(timezone.utc).isoformat()


def parse_date(value: str) -> str:
    """Parse a date in one of the accepted layouts.

    Args:
        value: Raw date string ("2025-01-31", "31/01/2025", "31 Jan 2025", ...)

    Returns:
        ISO date string (YYYY-MM-DD)

    Raises:
        ValueError: If the value matches no accepted layout
    """
    text = (value or "").strip()
    if not text:
        raise ValueError("Empty date")

    try:
        return datetime.fromisoformat(text).date().isoformat()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    raise ValueError(f"Invalid date '{text}'")


def parse_int(value, default: int) -> int:
    """Parse an int leniently, falling back to default.

    "45 minutes" -> 45, "" -> default, None -> default
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    match = re.search(r"-?\d+", str(value))
    if match is None:
        return default
    return int(match.group(0))


def normalize_level(value: str | None) -> str:
    """Map a free-text level to easy | medium | hard (default hard)."""
    level = (value or "").strip().lower()
    if level == "easy":
        return "easy"
    if level == "medium":
        return "medium"
    return "hard"


def coerce_status(value: str | None, default: str = "draft") -> str:
    """Return a valid status, falling back to default."""
    status = (value or "").strip().lower()
    return status if status in VALID_STATUSES else default


def is_valid_video_url(url: str) -> bool:
    """Check that a URL points at a supported video host."""
    return "youtube.com" in url or "youtu.be" in url or "vimeo.com" in url


def get_youtube_video_id(url: str) -> str | None:
    """Extract the 11-char YouTube video id from a URL."""
    match = _YOUTUBE_ID_RE.search(url or "")
    return match.group(1) if match else None
