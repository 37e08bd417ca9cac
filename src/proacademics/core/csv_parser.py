"""Delimited text parsing shared by the CSV importers.

Handles comma and tab separated uploads (spreadsheets exported as CSV or
copied as TSV). Quoted cells may contain delimiters and newlines.
"""

from __future__ import annotations

import csv
import io
import re

_HEADER_SEPARATORS = re.compile(r"[\s.\-]+")


class CsvFormatError(Exception):
    """Raised when an upload has no usable header or rows."""

    pass


def detect_delimiter(header_line: str) -> str:
    """Tab if the header line has one, else comma."""
    return "\t" if "\t" in header_line else ","


def parse_delimited(text: str) -> tuple[list[str], list[list[str]]]:
    """Parse CSV/TSV text into headers and rows.

    Args:
        text: Full file contents (a leading BOM is ignored)

    Returns:
        (headers, rows). Cells are stripped; fully blank rows are dropped.
        Rows keep their own length so callers can detect column mismatches.

    Raises:
        CsvFormatError: If the text is empty or has a header but no rows
    """
    content = (text or "").lstrip("\ufeff")
    if not content.strip():
        raise CsvFormatError("File is empty")

    first_line = content.splitlines()[0]
    reader = csv.reader(io.StringIO(content), delimiter=detect_delimiter(first_line))

    records = [[cell.strip() for cell in row] for row in reader]
    records = [row for row in records if any(row)]
    if not records:
        raise CsvFormatError("File is empty")

    headers, rows = records[0], records[1:]
    if not rows:
        raise CsvFormatError("File must contain a header row and at least one data row")

    return headers, rows


def normalize_header(header: str) -> str:
    """Lower-case a header and turn spaces, dots and hyphens into underscores.

    "Est.Time" -> "est_time", "Date Due" -> "date_due"
    """
    return _HEADER_SEPARATORS.sub("_", header.strip().lower()).strip("_")


def rows_as_dicts(headers: list[str], rows: list[list[str]]) -> list[dict[str, str]]:
    """Zip rows with headers; short rows are padded with empty strings."""
    result = []
    for row in rows:
        padded = row + [""] * (len(headers) - len(row))
        result.append(dict(zip(headers, padded)))
    return result


def find_value(row: dict[str, str], aliases: list[str]) -> str:
    """First non-empty value among alias headers (case-insensitive)."""
    lowered = {key.strip().lower(): value for key, value in row.items()}
    for alias in aliases:
        value = lowered.get(alias.lower())
        if value and value.strip():
            return value.strip()
    return ""
