"""Pagination and filter helpers shared by the list repositories."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from proacademics.config.app_config import load_app_config

T = TypeVar("T")

# Filter value meaning "no filter", as sent by the admin screens
ALL = "all"


@dataclass
class ListQuery:
    """Paging, search and equality filters for a list request."""

    page: int = 1
    limit: int | None = None
    search: str = ""
    filters: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        pagination = load_app_config().pagination
        if self.limit is None:
            self.limit = pagination.default_limit
        self.page = max(1, int(self.page))
        self.limit = min(max(1, int(self.limit)), pagination.max_limit)
        self.search = (self.search or "").strip()

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    """One page of list results."""

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": self.items,
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
        }


def is_active_filter(value: Any) -> bool:
    """True if a filter value should restrict results."""
    if value is None:
        return False
    text = str(value).strip()
    return text != "" and text.lower() != ALL


def like_pattern(term: str) -> str:
    """Build a LIKE pattern matching term literally anywhere."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.casefold()}%"


def build_where(
    search: str,
    search_columns: list[str],
    filters: dict[str, Any],
    filter_columns: dict[str, str],
) -> tuple[str, list[Any]]:
    """Build a WHERE clause from a search term and equality filters.

    Args:
        search: Free text, matched case-insensitively as a literal substring
        search_columns: SQL expressions to match the search against (OR-ed)
        filters: Filter name -> value; "all" and blanks are ignored
        filter_columns: Filter name -> SQL condition with one "?" placeholder

    Returns:
        (" WHERE ..." or "", params)
    """
    clauses: list[str] = []
    params: list[Any] = []

    if search and search_columns:
        pattern = like_pattern(search)
        ors = [f"casefold({col}) LIKE ? ESCAPE '\\'" for col in search_columns]
        clauses.append("(" + " OR ".join(ors) + ")")
        params.extend([pattern] * len(search_columns))

    for name, condition in filter_columns.items():
        value = filters.get(name)
        if not is_active_filter(value):
            continue
        clauses.append(condition)
        params.append(value)

    if not clauses:
        return "", params

    return " WHERE " + " AND ".join(clauses), params


def count_by(conn, table: str, column: str) -> list[tuple[str, int]]:
    """Group-count a column, most frequent first."""
    rows = conn.execute(
        f"SELECT {column} AS value, COUNT(*) AS count FROM {table} "
        f"GROUP BY {column} ORDER BY count DESC, value ASC"
    ).fetchall()
    return [(row["value"], row["count"]) for row in rows]


def distinct_column(conn, table: str, column: str, where: str = "", params: list[Any] | None = None) -> list[str]:
    """Sorted distinct non-blank values of a column."""
    rows = conn.execute(
        f"SELECT DISTINCT {column} AS value FROM {table}{where}", params or []
    ).fetchall()
    values = {row["value"] for row in rows if row["value"] and str(row["value"]).strip()}
    return sorted(values)
