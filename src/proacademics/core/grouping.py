"""Grouping and ordering helpers for content lists.

Records may be dataclasses or dicts; both expose subject and program.
"""

from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T")

GROUP_BY_OPTIONS = ("none", "subject", "program", "subject-program")

ALL_GROUP = "All Topics"
UNKNOWN_SUBJECT = "Unknown Subject"
UNKNOWN_PROGRAM = "Unknown Program"


def _get(record: Any, name: str) -> str:
    if isinstance(record, dict):
        value = record.get(name)
    else:
        value = getattr(record, name, None)
    return (value or "").strip() if isinstance(value, str) else (value or "")


def group_records(records: list[T], group_by: str = "none") -> dict[str, list[T]]:
    """Group records by subject, program or both.

    Args:
        records: Records in display order
        group_by: none | subject | program | subject-program

    Returns:
        Group label -> records, in first-seen order

    Raises:
        ValueError: For an unknown group_by
    """
    if group_by not in GROUP_BY_OPTIONS:
        raise ValueError(
            f"Invalid group_by '{group_by}'. Expected one of: {', '.join(GROUP_BY_OPTIONS)}"
        )

    if group_by == "none":
        return {ALL_GROUP: list(records)}

    groups: dict[str, list[T]] = {}
    for record in records:
        subject = _get(record, "subject") or UNKNOWN_SUBJECT
        program = _get(record, "program") or UNKNOWN_PROGRAM
        if group_by == "subject":
            key = subject
        elif group_by == "program":
            key = program
        else:
            key = f"{subject} - {program}"
        groups.setdefault(key, []).append(record)

    return groups


def hierarchical_groups(records: list[T]) -> dict[str, dict[str, list[T]]]:
    """Nest records as subject -> program -> records."""
    tree: dict[str, dict[str, list[T]]] = {}
    for record in records:
        subject = _get(record, "subject") or UNKNOWN_SUBJECT
        program = _get(record, "program") or UNKNOWN_PROGRAM
        tree.setdefault(subject, {}).setdefault(program, []).append(record)
    return tree


def move_item(items: list[T], from_index: int, to_index: int) -> list[T]:
    """Return a copy of items with one element moved.

    Raises:
        IndexError: If either index is outside the list
    """
    size = len(items)
    if not 0 <= from_index < size or not 0 <= to_index < size:
        raise IndexError(
            f"Cannot move item {from_index} to {to_index} in a list of {size}"
        )

    result = list(items)
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


def ensure_url_protocol(url: str) -> str:
    """Prefix https:// to a URL that has no scheme."""
    text = (url or "").strip()
    if not text:
        return ""
    if text.startswith(("http://", "https://")):
        return text
    return f"https://{text}"
