"""Fetch-then-patch editing of a single row."""

import math
from typing import TYPE_CHECKING, Any

from .types import ErrorInfo, WriteResult

if TYPE_CHECKING:
    from .client import Client


def _is_blank(value: Any) -> bool:
    if value is None or value == "":
        return True
    return isinstance(value, float) and math.isnan(value)


def merge_edits(original: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Return ``changes`` with blank values replaced by the original's.

    Blank means ``None``, ``""`` or NaN. A blank key the original row lacks is
    dropped, and keys absent from ``changes`` are not added.
    """
    merged = {}
    for key, value in changes.items():
        if not _is_blank(value):
            merged[key] = value
        elif key in original:
            merged[key] = original[key]
    return merged


async def update_row(
    client: "Client",
    table: str,
    column: str,
    value: Any,
    changes: dict[str, Any],
) -> WriteResult:
    """Update the row where ``column == value``, keeping fields left blank.

    Returns:
        The update's WriteResult, or the fetch error if the row could not be read.
    """
    current = await client.from_(table).select("*").eq(column, value).single()
    if current.error is not None:
        return WriteResult(data=None, error=current.error)
    if current.data is None:
        return WriteResult(data=None, error=ErrorInfo(f"No {table} row where {column} = {value}"))
    return await client.from_(table).update(merge_edits(current.data, changes)).eq(column, value)
