from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import ColumnElement, and_, literal, or_


def at_or_after(columns: Sequence[Any], anchor: Sequence[Any]) -> ColumnElement[bool]:
    """Keyset condition for rows from ``anchor`` onwards in a descending order over ``columns``.

    The anchor row itself is included: a cursor names the first row of the
    page it opens.
    """
    # bound with the column type; SQLAlchemy only allows ==, != and is_() against a bare True/False
    pairs = [(col, literal(val, col.type)) for col, val in zip(columns, anchor)]
    col, val = pairs[-1]
    cond: ColumnElement[bool] = col <= val
    for col, val in reversed(pairs[:-1]):
        cond = or_(col < val, and_(col == val, cond))
    return cond


def split_page(rows: list[Any], limit: int, key: Any) -> tuple[list[Any], Any]:
    """Trim a ``limit + 1`` fetch to ``limit`` rows, returning the cursor of the extra row."""
    if len(rows) > limit:
        extra = rows.pop()
        return rows, key(extra)
    return rows, None
