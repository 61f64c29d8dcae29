"""Shared sorting for list endpoints."""

from __future__ import annotations

from sqlalchemy import JSON, asc, desc
from sqlalchemy.orm import Query

from app.core.database import Base

# Never sortable, whatever the model
HIDDEN_FIELDS = frozenset({"credentials", "key_hash"})


def sortable_fields(model: type[Base]) -> set[str]:
    """Columns a client may sort ``model`` by: every scalar, non-secret column."""
    return {
        column.key
        for column in model.__table__.columns  # type: ignore[attr-defined]
        if column.key not in HIDDEN_FIELDS and not isinstance(column.type, JSON)
    }


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Apply ordering to a SQLAlchemy query.

    Args:
        query: The SQLAlchemy query to sort.
        model: The SQLAlchemy model class.
        order_by: Sort string in "field:direction" format (e.g. "name:asc").
            Unknown or unsortable fields fall back to the default ordering.
        default_field: Default column to sort by.
        default_direction: Default sort direction ("asc" or "desc").

    Returns:
        The query with ordering applied.
    """
    field = default_field
    direction = default_direction

    if order_by:
        candidate_field, _, candidate_direction = order_by.partition(":")
        if candidate_field in sortable_fields(model):
            field = candidate_field
            direction = candidate_direction or "asc"
            if direction not in ("asc", "desc"):
                direction = default_direction

    column = getattr(model, field)
    order_func = asc if direction == "asc" else desc
    return query.order_by(order_func(column))
