"""Envelope for list endpoints that page over an already-filtered result."""

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a result plus the size of the whole result.

    ``total`` counts every match, not just this page, so clients can show
    "51-100 of 150" without a second request.
    """
    items: list[T]
    total: int
    limit: int
    offset: int

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Any],
        limit: int,
        offset: int,
        convert: Callable[[Any], T],
    ) -> "PaginatedResponse[T]":
        return cls(
            items=[convert(row) for row in rows[offset:offset + limit]],
            total=len(rows),
            limit=limit,
            offset=offset,
        )
