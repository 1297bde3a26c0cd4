"""Common Schemas — paging envelope shared by every list endpoint.

Invariants:
    - total_pages = ceil(total_count / page_size); 0 when there are no rows
    - has_previous iff page > 1; has_next iff page < total_pages
"""

import math
from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PagedResult(BaseModel, Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_previous: bool
    has_next: bool

    @classmethod
    def create(
        cls, items: Sequence[T], page: int, page_size: int, total_count: int,
    ) -> "PagedResult[T]":
        total_pages = math.ceil(total_count / page_size) if page_size else 0
        return cls(
            items=list(items),
            page=page,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
            has_previous=page > 1,
            has_next=page < total_pages,
        )
