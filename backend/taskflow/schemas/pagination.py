# Pagination schemas for paginated API responses
import math
from typing import Generic, List, TypeVar

from pydantic import Field

from taskflow.schemas.base import CamelModel

T = TypeVar("T")


class PageResponse(CamelModel, Generic[T]):
    """
    Generic page envelope.

    Every flag is derived from (page_number, page_size, total_elements), see ``of``.

    Example:
        PageResponse[TaskListResponse].of(items, page=0, size=10, total=42)
    """

    content: List[T] = Field(..., description="Items of the current page")
    page_number: int = Field(..., ge=0, description="Current page (0-indexed)")
    page_size: int = Field(..., ge=1, description="Requested page size")
    total_elements: int = Field(..., ge=0, description="Total number of matching items")
    total_pages: int = Field(..., ge=0)
    first: bool
    last: bool
    empty: bool

    @classmethod
    def of(cls, content: List[T], *, page: int, size: int, total: int) -> "PageResponse[T]":
        total_pages = math.ceil(total / size) if size > 0 else 0
        return cls(
            content=content,
            page_number=page,
            page_size=size,
            total_elements=total,
            total_pages=total_pages,
            first=page == 0,
            last=page >= total_pages - 1,
            empty=len(content) == 0,
        )


__all__ = ["PageResponse"]
