"""
Shared Pydantic schemas.

This module provides:
- SearchResult: page of ORM rows plus the unpaged total (service -> route)
- PaginationParams / PaginationMeta / PaginatedResponse for list endpoints
- MessageResponse for endpoints that only acknowledge an action
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")

MAX_PAGE_SIZE = 100


class SearchResult(BaseModel, Generic[DataT]):
    """
    One page of rows returned by a service.

    Attributes:
        items: Rows of the requested page
        total: Number of rows matching the filters, ignoring pagination
    """

    items: list[DataT]
    total: int

    model_config = ConfigDict(arbitrary_types_allowed=True)


class PaginationParams(BaseModel):
    """Page selection for list endpoints, read from the query string."""

    page: int = Field(default=1, ge=1, description="1-based page number")
    page_size: int = Field(
        default=20,
        ge=1,
        le=MAX_PAGE_SIZE,
        description=f"Rows per page (at most {MAX_PAGE_SIZE})",
    )

    @property
    def offset(self) -> int:
        """
        Rows to skip before the requested page.

        Example:
            >>> PaginationParams(page=3, page_size=10).offset
            20
        """
        return (self.page - 1) * self.page_size

    @staticmethod
    def calculate_total_pages(total: int, page_size: int) -> int:
        """
        Number of pages needed for total rows (0 when there are none).

        Example:
            >>> PaginationParams.calculate_total_pages(41, 20)
            3
        """
        return -(-total // page_size) if total > 0 else 0


class PaginationMeta(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int


class PaginatedResponse(BaseModel, Generic[DataT]):
    """List endpoint body: the page rows under data, counters under meta."""

    data: list[DataT]
    meta: PaginationMeta


class MessageResponse(BaseModel):
    """Acknowledgement for operations without a resource body."""

    message: str
