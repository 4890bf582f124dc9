# hotel_ledger/pagination.py
from typing import Any, List

from fastapi import Query
from pydantic import BaseModel, Field

from .config import settings


class Page(BaseModel):
    items: List[Any] = Field(..., description="Entries on this page")
    page: int = Field(..., description="Current page number (1-indexed)")
    page_size: int
    total: int = Field(..., description="Total number of entries")
    total_pages: int
    has_next: bool
    has_prev: bool
    next_page: int
    prev_page: int


def page_query(page: int = Query(1, description="Page number, clamped into range")) -> int:
    return page


def paginate(items: List[Any], page: int = 1, page_size: int | None = None) -> Page:
    """Slice items into a fixed-size window; out-of-range pages are clamped."""
    if page_size is None:
        page_size = settings.LEDGER_PAGE_SIZE
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    total = len(items)
    total_pages = max(1, (total + page_size - 1) // page_size)
    page = min(max(page, 1), total_pages)
    start_idx = (page - 1) * page_size

    return Page(
        items=items[start_idx:start_idx + page_size],
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
        next_page=min(page + 1, total_pages),
        prev_page=max(page - 1, 1),
    )
