"""Pagination helpers over Protean query sets."""

from dataclasses import dataclass
from math import ceil
from typing import Any, Iterator

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Page:
    items: list[Any]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0

    def meta(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next_page": self.page < self.total_pages,
            "has_prev_page": self.page > 1,
        }


def paginate(queryset, page: int = 1, limit: int = 20) -> Page:
    """Fetch one page of ``queryset``. Page numbers start at 1."""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    result = queryset.offset((page - 1) * limit).limit(limit).all()
    return Page(items=list(result.items), page=page, limit=limit, total=result.total)


def iterate(queryset, batch_size: int = MAX_PAGE_SIZE) -> Iterator[Any]:
    """Yield every record of ``queryset``, fetching in batches."""
    offset = 0
    while True:
        batch = queryset.offset(offset).limit(batch_size).all().items
        yield from batch
        if len(batch) < batch_size:
            return
        offset += batch_size
