from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from ..core.constants import MAX_PAGE_SIZE

T = TypeVar("T")


def normalize_paging(page, limit, *, default_limit: int) -> tuple[int, int]:
    try:
        page_i = max(1, int(page or 1))
    except (TypeError, ValueError):
        page_i = 1
    try:
        limit_i = int(limit or default_limit)
    except (TypeError, ValueError):
        limit_i = default_limit
    return page_i, min(max(1, limit_i), MAX_PAGE_SIZE)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def meta(self) -> dict:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}
