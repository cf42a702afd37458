"""Page slicing shared by the post and contact listings."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
            "hasNext": self.has_next,
        }


def paginate(items: Sequence[Any], page: int, limit: int) -> tuple[list[Any], Pagination]:
    """Slice ``items`` for ``page``; out-of-range pages clamp to the last one."""
    total = len(items)
    pages = max(-(-total // limit), 1)
    safe_page = min(page, pages)
    start = (safe_page - 1) * limit
    return list(items[start : start + limit]), Pagination(
        page=safe_page, limit=limit, total=total, pages=pages, has_next=safe_page < pages
    )
