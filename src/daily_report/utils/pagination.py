# src/daily_report/utils/pagination.py
from __future__ import annotations

import math
from dataclasses import dataclass

from src.daily_report.utils.errors import ValidationError

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class PageParams:
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    @property
    def offset(self) -> int:
        return calculate_offset(self.page, self.per_page)


def page_params(page: int | None = None, per_page: int | None = None) -> PageParams:
    """Out-of-range values are rejected, never clamped."""
    page = DEFAULT_PAGE if page is None else page
    per_page = DEFAULT_PER_PAGE if per_page is None else per_page
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if per_page < 1:
        raise ValidationError("per_page must be 1 or greater")
    if per_page > MAX_PER_PAGE:
        raise ValidationError(f"per_page must be {MAX_PER_PAGE} or less")
    return PageParams(page=page, per_page=per_page)


def calculate_offset(page: int, per_page: int) -> int:
    return (page - 1) * per_page


def calculate_pagination(page: int, per_page: int, total_count: int) -> dict:
    # ceil(0 / n) == 0: an empty result has zero pages, not one
    total_pages = math.ceil(total_count / per_page)
    return {
        "current_page": page,
        "per_page": per_page,
        "total_pages": total_pages,
        "total_count": total_count,
    }
