import pytest

from src.daily_report.utils.errors import ValidationError
from src.daily_report.utils.pagination import (
    calculate_offset,
    calculate_pagination,
    page_params,
)


def test_empty_result_has_zero_pages():
    assert calculate_pagination(1, 20, 0)["total_pages"] == 0


def test_partial_last_page_counts():
    p = calculate_pagination(1, 20, 45)
    assert p == {"current_page": 1, "per_page": 20, "total_pages": 3, "total_count": 45}


def test_offset():
    assert calculate_offset(2, 10) == 10
    assert page_params(2, 10).offset == 10


def test_defaults():
    p = page_params()
    assert (p.page, p.per_page) == (1, 20)


@pytest.mark.parametrize("page,per_page", [(0, 20), (1, 0), (1, 101), (-3, 10)])
def test_out_of_range_is_rejected(page, per_page):
    with pytest.raises(ValidationError):
        page_params(page, per_page)


def test_max_per_page_allowed():
    assert page_params(1, 100).per_page == 100
