import pytest

from cwebot.util.pagination import PAGE_SIZE, page_count, paginate


def test_page_size_is_twenty():
    assert PAGE_SIZE == 20


@pytest.mark.parametrize(("total", "pages"), [(0, 0), (1, 1), (20, 1), (21, 2), (41, 3)])
def test_page_count_rounds_up(total, pages):
    assert page_count(total) == pages


def test_page_count_rejects_non_positive_page_size():
    with pytest.raises(ValueError):
        page_count(10, 0)


def test_paginate_returns_requested_slice():
    items = list(range(45))

    assert paginate(items, 0) == list(range(20))
    assert paginate(items, 2) == [40, 41, 42, 43, 44]


def test_paginate_out_of_range_pages_are_empty():
    items = list(range(5))

    assert paginate(items, 1) == []
    assert paginate(items, -1) == []
    assert paginate([], 0) == []
