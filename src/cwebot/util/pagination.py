"""Fixed-size paging over already-loaded sequences."""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

T = TypeVar("T")

PAGE_SIZE = 20


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    """Number of pages needed for ``total`` items (``ceil(total / page_size)``)."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(max(total, 0) / page_size)


def paginate(items: Sequence[T], page: int, page_size: int = PAGE_SIZE) -> list[T]:
    """
    Return the zero-based ``page`` of ``items``.

    Pages past the end, and negative pages, come back empty instead of
    raising so callers can ask for any index.
    """
    if page < 0 or page >= page_count(len(items), page_size):
        return []
    start = page * page_size
    return list(items[start:start + page_size])
