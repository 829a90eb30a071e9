"""
Page arithmetic for the favorites list.

The cursor is derived, not stored with the favorites: it is clamped to
[1, max(1, ceil(count / per_page))] whenever the list or the cursor changes.
"""

import math
from typing import Sequence, Tuple, TypeVar

T = TypeVar("T")

FAVORITES_PER_PAGE = 6


def total_pages(count: int, per_page: int = FAVORITES_PER_PAGE) -> int:
    """Number of pages for count items; an empty list still has one (empty) page."""
    return max(1, math.ceil(count / per_page))


def clamp_page(page: int, count: int, per_page: int = FAVORITES_PER_PAGE) -> int:
    return min(max(page, 1), total_pages(count, per_page))


def page_slice(items: Sequence[T], page: int, per_page: int = FAVORITES_PER_PAGE) -> Tuple[T, ...]:
    """Items shown on page (1-indexed). page is clamped first."""
    page = clamp_page(page, len(items), per_page)
    start = (page - 1) * per_page
    return tuple(items[start:start + per_page])
