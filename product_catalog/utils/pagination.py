"""
Pagination helpers shared by the listing endpoints.
"""
from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageFilter:
    page_index: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page_index - 1) * self.page_size


def normalize_page(page_index: int, page_size: int, *, default_size: int = 10, max_size: int = 100) -> PageFilter:
    """Page index is 1-based; non-positive values fall back to page 1 / the default size."""
    index = page_index if page_index and page_index > 0 else 1
    size = page_size if page_size and page_size > 0 else default_size
    return PageFilter(page_index=index, page_size=min(size, max_size))


def page_count(total_count: int, page_size: int) -> int:
    if page_size <= 0 or total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)
