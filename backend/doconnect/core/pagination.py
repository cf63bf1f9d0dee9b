"""Pagination — page/page_size normalization and the shared list envelope."""

import math

MAX_PAGE_SIZE = 100


def normalize_page(page: int, page_size: int) -> tuple[int, int]:
    """Clamp to page >= 1 and 1 <= page_size <= MAX_PAGE_SIZE."""
    return max(page, 1), min(max(page_size, 1), MAX_PAGE_SIZE)


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if page_size else 0


def page_envelope(
    items_key: str, items: list, total_count: int, page: int, page_size: int,
) -> dict:
    return {
        items_key: items,
        "total_count": total_count,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages(total_count, page_size),
    }
