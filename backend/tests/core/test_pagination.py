"""Pagination — tests for page normalization and the list envelope."""

from doconnect.core.pagination import (
    MAX_PAGE_SIZE, normalize_page, page_envelope, page_offset, total_pages,
)


def test_normalize_clamps_low_values():
    assert normalize_page(0, 0) == (1, 1)
    assert normalize_page(-3, -10) == (1, 1)


def test_normalize_caps_page_size():
    assert normalize_page(2, 1000) == (2, MAX_PAGE_SIZE)


def test_page_offset():
    assert page_offset(1, 10) == 0
    assert page_offset(3, 10) == 20


def test_total_pages_rounds_up():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


def test_page_envelope_shape():
    envelope = page_envelope("questions", ["q1", "q2"], 12, 2, 5)
    assert envelope == {
        "questions": ["q1", "q2"],
        "total_count": 12,
        "page": 2,
        "page_size": 5,
        "total_pages": 3,
    }
