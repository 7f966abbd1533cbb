"""Tests for gpdb_toolkit/common/pagination.py"""

from __future__ import annotations

import math

import pytest

from gpdb_toolkit.common.pagination import PaginationCursor, collect_pages
from tests.assertions import assert_equal


def _pager(total, page_size):
    records = list(range(total))
    calls = []

    def fetch(cursor):
        calls.append(cursor.page_number)
        assert cursor.page_size == page_size
        start = (cursor.page_number - 1) * cursor.page_size
        return records[start : start + cursor.page_size]

    return fetch, calls, records


@pytest.mark.parametrize("total", [1, 7, 10, 49, 50, 51, 100, 123])
def test_collect_pages_call_count(total):
    """ceil(N/P) calls, plus one empty call when N is an exact multiple of P."""
    page_size = 10 if total < 50 else 50
    fetch, calls, records = _pager(total, page_size)

    result = collect_pages(fetch, page_size)

    expected_calls = math.ceil(total / page_size)
    if total % page_size == 0:
        expected_calls += 1
    assert_equal(result, records)
    assert_equal(len(calls), expected_calls)
    assert_equal(calls, list(range(1, expected_calls + 1)))


def test_collect_pages_empty_listing_makes_one_call():
    """No records means one call returning nothing."""
    fetch, calls, _ = _pager(0, 50)
    assert_equal(collect_pages(fetch, 50), [])
    assert_equal(calls, [1])


def test_collect_pages_propagates_errors_without_partial_results():
    """An error on a later page aborts the whole listing."""

    def fetch(cursor):
        if cursor.page_number == 2:
            raise RuntimeError("listing broke")
        return [1, 2]

    with pytest.raises(RuntimeError, match="listing broke"):
        collect_pages(fetch, 2)


def test_cursor_advance_and_validation():
    """Cursors advance by one page and reject non-positive values."""
    assert_equal(PaginationCursor(3, 20).advance(), PaginationCursor(4, 20))
    with pytest.raises(ValueError):
        PaginationCursor(0, 20)
    with pytest.raises(ValueError):
        PaginationCursor(1, 0)
