"""Page-number pagination over list APIs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from gpdb_toolkit.common.settings import PAGE_SIZE_LARGE


@dataclass(frozen=True)
class PaginationCursor:
    """Page number plus the fixed page size of a list call."""

    page_number: int = 1
    page_size: int = PAGE_SIZE_LARGE

    def __post_init__(self):
        if not isinstance(self.page_number, int) or self.page_number < 1:
            raise ValueError(f"Invalid page number: {self.page_number!r}")
        if not isinstance(self.page_size, int) or self.page_size < 1:
            raise ValueError(f"Invalid page size: {self.page_size!r}")

    def advance(self) -> "PaginationCursor":
        """Return the cursor for the following page."""
        return PaginationCursor(self.page_number + 1, self.page_size)


def collect_pages(
    fetch_page: Callable[[PaginationCursor], Sequence],
    page_size: int = PAGE_SIZE_LARGE,
) -> list:
    """
    Fetch pages starting at page 1 until a page comes back empty or short.

    Args:
        fetch_page: Callable returning the records of one page
        page_size: Upper bound on records per page

    Returns:
        list: Records from every page, in order

    Raises:
        Whatever fetch_page raises; partial results are discarded.
    """
    records: list = []
    cursor = PaginationCursor(1, page_size)
    while True:
        page = list(fetch_page(cursor) or [])
        logging.debug("Page %d returned %d record(s)", cursor.page_number, len(page))
        if not page:
            break
        records.extend(page)
        if len(page) < cursor.page_size:
            break
        cursor = cursor.advance()
    return records
