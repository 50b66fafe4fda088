"""Pagination arithmetic shared by list views."""

from __future__ import annotations

import math

ELLIPSIS = "..."


def total_pages(total_items: int, page_size: int) -> int:
    """Number of pages for *total_items*; never less than 1."""
    return max(1, math.ceil(total_items / max(page_size, 1)))


def clamp_page(page: int, last_page: int) -> int:
    return max(1, min(page, max(last_page, 1)))


def page_range(current_page: int, last_page: int, sibling_count: int = 1) -> list[int | str]:
    """Page buttons to render, with ``"..."`` marking skipped runs.

    Always shows the first and last page plus *sibling_count* neighbours on
    each side of *current_page*.  When the whole range fits in
    ``2 * sibling_count + 5`` slots it is returned without gaps.
    """
    if last_page <= sibling_count * 2 + 5:
        return list(range(1, last_page + 1))

    current_page = clamp_page(current_page, last_page)
    left_sibling = max(current_page - sibling_count, 1)
    right_sibling = min(current_page + sibling_count, last_page)

    show_left_ellipsis = left_sibling > 2
    show_right_ellipsis = right_sibling < last_page - 1

    pages: list[int | str] = [1]
    if show_left_ellipsis:
        pages.append(ELLIPSIS)

    start = left_sibling if show_left_ellipsis else 2
    end = right_sibling if show_right_ellipsis else last_page - 1
    pages.extend(range(start, end + 1))

    if show_right_ellipsis:
        pages.append(ELLIPSIS)
    pages.append(last_page)
    return pages
