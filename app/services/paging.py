"""Lenient parsing of ``page``, ``size`` and ``sort`` query values."""

from __future__ import annotations

from collections.abc import Sequence

from app.db.repository.paging import PageRequest
from app.db.repository.paging import SortDirection
from app.db.repository.paging import SortOrder

INT32_MAX = 2**31 - 1


def _parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    if abs(value) > INT32_MAX:
        return None
    return value


def _parse_sort(raw: str) -> list[SortOrder]:
    parts = [part.strip() for part in raw.split(",") if part.strip()]
    direction = SortDirection.ASC
    if parts and parts[-1].lower() in (SortDirection.ASC.value, SortDirection.DESC.value):
        direction = SortDirection(parts.pop().lower())
    return [SortOrder(property=part, direction=direction) for part in parts]


def parse_page_request(
    page: str | None,
    size: str | None,
    sort: Sequence[str] = (),
    *,
    default_size: int,
    max_size: int,
) -> PageRequest:
    """Build a page request, falling back to defaults for unusable values.

    Unparseable or negative page numbers select the first page; unparseable or
    non-positive sizes select ``default_size``; sizes above ``max_size`` are
    capped.
    """
    page_number = _parse_int(page)
    if page_number is None or page_number < 0:
        page_number = 0

    page_size = _parse_int(size)
    if page_size is None or page_size < 1:
        page_size = default_size
    page_size = min(page_size, max_size)

    orders: list[SortOrder] = []
    for raw in sort:
        orders.extend(_parse_sort(raw))
    return PageRequest(page=page_number, size=page_size, sort=tuple(orders))
