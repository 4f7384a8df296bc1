"""Page and sort requests understood by the repositories."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import ceil


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortOrder:
    """Ordering on one public property name, e.g. ``firstName``."""

    property: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page number, page size and sort orders."""

    page: int = 0
    size: int = 20
    sort: tuple[SortOrder, ...] = ()

    @property
    def offset(self) -> int:
        return self.page * self.size


def total_pages(total_elements: int, size: int) -> int:
    if size <= 0:
        return 0
    return ceil(total_elements / size)
