from __future__ import annotations

import math
from typing import Iterable, Sequence

from .models import (
    AircraftRecord,
    AircraftStatus,
    FilterState,
    ListingPage,
    SortKey,
)

PAGE_SIZE = 12


def _matches_search(aircraft: AircraftRecord, query: str) -> bool:
    """Case-insensitive substring match on title, manufacturer, model, description."""
    if not query:
        return True
    fields = (aircraft.title, aircraft.manufacturer, aircraft.model, aircraft.description)
    return any(f is not None and query in f.lower() for f in fields)


def _within(value: float | None, low: float | None, high: float | None) -> bool:
    # A missing value never satisfies an active bound.
    if low is not None and (value is None or value < low):
        return False
    if high is not None and (value is None or value > high):
        return False
    return True


def filter_aircraft(
    records: Iterable[AircraftRecord], filters: FilterState,
) -> list[AircraftRecord]:
    """Apply the draft baseline and then every user-controlled filter."""
    query = filters.search.strip().lower()
    categories = set(filters.categories)
    statuses = set(filters.statuses)

    result: list[AircraftRecord] = []
    for aircraft in records:
        if aircraft.status == AircraftStatus.draft:
            continue
        if not _matches_search(aircraft, query):
            continue
        if categories and aircraft.category not in categories:
            continue
        if statuses and aircraft.status not in statuses:
            continue
        if not _within(aircraft.price, filters.min_price, filters.max_price):
            continue
        if not _within(aircraft.year_manufactured, filters.min_year, filters.max_year):
            continue
        result.append(aircraft)
    return result


def _display_group(aircraft: AircraftRecord) -> tuple[bool, bool, bool]:
    # available first, then featured, then pending ahead of sold
    return (
        aircraft.status != AircraftStatus.available,
        not aircraft.featured,
        aircraft.status == AircraftStatus.sold,
    )


def sort_aircraft(
    records: Iterable[AircraftRecord], sort_by: SortKey = SortKey.newest,
) -> list[AircraftRecord]:
    """Apply the requested sort, then stably re-partition into display groups.

    Python's sort is stable, so the second pass only moves records across
    group boundaries and keeps the requested order inside each group.
    """
    result = list(records)

    if sort_by == SortKey.newest:
        result.sort(key=lambda a: a.created_at, reverse=True)
    elif sort_by == SortKey.price_asc:
        result.sort(key=lambda a: (a.price is None, a.price or 0.0))
    elif sort_by == SortKey.price_desc:
        result.sort(key=lambda a: (a.price is None, -(a.price or 0.0)))
    elif sort_by == SortKey.year_desc:
        result.sort(key=lambda a: a.year_manufactured, reverse=True)
    elif sort_by == SortKey.year_asc:
        result.sort(key=lambda a: a.year_manufactured)

    result.sort(key=_display_group)
    return result


def total_pages(total: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total / page_size) if total > 0 else 0


def paginate(
    records: Sequence[AircraftRecord], page: int, page_size: int = PAGE_SIZE,
) -> tuple[list[AircraftRecord], int]:
    """Return the 1-based *page* slice and the total record count."""
    page = max(1, page)
    start = (page - 1) * page_size
    return list(records[start:start + page_size]), len(records)


def build_listing_page(
    records: Iterable[AircraftRecord],
    filters: FilterState,
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> ListingPage:
    ordered = sort_aircraft(filter_aircraft(records, filters), filters.sort_by)
    items, total = paginate(ordered, page, page_size)
    return ListingPage(
        items=items,
        total=total,
        page=max(1, page),
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )
