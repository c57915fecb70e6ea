"""Interval overlap resolution and per-day occupancy counting.

All intervals are half-open ``[checkin, checkout)``: a guest checking out on
day D does not occupy the room on day D. The same convention is used to decide
whether a booking overlaps the queried range and to enumerate the nights it
occupies, so a stay that ends on the day another begins never double counts.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Iterator

from hotel_backend.domain.models import StayInterval


_ONE_DAY = timedelta(days=1)


def iter_nights(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in ``[start, end)``."""
    current = start
    while current < end:
        yield current
        current += _ONE_DAY


def overlaps(stay: StayInterval, range_start: date, range_end: date) -> bool:
    return stay.checkin < range_end and stay.checkout > range_start


def select_overlapping(
    stays: Iterable[StayInterval],
    range_start: date,
    range_end: date,
) -> list[StayInterval]:
    return [stay for stay in stays if overlaps(stay, range_start, range_end)]


def resolve_occupancy(
    stays: Iterable[StayInterval],
    range_start: date,
    range_end: date,
) -> dict[str, int]:
    """Count booked rooms per ISO date for every stay overlapping the range.

    Each overlapping stay contributes one room to every night it covers,
    including nights outside the queried range.
    """
    counts: Counter[str] = Counter()
    for stay in select_overlapping(stays, range_start, range_end):
        for night in iter_nights(stay.checkin, stay.checkout):
            counts[night.isoformat()] += 1
    return dict(sorted(counts.items()))


def peak_occupancy(
    daily_counts: dict[str, int],
    range_start: date,
    range_end: date,
) -> int:
    """Return the highest per-day count over the nights of ``[range_start, range_end)``."""
    return max(
        (daily_counts.get(night.isoformat(), 0) for night in iter_nights(range_start, range_end)),
        default=0,
    )
