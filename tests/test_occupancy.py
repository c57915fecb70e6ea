"""Tests for half-open interval overlap and per-night occupancy counting."""

from __future__ import annotations

from datetime import date

from hotel_backend.domain.models import StayInterval
from hotel_backend.domain.occupancy import (
    iter_nights,
    overlaps,
    peak_occupancy,
    resolve_occupancy,
    select_overlapping,
)


def stay(checkin: str, checkout: str) -> StayInterval:
    return StayInterval(checkin=date.fromisoformat(checkin), checkout=date.fromisoformat(checkout))


def test_iter_nights_excludes_checkout_day() -> None:
    nights = list(iter_nights(date(2025, 6, 1), date(2025, 6, 4)))
    assert nights == [date(2025, 6, 1), date(2025, 6, 2), date(2025, 6, 3)]


def test_iter_nights_empty_for_non_positive_range() -> None:
    assert list(iter_nights(date(2025, 6, 2), date(2025, 6, 2))) == []


def test_stay_ending_on_range_start_does_not_overlap() -> None:
    assert not overlaps(stay("2025-06-01", "2025-06-02"), date(2025, 6, 2), date(2025, 6, 4))


def test_stay_starting_on_range_end_does_not_overlap() -> None:
    assert not overlaps(stay("2025-06-04", "2025-06-06"), date(2025, 6, 2), date(2025, 6, 4))


def test_partial_and_enclosing_stays_overlap() -> None:
    range_start, range_end = date(2025, 6, 2), date(2025, 6, 4)
    assert overlaps(stay("2025-06-01", "2025-06-03"), range_start, range_end)
    assert overlaps(stay("2025-06-03", "2025-06-10"), range_start, range_end)
    assert overlaps(stay("2025-05-20", "2025-06-20"), range_start, range_end)


def test_back_to_back_stay_contributes_zero_nights() -> None:
    counts = resolve_occupancy([stay("2025-06-01", "2025-06-02")], date(2025, 6, 2), date(2025, 6, 4))
    assert counts == {}
    assert peak_occupancy(counts, date(2025, 6, 2), date(2025, 6, 4)) == 0


def test_overlapping_stay_counts_every_night_it_covers() -> None:
    counts = resolve_occupancy([stay("2025-06-01", "2025-06-03")], date(2025, 6, 2), date(2025, 6, 4))
    assert counts == {"2025-06-01": 1, "2025-06-02": 1}


def test_peak_is_max_per_night_not_sum_of_bookings() -> None:
    stays = [
        stay("2025-06-01", "2025-06-02"),
        stay("2025-06-02", "2025-06-03"),
        stay("2025-06-03", "2025-06-04"),
    ]
    counts = resolve_occupancy(stays, date(2025, 6, 1), date(2025, 6, 4))
    assert counts == {"2025-06-01": 1, "2025-06-02": 1, "2025-06-03": 1}
    assert peak_occupancy(counts, date(2025, 6, 1), date(2025, 6, 4)) == 1


def test_stays_checking_out_on_range_start_are_not_counted() -> None:
    stays = [
        stay("2025-05-30", "2025-06-03"),
        stay("2025-05-30", "2025-06-01"),
        stay("2025-05-31", "2025-06-01"),
    ]
    counts = resolve_occupancy(stays, date(2025, 6, 1), date(2025, 6, 3))
    assert counts == {"2025-05-30": 1, "2025-05-31": 1, "2025-06-01": 1, "2025-06-02": 1}
    assert peak_occupancy(counts, date(2025, 6, 1), date(2025, 6, 3)) == 1


def test_select_overlapping_preserves_input_order() -> None:
    first = stay("2025-06-03", "2025-06-05")
    second = stay("2025-06-01", "2025-06-02")
    third = stay("2025-06-02", "2025-06-03")
    assert select_overlapping([first, second, third], date(2025, 6, 2), date(2025, 6, 4)) == [first, third]


def test_resolve_occupancy_is_deterministic() -> None:
    stays = [stay("2025-06-02", "2025-06-04"), stay("2025-06-03", "2025-06-05")]
    first = resolve_occupancy(stays, date(2025, 6, 1), date(2025, 6, 6))
    second = resolve_occupancy(list(reversed(stays)), date(2025, 6, 1), date(2025, 6, 6))
    assert first == second == {"2025-06-02": 1, "2025-06-03": 2, "2025-06-04": 1}
    assert list(first) == sorted(first)
