"""Nomination heuristics.

Every classifier takes :class:`~playawards.aggregation.AggregatedItem` rows
and returns the eligible subset, ranked where the heuristic ranks. Python's
sort is stable, so ties keep the order the rows came in.
"""

from __future__ import annotations

from datetime import date
from statistics import fmean, pstdev
from typing import Iterable, List, Sequence

from .aggregation import AggregatedItem, first_played, lifetime_hours, summarize_item
from .entities import HistoryEntry, Item
from .periods import Period
from .statuses import ABANDONED, IN_PROGRESS, STALLED_STATUSES


COMEBACK_GAP_DAYS = 7

TREND_MIN_SESSIONS = 3
GROWER_RATIO = 1.2
CONSISTENT_STDDEV_RATIO = 0.6
CONSISTENT_MAX_MEAN_GAP_DAYS = 15

GRIND_MAX_RATING = 7
GRIND_MIN_HOURS = 5

SOULMATE_MIN_RATING = 7
SOULMATE_MIN_HOURS = 10

SURPRISE_MIN_RATING = 7


def session_gaps(entries: Sequence[HistoryEntry]) -> List[int]:
    """Days between consecutive entries, which must already be sorted."""

    return [
        (current.day - previous.day).days
        for previous, current in zip(entries, entries[1:])
    ]


def has_comeback_gap(entries: Sequence[HistoryEntry]) -> bool:
    return any(gap >= COMEBACK_GAP_DAYS for gap in session_gaps(entries))


def is_grower(entries: Sequence[HistoryEntry]) -> bool:
    """True when the later half of the sessions runs longer than the first half.

    The split point is ``len // 2`` so an odd session sits in the second half.
    """

    if len(entries) < TREND_MIN_SESSIONS:
        return False
    midpoint = len(entries) // 2
    first_half = [entry.hours for entry in entries[:midpoint]]
    second_half = [entry.hours for entry in entries[midpoint:]]
    return fmean(second_half) > fmean(first_half) * GROWER_RATIO


def gaps_are_consistent(gaps: Sequence[float]) -> bool:
    if not gaps:
        return False
    mean_gap = fmean(gaps)
    return pstdev(gaps) < mean_gap * CONSISTENT_STDDEV_RATIO and mean_gap < CONSISTENT_MAX_MEAN_GAP_DAYS


def is_consistent(entries: Sequence[HistoryEntry]) -> bool:
    if len(entries) < TREND_MIN_SESSIONS:
        return False
    return gaps_are_consistent(session_gaps(entries))


def cost_per_hour(item: Item) -> float | None:
    """Lifetime price per lifetime hour, or ``None`` when it is undefined.

    Free games and games with no recorded hours have no cost per hour and are
    never ranked for value.
    """

    if item.acquired_free or item.price <= 0:
        return None
    hours = lifetime_hours(item)
    if hours <= 0:
        return None
    return item.price / hours


def top_by_hours(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    return sorted(played, key=lambda row: row.total_hours, reverse=True)


def endurance(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    return top_by_hours(played)


def best_session(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    eligible = [row for row in played if row.best_session_hours > 0]
    return sorted(eligible, key=lambda row: row.best_session_hours, reverse=True)


def comeback(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    return [
        row
        for row in played
        if row.session_count >= 2 and has_comeback_gap(row.entries)
    ]


def best_value(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    scored = [(row, cost_per_hour(row.item)) for row in played]
    eligible = [(row, cph) for row, cph in scored if cph is not None]
    eligible.sort(key=lambda pair: pair[1])
    return [row for row, _ in eligible]


def grower(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    return [row for row in played if is_grower(row.entries)]


def consistent(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    return [row for row in played if is_consistent(row.entries)]


def discovery(played: Iterable[AggregatedItem], window: Period) -> List[AggregatedItem]:
    discovered = []
    for row in played:
        first_day = first_played(row.item)
        if first_day is not None and first_day >= window.start_date:
            discovered.append(row)
    return discovered


def grind(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    grinding = [
        row
        for row in played
        if 0 < row.item.rating <= GRIND_MAX_RATING and row.total_hours >= GRIND_MIN_HOURS
    ]
    return top_by_hours(grinding)


def _active_before(item: Item, cutoff: date) -> bool:
    if item.start_date is not None and item.start_date < cutoff:
        return True
    return any(entry.day < cutoff for entry in item.history)


def genre_pioneer(
    played: Iterable[AggregatedItem],
    all_items: Sequence[Item],
    window: Period,
) -> List[AggregatedItem]:
    """Played items whose genre no other item touched before the window."""

    cutoff = window.start_date
    pioneers = []
    for row in played:
        genre = row.item.genre
        if not genre:
            continue
        explored = any(
            other is not row.item and other.genre == genre and _active_before(other, cutoff)
            for other in all_items
        )
        if not explored:
            pioneers.append(row)
    return pioneers


def soulmate(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    loved = [
        row
        for row in played
        if row.item.rating >= SOULMATE_MIN_RATING and row.total_hours >= SOULMATE_MIN_HOURS
    ]
    return sorted(loved, key=lambda row: row.total_hours * row.item.rating, reverse=True)


def surprise(played: Iterable[AggregatedItem]) -> List[AggregatedItem]:
    return top_by_hours(row for row in played if row.item.rating >= SURPRISE_MIN_RATING)


def one_that_got_away(all_items: Iterable[Item], window: Period) -> List[AggregatedItem]:
    """Abandoned games, plus in-progress games with history but none in ``window``.

    Unlike the other classifiers this one looks at the whole collection, so
    the rows it returns may have no in-window sessions.
    """

    stalled = []
    for item in all_items:
        if item.status not in STALLED_STATUSES:
            continue
        row = summarize_item(item, window)
        if item.status == ABANDONED:
            stalled.append(row)
        elif item.status == IN_PROGRESS and row.total_hours == 0 and item.history:
            stalled.append(row)
    return sorted(stalled, key=lambda row: lifetime_hours(row.item), reverse=True)
