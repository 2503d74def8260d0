from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List

from .entities import HistoryEntry, Item
from .periods import Period


@dataclass(frozen=True)
class AggregatedItem:
    """Per-item totals for one window.

    ``entries`` holds the in-window play logs sorted by day, keeping the
    original insertion order for logs on the same day.
    """

    item: Item
    total_hours: float
    session_count: int
    entries: tuple[HistoryEntry, ...]

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def best_session_hours(self) -> float:
        return max((entry.hours for entry in self.entries), default=0.0)


def sorted_in_window_entries(item: Item, window: Period) -> List[HistoryEntry]:
    in_window = [entry for entry in item.history if window.contains(entry.day)]
    return sorted(in_window, key=lambda entry: entry.day)


def best_single_session(item: Item, window: Period) -> float:
    return max(
        (entry.hours for entry in item.history if window.contains(entry.day)),
        default=0.0,
    )


def summarize_item(item: Item, window: Period) -> AggregatedItem:
    entries = sorted_in_window_entries(item, window)
    return AggregatedItem(
        item=item,
        total_hours=float(sum(entry.hours for entry in entries)),
        session_count=len(entries),
        entries=tuple(entries),
    )


def aggregate(items: Iterable[Item], window: Period) -> List[AggregatedItem]:
    """Total in-window hours and sessions for every item played in ``window``.

    Items without an entry inside the window are left out. The result keeps
    the order of ``items``.
    """

    aggregated: list[AggregatedItem] = []
    for item in items:
        summary = summarize_item(item, window)
        if summary.session_count:
            aggregated.append(summary)
    return aggregated


def lifetime_hours(item: Item) -> float:
    return float(item.base_hours or 0.0) + sum(entry.hours for entry in item.history)


def first_played(item: Item) -> date | None:
    return min((entry.day for entry in item.history), default=None)
