from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Sequence

from .categories import (
    CategoryDefinition,
    WinnerRecord,
    build_month_categories,
    build_quarter_categories,
    build_week_categories,
    build_year_categories,
)
from .entities import Item


@dataclass(frozen=True)
class AwardTiers:
    week: List[CategoryDefinition]
    month: List[CategoryDefinition]
    quarter: List[CategoryDefinition]
    year: List[CategoryDefinition]

    def to_dict(self) -> dict:
        payload = {}
        for tier in ("week", "month", "quarter", "year"):
            categories = getattr(self, tier)
            payload[tier] = {
                "categories": [category.to_dict() for category in categories],
                "winners": [winner.to_dict() for winner in collect_winners(categories)],
            }
        return payload


def collect_winners(categories: Iterable[CategoryDefinition]) -> List[WinnerRecord]:
    """First nominee of every non-AI category, as records for the next tier up."""

    winners: list[WinnerRecord] = []
    for category in categories:
        if category.is_ai_category or category.winner is None:
            continue
        item = category.winner.item
        winners.append(
            WinnerRecord(label=category.label, name=item.name, icon=category.icon, item_id=item.id)
        )
    return winners


def build_award_tiers(
    items: Sequence[Item],
    *,
    year: int,
    month: int,
    quarter: int,
    week_start: date | datetime,
    week_end: date | datetime,
) -> AwardTiers:
    """Build week, month, quarter and year categories in order.

    Each tier only sees the winner records of the tier directly below it.
    """

    week = build_week_categories(items, week_start, week_end)
    month_categories = build_month_categories(items, year, month, collect_winners(week))
    quarter_categories = build_quarter_categories(
        items, year, quarter, collect_winners(month_categories)
    )
    year_categories = build_year_categories(items, year, collect_winners(quarter_categories))
    return AwardTiers(
        week=week,
        month=month_categories,
        quarter=quarter_categories,
        year=year_categories,
    )
