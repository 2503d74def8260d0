"""Award category catalog and per-tier nominee builders.

Each tier has a fixed, hand-authored list of categories. A builder runs the
classifier behind every category, substitutes the top games by hours when a
classifier finds nobody, writes a reason line for each nominee and flags
nominees that already won something in the tier below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from . import classifiers
from .aggregation import AggregatedItem, aggregate, lifetime_hours
from .entities import Item
from .periods import MONTH, QUARTER, WEEK, YEAR, InvalidGranularity, window_for
from .statuses import ABANDONED, IN_PROGRESS


logger = logging.getLogger(__name__)


WEEK_FALLBACK_LIMIT = 4
MONTH_FALLBACK_LIMIT = 4
QUARTER_FALLBACK_LIMIT = 4
QUARTER_HEADLINE_LIMIT = 6
QUARTER_SHORTLIST_LIMIT = 5
YEAR_FALLBACK_LIMIT = 6
YEAR_HEADLINE_LIMIT = 8
YEAR_SHORTLIST_LIMIT = 6


class CategoryKind(Enum):
    STANDARD = "standard"
    # The final pick is left to an external generative service.
    AI = "ai"


@dataclass(frozen=True)
class WinnerRecord:
    """The part of a category winner that the next tier up needs."""

    label: str
    name: str
    icon: str
    item_id: str | int | None = None

    def matches(self, item: Item) -> bool:
        if self.item_id is not None:
            # JSON callers may send numeric ids as strings.
            return str(self.item_id) == str(item.id)
        return self.name == item.name

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "game_name": self.name,
            "icon": self.icon,
            "game_id": self.item_id,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "WinnerRecord":
        name = payload.get("game_name") or payload.get("gameName") or payload.get("name")
        if not name:
            raise ValueError("Winner records need a game name.")
        item_id = payload.get("game_id", payload.get("gameId"))
        return cls(
            label=str(payload.get("label") or ""),
            name=str(name),
            icon=str(payload.get("icon") or ""),
            item_id=item_id if item_id not in ("", None) else None,
        )


@dataclass(frozen=True)
class Nominee:
    item: Item
    reason: str
    is_highlight: bool = False

    def to_dict(self) -> dict:
        return {
            "game": self.item.to_dict(),
            "reason": self.reason,
            "is_highlight": self.is_highlight,
        }


@dataclass(frozen=True)
class CategorySpec:
    id: str
    label: str
    icon: str
    description: str
    kind: CategoryKind = CategoryKind.STANDARD


@dataclass(frozen=True)
class CategoryDefinition:
    id: str
    label: str
    icon: str
    description: str
    nominees: tuple[Nominee, ...]
    kind: CategoryKind = CategoryKind.STANDARD

    @property
    def is_ai_category(self) -> bool:
        return self.kind is CategoryKind.AI

    @property
    def winner(self) -> Nominee | None:
        return self.nominees[0] if self.nominees else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "icon": self.icon,
            "description": self.description,
            "kind": self.kind.value,
            "is_ai_category": self.is_ai_category,
            "nominees": [nominee.to_dict() for nominee in self.nominees],
        }


_CATALOG: Dict[str, tuple[CategorySpec, ...]] = {
    WEEK: (
        CategorySpec("game_of_week", "Game of the Week", "🎮", "Your MVP. The game that owned this week."),
        CategorySpec("best_session", "Best Session", "⚡", "Which game hosted your best single session?"),
        CategorySpec(
            "guilty_pleasure",
            "Guilty Pleasure",
            "😏",
            "The one you kept going back to even if you won't brag about it.",
        ),
    ),
    MONTH: (
        CategorySpec("game_of_month", "Game of the Month", "🏅", "Your overall pick for the month."),
        CategorySpec("best_session_month", "Best Session", "⚡", "Which game hosted your best single session?"),
        CategorySpec("the_comeback", "The Comeback", "🔄", "A game you returned to after a break."),
        CategorySpec("best_value_month", "Best Value", "💰", "Most for your money or time this month."),
        CategorySpec("underdog_month", "The Underdog", "🎲", "Surprised you. Exceeded expectations."),
        CategorySpec(
            "disappointment_month",
            "Disappointment of the Month",
            "😤",
            "It let you down. Didn't live up to the hype.",
        ),
        CategorySpec(
            "ai_wild_card",
            "AI Wild Card",
            "🤖",
            "AI's surprise pick: a category and game you might not expect.",
            CategoryKind.AI,
        ),
    ),
    QUARTER: (
        CategorySpec("game_of_quarter", "Game of the Quarter", "🥇", "The defining game of these three months."),
        CategorySpec("the_grower", "The Grower", "📈", "Sessions got longer and better as you played more."),
        CategorySpec("most_consistent", "Most Consistent", "🎯", "Showed up regularly with steady sessions all quarter."),
        CategorySpec(
            "best_discovery",
            "Best Discovery",
            "💎",
            "A standout game you found for the first time this quarter.",
        ),
        CategorySpec(
            "disappointment_quarter",
            "Biggest Disappointment",
            "😤",
            "It let you down. The game that didn't live up.",
        ),
        CategorySpec("the_grind", "The Grind", "💪", "You put in the hours even when it was hard."),
        CategorySpec("genre_pioneer", "Genre Pioneer", "🎭", "Ventured into a genre you hadn't explored before."),
        CategorySpec(
            "ai_spotlight",
            "AI Spotlight",
            "🤖",
            "The AI's pick: something interesting worth recognising.",
            CategoryKind.AI,
        ),
    ),
    YEAR: (
        CategorySpec("game_of_year", "Game of the Year", "🏆", "Your personal GOTY. The one that defined your year."),
        CategorySpec("soulmate", "The Soulmate", "💛", "The game you felt most connected to: hours, love, and all."),
        CategorySpec(
            "biggest_surprise",
            "Biggest Surprise",
            "😮",
            "You didn't see it coming. It exceeded every expectation.",
        ),
        CategorySpec("endurance", "The Endurance Award", "⏳", "Most committed. Most hours. The long haul game."),
        CategorySpec("best_investment", "Best Investment", "💰", "Best value for money: the most per dollar."),
        CategorySpec(
            "session_of_year",
            "Session of the Year",
            "⚡",
            "The game that hosted your single greatest gaming moment.",
        ),
        CategorySpec("one_that_got_away", "The One That Got Away", "👻", "A game you wish you'd spent more time on."),
        CategorySpec("legacy", "The Legacy", "🌟", "The game that changed how you think about gaming."),
        CategorySpec(
            "ai_choice",
            "AI Choice Award",
            "🤖",
            "The AI's surprising pick you might not have expected.",
            CategoryKind.AI,
        ),
    ),
}


def catalog_for(tier: str) -> tuple[CategorySpec, ...]:
    try:
        return _CATALOG[tier]
    except KeyError:
        raise InvalidGranularity(tier) from None


def rank_with_fallback(
    primary: Sequence[AggregatedItem],
    fallback: Sequence[AggregatedItem],
    *,
    limit: int | None = None,
    fallback_limit: int,
    category_id: str | None = None,
) -> List[AggregatedItem]:
    """Truncate a ranked classifier result, or fall back when it is empty.

    ``fallback`` is expected to be ranked already, normally by in-window hours.
    """

    if primary:
        return list(primary[:limit]) if limit is not None else list(primary)
    if fallback and category_id:
        logger.debug(
            "No eligible nominees for %s, using top %d by hours", category_id, fallback_limit
        )
    return list(fallback[:fallback_limit])


def _format_hours(hours: float) -> str:
    return f"{hours:.1f}h"


def _format_rating(rating: float) -> str:
    return f"{rating:g}/10"


def _format_money(amount: float) -> str:
    return f"${amount:.2f}"


def _sessions(count: int) -> str:
    return f"{count} session{'s' if count != 1 else ''}"


def _is_highlight(item: Item, winners: Sequence[WinnerRecord]) -> bool:
    return any(winner.matches(item) for winner in winners)


def _nominate(
    rows: Iterable[AggregatedItem],
    reason: Callable[[AggregatedItem], str],
    winners: Sequence[WinnerRecord],
) -> tuple[Nominee, ...]:
    return tuple(
        Nominee(item=row.item, reason=reason(row), is_highlight=_is_highlight(row.item, winners))
        for row in rows
    )


def _assemble(
    tier: str,
    pools: Mapping[str, Iterable[AggregatedItem]],
    reasons: Mapping[str, Callable[[AggregatedItem], str]],
    winners: Sequence[WinnerRecord],
) -> List[CategoryDefinition]:
    specs = catalog_for(tier)
    expected = {spec.id for spec in specs}
    if set(pools) != expected or set(reasons) != expected:
        raise RuntimeError(f"{tier} categories are out of sync with the catalog")

    return [
        CategoryDefinition(
            id=spec.id,
            label=spec.label,
            icon=spec.icon,
            description=spec.description,
            nominees=_nominate(pools[spec.id], reasons[spec.id], winners),
            kind=spec.kind,
        )
        for spec in specs
    ]


def _when_eligible(
    primary: Iterable[AggregatedItem],
    reason: Callable[[AggregatedItem], str],
    otherwise: Callable[[AggregatedItem], str],
) -> Callable[[AggregatedItem], str]:
    """Use ``reason`` for rows the classifier picked and ``otherwise`` for fallbacks."""

    eligible = {id(row.item) for row in primary}

    def pick(row: AggregatedItem) -> str:
        return reason(row) if id(row.item) in eligible else otherwise(row)

    return pick


def _value_reason(otherwise: Callable[[AggregatedItem], str]) -> Callable[[AggregatedItem], str]:
    def reason(row: AggregatedItem) -> str:
        cph = classifiers.cost_per_hour(row.item)
        if cph is None:
            if row.item.acquired_free or row.item.price <= 0:
                return f"{_format_hours(row.total_hours)} · free"
            return otherwise(row)
        hours = lifetime_hours(row.item)
        return f"{_format_money(row.item.price)}/{_format_hours(hours)} = {_format_money(cph)}/hr"

    return reason


def _best_session_reason(row: AggregatedItem) -> str:
    return f"Best session: {_format_hours(row.best_session_hours)}"


def build_week_categories(
    items: Sequence[Item],
    week_start: date | datetime,
    week_end: date | datetime,
    winners: Sequence[WinnerRecord] = (),
) -> List[CategoryDefinition]:
    window = window_for(WEEK, start=week_start, end=week_end)
    by_hours = classifiers.top_by_hours(aggregate(items, window))

    def default_reason(row: AggregatedItem) -> str:
        return f"{_format_hours(row.total_hours)} this week · {_sessions(row.session_count)}"

    sessions = classifiers.best_session(by_hours)

    pools = {
        "game_of_week": by_hours,
        "best_session": rank_with_fallback(
            sessions,
            by_hours,
            fallback_limit=WEEK_FALLBACK_LIMIT,
            category_id="best_session",
        ),
        "guilty_pleasure": by_hours,
    }
    reasons = {
        "game_of_week": default_reason,
        "best_session": _when_eligible(sessions, _best_session_reason, default_reason),
        "guilty_pleasure": default_reason,
    }
    return _assemble(WEEK, pools, reasons, winners)


def build_month_categories(
    items: Sequence[Item],
    year: int,
    month: int,
    winners: Sequence[WinnerRecord] = (),
) -> List[CategoryDefinition]:
    window = window_for(MONTH, year, month)
    by_hours = classifiers.top_by_hours(aggregate(items, window))

    def default_reason(row: AggregatedItem) -> str:
        return f"{_format_hours(row.total_hours)} this month · {_sessions(row.session_count)}"

    def comeback_reason(row: AggregatedItem) -> str:
        longest_gap = max(classifiers.session_gaps(row.entries), default=0)
        return f"Back after {longest_gap} days · {_format_hours(row.total_hours)} this month"

    def pool(category_id: str, primary: Sequence[AggregatedItem]) -> List[AggregatedItem]:
        return rank_with_fallback(
            primary, by_hours, fallback_limit=MONTH_FALLBACK_LIMIT, category_id=category_id
        )

    comebacks = classifiers.comeback(by_hours)
    sessions = classifiers.best_session(by_hours)

    pools = {
        "game_of_month": by_hours,
        "best_session_month": pool("best_session_month", sessions),
        "the_comeback": pool("the_comeback", comebacks),
        "best_value_month": pool("best_value_month", classifiers.best_value(by_hours)),
        "underdog_month": by_hours,
        "disappointment_month": by_hours,
        "ai_wild_card": by_hours,
    }
    reasons = {
        "game_of_month": default_reason,
        "best_session_month": _when_eligible(sessions, _best_session_reason, default_reason),
        "the_comeback": _when_eligible(comebacks, comeback_reason, default_reason),
        "best_value_month": _value_reason(default_reason),
        "underdog_month": default_reason,
        "disappointment_month": default_reason,
        "ai_wild_card": default_reason,
    }
    return _assemble(MONTH, pools, reasons, winners)


def build_quarter_categories(
    items: Sequence[Item],
    year: int,
    quarter: int,
    winners: Sequence[WinnerRecord] = (),
) -> List[CategoryDefinition]:
    window = window_for(QUARTER, year, quarter)
    played = aggregate(items, window)
    by_hours = classifiers.top_by_hours(played)

    def default_reason(row: AggregatedItem) -> str:
        return f"{_format_hours(row.total_hours)} this quarter · rated {_format_rating(row.item.rating)}"

    def pool(category_id: str, primary: Sequence[AggregatedItem]) -> List[AggregatedItem]:
        return rank_with_fallback(
            primary, by_hours, fallback_limit=QUARTER_FALLBACK_LIMIT, category_id=category_id
        )

    def top(limit: int) -> List[AggregatedItem]:
        return rank_with_fallback(by_hours, by_hours, limit=limit, fallback_limit=limit)

    growers = classifiers.grower(played)
    steady = classifiers.consistent(played)
    discoveries = classifiers.discovery(played, window)
    grinders = classifiers.grind(played)
    pioneers = classifiers.genre_pioneer(played, items, window)

    pools = {
        "game_of_quarter": top(QUARTER_HEADLINE_LIMIT),
        "the_grower": pool("the_grower", growers),
        "most_consistent": pool("most_consistent", steady),
        "best_discovery": pool("best_discovery", discoveries),
        "disappointment_quarter": top(QUARTER_SHORTLIST_LIMIT),
        "the_grind": pool("the_grind", grinders),
        "genre_pioneer": pool("genre_pioneer", pioneers),
        "ai_spotlight": top(QUARTER_SHORTLIST_LIMIT),
    }
    reasons = {
        "game_of_quarter": default_reason,
        "the_grower": _when_eligible(
            growers,
            lambda row: f"Sessions grew · {_format_hours(row.total_hours)} total",
            default_reason,
        ),
        "most_consistent": _when_eligible(
            steady,
            lambda row: f"Regular sessions · {_sessions(row.session_count)}",
            default_reason,
        ),
        "best_discovery": _when_eligible(
            discoveries,
            lambda row: f"First played this quarter · {_format_hours(row.total_hours)} so far",
            default_reason,
        ),
        "disappointment_quarter": default_reason,
        "the_grind": _when_eligible(
            grinders,
            lambda row: (
                f"{_format_hours(row.total_hours)} despite rating {_format_rating(row.item.rating)}"
            ),
            default_reason,
        ),
        "genre_pioneer": _when_eligible(
            pioneers,
            lambda row: f"First {row.item.genre} game · {_format_hours(row.total_hours)}",
            default_reason,
        ),
        "ai_spotlight": default_reason,
    }
    return _assemble(QUARTER, pools, reasons, winners)


def build_year_categories(
    items: Sequence[Item],
    year: int,
    winners: Sequence[WinnerRecord] = (),
) -> List[CategoryDefinition]:
    window = window_for(YEAR, year)
    played = aggregate(items, window)
    by_hours = classifiers.top_by_hours(played)

    def default_reason(row: AggregatedItem) -> str:
        return f"{_format_hours(row.total_hours)} in {year} · rated {_format_rating(row.item.rating)}"

    def got_away_reason(row: AggregatedItem) -> str:
        if row.item.status == ABANDONED:
            return f"Abandoned after {_format_hours(lifetime_hours(row.item))}"
        return f"Still unfinished · {_format_hours(lifetime_hours(row.item))} logged"

    def pool(category_id: str, primary: Sequence[AggregatedItem]) -> List[AggregatedItem]:
        return rank_with_fallback(
            primary,
            by_hours,
            limit=YEAR_SHORTLIST_LIMIT,
            fallback_limit=YEAR_FALLBACK_LIMIT,
            category_id=category_id,
        )

    def top(limit: int) -> List[AggregatedItem]:
        return rank_with_fallback(by_hours, by_hours, limit=limit, fallback_limit=limit)

    soulmates = classifiers.soulmate(played)
    sessions = classifiers.best_session(played)
    got_away = classifiers.one_that_got_away(items, window)

    pools = {
        "game_of_year": top(YEAR_HEADLINE_LIMIT),
        "soulmate": pool("soulmate", soulmates),
        "biggest_surprise": pool("biggest_surprise", classifiers.surprise(played)),
        "endurance": pool("endurance", classifiers.endurance(played)),
        "best_investment": pool("best_investment", classifiers.best_value(played)),
        "session_of_year": pool("session_of_year", sessions),
        "one_that_got_away": pool("one_that_got_away", got_away),
        "legacy": top(YEAR_HEADLINE_LIMIT),
        "ai_choice": top(YEAR_SHORTLIST_LIMIT),
    }
    reasons = {
        "game_of_year": default_reason,
        "soulmate": _when_eligible(
            soulmates,
            lambda row: (
                f"{_format_hours(row.total_hours)} · rated {_format_rating(row.item.rating)} · a keeper"
            ),
            default_reason,
        ),
        "biggest_surprise": default_reason,
        "endurance": lambda row: f"{_format_hours(row.total_hours)} in {year}",
        "best_investment": _value_reason(default_reason),
        "session_of_year": _when_eligible(sessions, _best_session_reason, default_reason),
        "one_that_got_away": _when_eligible(got_away, got_away_reason, default_reason),
        "legacy": default_reason,
        "ai_choice": default_reason,
    }
    return _assemble(YEAR, pools, reasons, winners)
