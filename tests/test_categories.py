from datetime import date

import pytest

from playawards.aggregation import aggregate
from playawards.categories import (
    CategoryKind,
    WinnerRecord,
    build_month_categories,
    build_quarter_categories,
    build_week_categories,
    build_year_categories,
    catalog_for,
    rank_with_fallback,
)
from playawards.classifiers import top_by_hours
from playawards.periods import InvalidGranularity, window_for


def _ids(categories):
    return [category.id for category in categories]


def _names(category):
    return [nominee.item.name for nominee in category.nominees]


def test_each_tier_has_its_fixed_catalog(make_item):
    items = [make_item("Solo", [("2024-01-16", 2)])]

    week = build_week_categories(items, date(2024, 1, 15), date(2024, 1, 21))
    month = build_month_categories(items, 2024, 1)
    quarter = build_quarter_categories(items, 2024, 1)
    year = build_year_categories(items, 2024)

    assert _ids(week) == ["game_of_week", "best_session", "guilty_pleasure"]
    assert len(month) == 7
    assert len(quarter) == 8
    assert len(year) == 9
    assert [c.id for c in month if c.is_ai_category] == ["ai_wild_card"]
    assert [c.id for c in quarter if c.is_ai_category] == ["ai_spotlight"]
    assert [c.id for c in year if c.is_ai_category] == ["ai_choice"]
    assert year[-1].kind is CategoryKind.AI
    assert year[0].label == "Game of the Year"


def test_unknown_tier_catalog_is_rejected():
    with pytest.raises(InvalidGranularity):
        catalog_for("decade")


def test_week_reason_lines(make_item):
    items = [
        make_item("Sky Duel", [("2024-01-15", 1), ("2024-01-17", 2)]),
        make_item("Dungeon Echo", [("2024-01-16", 4)]),
        make_item("Last Week", [("2024-01-10", 9)]),
    ]

    game_of_week, best_session, _ = build_week_categories(
        items, date(2024, 1, 15), date(2024, 1, 21)
    )

    assert _names(game_of_week) == ["Dungeon Echo", "Sky Duel"]
    assert game_of_week.nominees[0].reason == "4.0h this week · 1 session"
    assert game_of_week.nominees[1].reason == "3.0h this week · 2 sessions"
    assert _names(best_session) == ["Dungeon Echo", "Sky Duel"]
    assert best_session.nominees[1].reason == "Best session: 2.0h"


def test_empty_collection_yields_empty_nominee_lists():
    tiers = [
        build_week_categories([], date(2024, 1, 15), date(2024, 1, 21)),
        build_month_categories([], 2024, 1),
        build_quarter_categories([], 2024, 1),
        build_year_categories([], 2024),
    ]

    for categories in tiers:
        assert categories
        assert all(category.nominees == () for category in categories)


def test_fallback_keeps_every_category_populated(make_item):
    # One short session: no classifier beyond hours finds anything.
    items = [
        make_item("Lonely", [("2024-02-10", 1)], status="Completed"),
        make_item("Wishlisted", status="Wishlist"),
    ]

    for categories in (
        build_month_categories(items, 2024, 2),
        build_quarter_categories(items, 2024, 1),
        build_year_categories(items, 2024),
    ):
        for category in categories:
            assert _names(category) == ["Lonely"], category.id


def test_fallback_reason_lines_stay_truthful(make_item):
    items = [make_item("Lonely", [("2024-02-10", 1)], rating=8)]

    quarter = {category.id: category for category in build_quarter_categories(items, 2024, 1)}

    assert quarter["the_grower"].nominees[0].reason == "1.0h this quarter · rated 8/10"
    assert quarter["the_grind"].nominees[0].reason == "1.0h this quarter · rated 8/10"


def test_month_value_and_comeback_reasons(make_item):
    items = [
        make_item("X", [("2024-01-05", 4), ("2024-01-20", 6)], price=20),
        make_item("Freebie", [("2024-01-06", 12)], price=0),
    ]

    month = {category.id: category for category in build_month_categories(items, 2024, 1)}

    best_value = month["best_value_month"]
    assert _names(best_value) == ["X"]
    assert best_value.nominees[0].reason == "$20.00/10.0h = $2.00/hr"

    comeback = month["the_comeback"]
    assert _names(comeback) == ["X"]
    assert comeback.nominees[0].reason == "Back after 15 days · 10.0h this month"

    assert _names(month["game_of_month"]) == ["Freebie", "X"]


def test_quarter_headline_lists_are_truncated(make_item):
    items = [make_item(f"Game {index}", [("2024-02-01", index)]) for index in range(1, 9)]

    quarter = {category.id: category for category in build_quarter_categories(items, 2024, 1)}

    assert len(quarter["game_of_quarter"].nominees) == 6
    assert _names(quarter["game_of_quarter"])[0] == "Game 8"
    assert len(quarter["disappointment_quarter"].nominees) == 5
    assert len(quarter["ai_spotlight"].nominees) == 5
    # Nothing qualifies as a grower, so the top four by hours stand in.
    assert _names(quarter["the_grower"]) == ["Game 8", "Game 7", "Game 6", "Game 5"]


def test_year_lists_are_truncated(make_item):
    items = [
        make_item(f"Game {index}", [("2024-05-01", index)], rating=8) for index in range(1, 11)
    ]

    year = {category.id: category for category in build_year_categories(items, 2024)}

    assert len(year["game_of_year"].nominees) == 8
    assert len(year["legacy"].nominees) == 8
    assert len(year["biggest_surprise"].nominees) == 6
    assert len(year["ai_choice"].nominees) == 6
    assert _names(year["soulmate"]) == ["Game 10"]
    assert year["soulmate"].nominees[0].reason == "10.0h · rated 8/10 · a keeper"
    assert year["endurance"].nominees[0].reason == "10.0h in 2024"


def test_year_one_that_got_away_reasons(make_item):
    items = [
        make_item("Played", [("2024-03-01", 30)], status="Completed"),
        make_item("Dropped", [("2024-03-01", 4)], status="Abandoned"),
        make_item("Shelved", [("2023-08-01", 6)], status="In Progress"),
    ]

    year = {category.id: category for category in build_year_categories(items, 2024)}
    got_away = year["one_that_got_away"]

    assert _names(got_away) == ["Shelved", "Dropped"]
    assert got_away.nominees[0].reason == "Still unfinished · 6.0h logged"
    assert got_away.nominees[1].reason == "Abandoned after 4.0h"


def test_highlight_matches_winner_names(make_item):
    items = [
        make_item("Sky Duel", [("2024-01-02", 3)]),
        make_item("Dungeon Echo", [("2024-01-03", 2)]),
        make_item("Puzzle Star", [("2024-01-04", 1)]),
    ]
    winners = [
        WinnerRecord(label="Game of the Week", name="Puzzle Star", icon="🎮"),
        WinnerRecord(label="Best Session", name="Sky Duel", icon="⚡"),
        WinnerRecord(label="Best Session", name="Not Nominated", icon="⚡"),
    ]
    winner_names = {winner.name for winner in winners}

    for category in build_month_categories(items, 2024, 1, winners):
        for nominee in category.nominees:
            assert nominee.is_highlight == (nominee.item.name in winner_names)


def test_highlight_prefers_item_identity(make_item):
    items = [
        make_item("Twin", [("2024-01-02", 3)], id=1),
        make_item("Twin", [("2024-01-03", 2)], id=2),
    ]
    winners = [WinnerRecord(label="Game of the Week", name="Twin", icon="🎮", item_id=2)]

    game_of_month = build_month_categories(items, 2024, 1, winners)[0]

    assert [(n.item.id, n.is_highlight) for n in game_of_month.nominees] == [(1, False), (2, True)]


def test_highlight_matches_ids_sent_as_strings(make_item):
    items = [make_item("Nova Quest", [("2024-01-02", 3)], id=1)]
    winners = [
        WinnerRecord.from_dict(
            {"label": "Game of the Week", "game_id": "1", "game_name": "Nova Quest"}
        )
    ]

    game_of_month = build_month_categories(items, 2024, 1, winners)[0]

    assert [(n.item.name, n.is_highlight) for n in game_of_month.nominees] == [("Nova Quest", True)]


def test_zero_hour_sessions_fall_back_to_hours_reason(make_item):
    items = [make_item("Idle", [("2024-01-02", 0)], rating=6)]

    year = {category.id: category for category in build_year_categories(items, 2024)}

    session_of_year = year["session_of_year"]
    assert _names(session_of_year) == ["Idle"]
    assert session_of_year.nominees[0].reason == "0.0h in 2024 · rated 6/10"


def test_rank_with_fallback(make_item):
    window = window_for("month", 2024, 1)
    rows = top_by_hours(
        aggregate([make_item(str(hours), [("2024-01-02", hours)]) for hours in range(1, 7)], window)
    )

    assert rank_with_fallback(rows[:2], rows, fallback_limit=4) == rows[:2]
    assert rank_with_fallback(rows, rows, limit=3, fallback_limit=4) == rows[:3]
    assert rank_with_fallback([], rows, fallback_limit=4) == rows[:4]
    assert rank_with_fallback([], [], fallback_limit=4) == []


def test_category_serialization(make_item):
    items = [make_item("Sky Duel", [("2024-01-02", 3)], rating=9)]

    payload = build_month_categories(items, 2024, 1)[-1].to_dict()

    assert payload["id"] == "ai_wild_card"
    assert payload["is_ai_category"] is True
    assert payload["kind"] == "ai"
    assert payload["nominees"][0]["game"]["name"] == "Sky Duel"
    assert payload["nominees"][0]["is_highlight"] is False
