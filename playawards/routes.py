from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, List, Mapping

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from . import db
from .ai_picks import request_ai_pick
from .categories import (
    CategoryDefinition,
    WinnerRecord,
    build_month_categories,
    build_quarter_categories,
    build_week_categories,
    build_year_categories,
    catalog_for,
)
from .entities import Item, items_from_records, parse_day
from .models import Game, GameAward
from .periods import (
    GRANULARITIES,
    MONTH,
    QUARTER,
    WEEK,
    YEAR,
    InvalidGranularity,
    Period,
    iso_week_window,
    period_key,
    period_label,
    quarter_of,
    window_for,
)
from .tiers import build_award_tiers, collect_winners

bp = Blueprint("awards", __name__)

logger = logging.getLogger(__name__)

# Recorded picks of this tier feed highlights in the tier above.
_CHILD_TIER = {MONTH: WEEK, QUARTER: MONTH, YEAR: QUARTER}


def _error(message: str, status_code: int = 400):
    return jsonify({"error": message}), status_code


def _parse_date(value: Any, label: str) -> date | None:
    if value in (None, ""):
        return None
    try:
        return parse_day(value)
    except ValueError as exc:
        raise ValueError(f"{label} must be a valid YYYY-MM-DD date") from exc


def _int_param(source: Mapping[str, Any], name: str, default: int) -> int:
    value = source.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a whole number") from exc


def _resolve_week(source: Mapping[str, Any], today: date) -> Period:
    start = _parse_date(source.get("start") or source.get("start_date"), "start")
    end = _parse_date(source.get("end") or source.get("end_date"), "end")
    if start is None and end is None:
        return iso_week_window(today)
    if start is None:
        start = end - timedelta(days=6)
    if end is None:
        end = start + timedelta(days=6)
    return window_for(WEEK, start=start, end=end)


def _resolve_window(tier: str, source: Mapping[str, Any], today: date) -> Period:
    if tier not in GRANULARITIES:
        raise InvalidGranularity(tier)
    if tier == WEEK:
        return _resolve_week(source, today)

    year = _int_param(source, "year", today.year)
    if tier == MONTH:
        return window_for(MONTH, year, _int_param(source, "month", today.month))
    if tier == QUARTER:
        return window_for(QUARTER, year, _int_param(source, "quarter", quarter_of(today)))
    return window_for(YEAR, year)


def _build_tier(
    tier: str, items: List[Item], window: Period, winners: List[WinnerRecord]
) -> List[CategoryDefinition]:
    if tier == WEEK:
        return build_week_categories(items, window.start, window.end, winners)
    if tier == MONTH:
        return build_month_categories(items, window.start.year, window.start.month, winners)
    if tier == QUARTER:
        return build_quarter_categories(
            items, window.start.year, quarter_of(window.start_date), winners
        )
    if tier == YEAR:
        return build_year_categories(items, window.start.year, winners)
    raise InvalidGranularity(tier)


def _tier_payload(tier: str, window: Period, categories: List[CategoryDefinition]) -> dict:
    return {
        "tier": tier,
        "period": window.to_dict(),
        "categories": [category.to_dict() for category in categories],
        "winners": [winner.to_dict() for winner in collect_winners(categories)],
    }


def _load_items() -> List[Item]:
    games = Game.query.order_by(Game.id.asc()).all()
    return [game.to_item() for game in games]


def _recorded_winners(tier: str, window: Period) -> List[WinnerRecord]:
    child_tier = _CHILD_TIER.get(tier)
    if child_tier is None:
        return []

    awards = (
        GameAward.query.filter(
            GameAward.period_type == child_tier,
            GameAward.period_start >= window.start_date,
            GameAward.period_start <= window.end_date,
        )
        .order_by(GameAward.period_start.asc(), GameAward.id.asc())
        .all()
    )
    return [
        WinnerRecord(
            label=award.label,
            name=award.game.title if award.game else "",
            icon=award.icon,
            item_id=award.game_id,
        )
        for award in awards
    ]


@bp.route("/api/awards/overview")
def awards_overview():
    today = date.today()
    try:
        week = _resolve_week(request.args, today)
        year = _int_param(request.args, "year", today.year)
        month = _int_param(request.args, "month", today.month)
        quarter = _int_param(request.args, "quarter", quarter_of(date(year, month, 1)))
        tiers = build_award_tiers(
            _load_items(),
            year=year,
            month=month,
            quarter=quarter,
            week_start=week.start,
            week_end=week.end,
        )
    except ValueError as error:
        return _error(str(error))

    return jsonify(tiers.to_dict())


@bp.route("/api/awards/preview", methods=["POST"])
def awards_preview():
    payload = request.get_json(silent=True) or {}
    records = payload.get("items")
    if not isinstance(records, list):
        return _error("Provide the games to score as an 'items' list.")

    items = items_from_records(records)
    tier = str(payload.get("tier") or "").strip().lower()
    today = date.today()

    try:
        if not tier:
            week = _resolve_week(payload, today)
            year = _int_param(payload, "year", today.year)
            month = _int_param(payload, "month", today.month)
            tiers = build_award_tiers(
                items,
                year=year,
                month=month,
                quarter=_int_param(payload, "quarter", quarter_of(date(year, month, 1))),
                week_start=week.start,
                week_end=week.end,
            )
            return jsonify(tiers.to_dict())

        window = _resolve_window(tier, payload, today)
        winners = [
            WinnerRecord.from_dict(entry)
            for entry in payload.get("winners") or []
            if isinstance(entry, dict)
        ]
        categories = _build_tier(tier, items, window, winners)
    except InvalidGranularity as error:
        return _error(str(error), 404)
    except ValueError as error:
        return _error(str(error))

    return jsonify(_tier_payload(tier, window, categories))


@bp.route("/api/awards/picks", methods=["GET", "POST"])
def award_picks():
    if request.method == "GET":
        query = GameAward.query
        tier = request.args.get("tier")
        key = request.args.get("key") or request.args.get("period_key")
        if tier:
            query = query.filter(GameAward.period_type == tier.lower())
        if key:
            query = query.filter(GameAward.period_key == key)
        awards = query.order_by(GameAward.awarded_at.asc(), GameAward.id.asc()).all()
        return jsonify([award.to_dict() for award in awards])

    payload = request.get_json(silent=True) or {}
    tier = str(payload.get("tier") or "").strip().lower()
    category_id = str(payload.get("category") or "").strip()

    try:
        window = _resolve_window(tier, payload, date.today())
        spec = next((spec for spec in catalog_for(tier) if spec.id == category_id), None)
        game_id = _int_param(payload, "game_id", 0)
    except InvalidGranularity as error:
        return _error(str(error), 404)
    except ValueError as error:
        return _error(str(error))

    if spec is None:
        return _error(f"Unknown {tier} category: {category_id or '(missing)'}")

    game = db.session.get(Game, game_id) if game_id else None
    if game is None:
        return _error("Game not found.", 404)

    key = period_key(window)
    try:
        GameAward.query.filter_by(category=spec.id, period_key=key).delete(
            synchronize_session=False
        )
        award = GameAward(
            game_id=game.id,
            category=spec.id,
            label=spec.label,
            icon=spec.icon,
            period_type=tier,
            period_key=key,
            period_start=window.start_date,
        )
        db.session.add(award)
        db.session.commit()
    except SQLAlchemyError as error:
        db.session.rollback()
        logger.exception("Failed to record award pick", exc_info=error)
        return _error("Failed to record award pick.", 500)

    logger.info("Recorded %s pick for %s (%s): %s", spec.id, period_label(window), key, game.title)
    return jsonify(award.to_dict()), 201


@bp.route("/api/awards/picks/<int:pick_id>", methods=["DELETE"])
def delete_award_pick(pick_id: int):
    award = db.session.get(GameAward, pick_id)
    if award is None:
        return _error("Award not found.", 404)

    try:
        db.session.delete(award)
        db.session.commit()
    except SQLAlchemyError as error:
        db.session.rollback()
        logger.exception("Failed to delete award pick", exc_info=error)
        return _error("Failed to delete award pick.", 500)

    return jsonify({"deleted": pick_id})


@bp.route("/api/awards/<tier>/ai-pick", methods=["POST"])
def award_ai_pick(tier: str):
    tier = tier.lower()
    payload = request.get_json(silent=True) or {}
    category_id = str(payload.get("category") or "").strip()

    try:
        window = _resolve_window(tier, payload, date.today())
        categories = _build_tier(tier, _load_items(), window, _recorded_winners(tier, window))
    except InvalidGranularity as error:
        return _error(str(error), 404)
    except ValueError as error:
        return _error(str(error))

    category = next((entry for entry in categories if entry.id == category_id), None)
    if category is None:
        return _error(f"Unknown {tier} category: {category_id or '(missing)'}")
    if not category.is_ai_category:
        return _error(f"{category.label} is not an AI category.")

    pick = request_ai_pick(
        category,
        endpoint=current_app.config.get("AWARDS_AI_ENDPOINT"),
        timeout=float(current_app.config.get("AWARDS_AI_TIMEOUT") or 10),
        period_label=period_label(window),
    )
    return jsonify(
        {
            "category": category.to_dict(),
            "pick": pick.to_dict() if pick else None,
        }
    )


@bp.route("/api/awards/<tier>")
def award_categories(tier: str):
    tier = tier.lower()
    try:
        window = _resolve_window(tier, request.args, date.today())
        categories = _build_tier(tier, _load_items(), window, _recorded_winners(tier, window))
    except InvalidGranularity as error:
        return _error(str(error), 404)
    except ValueError as error:
        return _error(str(error))

    return jsonify(_tier_payload(tier, window, categories))
