from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from .categories import CategoryDefinition, Nominee


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIPick:
    """A single winner chosen by the external generative service."""

    category_id: str
    nominee: Nominee
    justification: str
    category_name: str | None = None

    def to_dict(self) -> dict:
        return {
            "category_id": self.category_id,
            "game": self.nominee.item.to_dict(),
            "reason": self.nominee.reason,
            "justification": self.justification,
            "category_name": self.category_name,
        }


def build_pick_request(category: CategoryDefinition, *, period_label: str | None = None) -> dict:
    return {
        "category": category.id,
        "label": category.label,
        "description": category.description,
        "period": period_label,
        "nominees": [
            {"name": nominee.item.name, "reason": nominee.reason}
            for nominee in category.nominees
        ],
    }


def _match_nominee(category: CategoryDefinition, name: str) -> Nominee | None:
    wanted = name.strip().lower()
    for nominee in category.nominees:
        if nominee.item.name.strip().lower() == wanted:
            return nominee
    return None


def request_ai_pick(
    category: CategoryDefinition,
    *,
    endpoint: str | None,
    timeout: float = 10,
    period_label: str | None = None,
) -> AIPick | None:
    """Ask the configured service to choose one nominee for an AI category.

    Returns ``None`` whenever no usable pick comes back; the category keeps its
    full nominee list in that case.
    """

    if not category.is_ai_category or not category.nominees:
        return None
    if not endpoint:
        logger.debug("No AI endpoint configured; skipping pick for %s", category.id)
        return None

    try:
        response = requests.post(
            endpoint,
            json=build_pick_request(category, period_label=period_label),
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("AI pick request for %s failed: %s", category.id, exc)
        return None

    try:
        payload = response.json()
    except ValueError:
        logger.warning("AI pick for %s returned a non-JSON body", category.id)
        return None

    if not isinstance(payload, dict):
        logger.warning("AI pick for %s returned an unexpected payload", category.id)
        return None

    name = str(payload.get("game") or payload.get("gameName") or "").strip()
    nominee = _match_nominee(category, name) if name else None
    if nominee is None:
        logger.warning("AI pick for %s named a game outside the nominee pool: %r", category.id, name)
        return None

    category_name = payload.get("category_name") or payload.get("categoryName")
    return AIPick(
        category_id=category.id,
        nominee=nominee,
        justification=str(payload.get("justification") or payload.get("reason") or "").strip(),
        category_name=str(category_name).strip() if category_name else None,
    )
