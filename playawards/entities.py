"""Immutable snapshots of tracked games consumed by the award engine.

The engine never reads storage. Callers hand it :class:`Item` values, either
converted from the database models or parsed from raw records with
:func:`item_from_record`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from .statuses import DEFAULT_STATUS, normalize_status_value


logger = logging.getLogger(__name__)


class MalformedDate(ValueError):
    """Raised when a record date cannot be read as a calendar day."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Not a valid YYYY-MM-DD date: {value!r}")
        self.value = value


@dataclass(frozen=True)
class HistoryEntry:
    """A single play log: a calendar day and the hours played on it."""

    day: date
    hours: float


@dataclass(frozen=True)
class Item:
    id: str | int
    name: str
    genre: str | None = None
    price: float = 0.0
    rating: float = 0.0
    status: str = DEFAULT_STATUS
    acquired_free: bool = False
    base_hours: float = 0.0
    start_date: date | None = None
    end_date: date | None = None
    history: tuple[HistoryEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "genre": self.genre,
            "price": self.price,
            "rating": self.rating,
            "status": self.status,
        }


def parse_day(value: Any) -> date:
    """Read a calendar day from a ``date``, ``datetime`` or ISO string."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        # Accept full ISO timestamps by keeping only the day part.
        if "T" in text:
            text = text.split("T", 1)[0]
        try:
            return date.fromisoformat(text)
        except ValueError as exc:
            raise MalformedDate(value) from exc
    raise MalformedDate(value)


def _coerce_number(value: Any, *, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number or number < 0:  # NaN or negative
        return default
    return number


def _optional_day(value: Any, *, label: str, name: str) -> date | None:
    if value in (None, ""):
        return None
    try:
        return parse_day(value)
    except MalformedDate:
        logger.warning("Ignoring malformed %s for %s: %r", label, name, value)
        return None


def parse_history(raw_entries: Iterable[Mapping[str, Any]] | None, *, name: str = "") -> tuple[HistoryEntry, ...]:
    """Convert raw play log records, dropping entries with unreadable dates."""

    if raw_entries is None:
        return ()
    if not isinstance(raw_entries, (list, tuple)):
        logger.warning("Ignoring play logs for %s that are not a list: %r", name, raw_entries)
        return ()

    entries: list[HistoryEntry] = []
    for raw in raw_entries:
        if not isinstance(raw, Mapping):
            logger.warning("Skipping non-object play log for %s: %r", name, raw)
            continue
        try:
            day = parse_day(raw.get("date"))
        except MalformedDate as exc:
            logger.warning("Skipping play log for %s: %s", name, exc)
            continue
        entries.append(HistoryEntry(day=day, hours=_coerce_number(raw.get("hours"))))
    return tuple(entries)


def item_from_record(record: Mapping[str, Any]) -> Item:
    """Build an :class:`Item` from a loosely-typed record.

    Keys follow the sync layer's camelCase naming (``playLogs``,
    ``acquiredFree``, ``startDate``); snake_case spellings are accepted too.
    """

    name = str(record.get("name") or record.get("title") or "").strip()
    identifier = record.get("id")
    if identifier in (None, ""):
        identifier = name

    genre = record.get("genre")
    genre = str(genre).strip() if genre else None

    raw_logs = record.get("playLogs")
    if raw_logs is None:
        raw_logs = record.get("play_logs") or record.get("history")

    return Item(
        id=identifier,
        name=name,
        genre=genre or None,
        price=_coerce_number(record.get("price")),
        rating=min(10.0, _coerce_number(record.get("rating"))),
        status=normalize_status_value(record.get("status")),
        acquired_free=bool(record.get("acquiredFree", record.get("acquired_free", False))),
        base_hours=_coerce_number(record.get("baseHours", record.get("base_hours"))),
        start_date=_optional_day(
            record.get("startDate", record.get("start_date")), label="start date", name=name
        ),
        end_date=_optional_day(
            record.get("endDate", record.get("end_date")), label="end date", name=name
        ),
        history=parse_history(raw_logs, name=name),
    )


def items_from_records(records: Iterable[Mapping[str, Any]] | None) -> list[Item]:
    items: list[Item] = []
    for record in records or ():
        if not isinstance(record, Mapping):
            logger.warning("Skipping non-object item record: %r", record)
            continue
        items.append(item_from_record(record))
    return items
