from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


WEEK = "week"
MONTH = "month"
QUARTER = "quarter"
YEAR = "year"

GRANULARITIES: tuple[str, ...] = (WEEK, MONTH, QUARTER, YEAR)

_END_OF_DAY = time(23, 59, 59)


class InvalidGranularity(ValueError):
    """Raised when a period tag is not one of week, month, quarter or year."""

    def __init__(self, granularity: object) -> None:
        allowed = ", ".join(GRANULARITIES)
        super().__init__(f"Period must be one of {allowed}, got {granularity!r}.")
        self.granularity = granularity


@dataclass(frozen=True)
class Period:
    """An inclusive window: ``start`` at midnight, ``end`` at 23:59:59."""

    granularity: str
    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "granularity": self.granularity,
            "key": period_key(self),
            "label": period_label(self),
            "start": self.start_date.isoformat(),
            "end": self.end_date.isoformat(),
        }


def _as_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _span(granularity: str, first_day: date, last_day: date) -> Period:
    return Period(
        granularity=granularity,
        start=datetime.combine(first_day, time.min),
        end=datetime.combine(last_day, _END_OF_DAY),
    )


def _month_span(granularity: str, year: int, first_month: int, last_month: int) -> Period:
    last_day = calendar.monthrange(year, last_month)[1]
    return _span(granularity, date(year, first_month, 1), date(year, last_month, last_day))


def window_for(
    granularity: str,
    year: int | None = None,
    index: int | None = None,
    *,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
) -> Period:
    """Resolve the calendar window for a granularity.

    ``index`` is the 1-based month for ``"month"`` and the 1-based quarter for
    ``"quarter"``. Weeks are not derived from the calendar here: callers pass
    the boundaries they want through ``start`` and ``end``.
    """

    tag = (granularity or "").strip().lower() if isinstance(granularity, str) else granularity
    if tag == WEEK:
        if start is None or end is None:
            raise ValueError("A week window needs explicit start and end dates.")
        first_day, last_day = _as_day(start), _as_day(end)
        if first_day > last_day:
            raise ValueError("Week start must not be after week end.")
        return _span(WEEK, first_day, last_day)

    if tag not in GRANULARITIES:
        raise InvalidGranularity(granularity)

    if year is None:
        raise ValueError(f"A {tag} window needs a year.")
    year = int(year)

    if tag == MONTH:
        month = int(index or 0)
        if not 1 <= month <= 12:
            raise ValueError("Month must be between 1 and 12.")
        return _month_span(MONTH, year, month, month)

    if tag == QUARTER:
        quarter = int(index or 0)
        if not 1 <= quarter <= 4:
            raise ValueError("Quarter must be between 1 and 4.")
        return _month_span(QUARTER, year, (quarter - 1) * 3 + 1, quarter * 3)

    return _month_span(YEAR, year, 1, 12)


def iso_week_window(day: date) -> Period:
    """Monday to Sunday calendar week containing ``day``."""

    iso_year, iso_week, _ = day.isocalendar()
    first_day = date.fromisocalendar(iso_year, iso_week, 1)
    return window_for(WEEK, start=first_day, end=first_day + timedelta(days=6))


def quarter_of(day: date) -> int:
    return (day.month - 1) // 3 + 1


def period_key(period: Period) -> str:
    """Stable identifier for a period, e.g. ``2024-W03`` or ``2024-Q1``."""

    first_day = period.start_date
    if period.granularity == WEEK:
        iso_year, iso_week, _ = first_day.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if period.granularity == MONTH:
        return f"{first_day.year}-{first_day.month:02d}"
    if period.granularity == QUARTER:
        return f"{first_day.year}-Q{quarter_of(first_day)}"
    if period.granularity == YEAR:
        return str(first_day.year)
    raise InvalidGranularity(period.granularity)


def period_label(period: Period) -> str:
    first_day = period.start_date
    if period.granularity == WEEK:
        last_day = period.end_date
        return f"{first_day.strftime('%b')} {first_day.day} – {last_day.strftime('%b')} {last_day.day}"
    if period.granularity == MONTH:
        return first_day.strftime("%B %Y")
    if period.granularity == QUARTER:
        return f"Q{quarter_of(first_day)} {first_day.year}"
    if period.granularity == YEAR:
        return str(first_day.year)
    raise InvalidGranularity(period.granularity)
