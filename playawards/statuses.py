from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class StatusDefinition:
    value: str
    label: str
    stalled: bool


_STATUS_DEFINITIONS: tuple[StatusDefinition, ...] = (
    StatusDefinition(value="Wishlist", label="Wishlist", stalled=False),
    StatusDefinition(value="Not Started", label="Not started", stalled=False),
    StatusDefinition(value="In Progress", label="In progress", stalled=True),
    StatusDefinition(value="Completed", label="Completed", stalled=False),
    StatusDefinition(value="Abandoned", label="Abandoned", stalled=True),
)

STATUS_BY_VALUE: Dict[str, StatusDefinition] = {
    definition.value: definition for definition in _STATUS_DEFINITIONS
}

STATUS_VALUES: tuple[str, ...] = tuple(STATUS_BY_VALUE.keys())

WISHLIST = "Wishlist"
NOT_STARTED = "Not Started"
IN_PROGRESS = "In Progress"
COMPLETED = "Completed"
ABANDONED = "Abandoned"

DEFAULT_STATUS = NOT_STARTED

# Statuses that can surface in "The One That Got Away".
STALLED_STATUSES: tuple[str, ...] = tuple(
    value for value, definition in STATUS_BY_VALUE.items() if definition.stalled
)

_STATUS_BY_LOOKUP: Dict[str, str] = {
    value.replace(" ", "").lower(): value for value in STATUS_VALUES
}


def normalize_status_value(value: str | None) -> str:
    """Normalize a raw status string into a canonical value.

    Matching ignores case, spaces and underscores so ``"in_progress"`` and
    ``"In Progress"`` resolve to the same status. Unknown values fall back to
    :data:`DEFAULT_STATUS`.
    """

    if value is None:
        return DEFAULT_STATUS
    lookup = str(value).strip().replace(" ", "").replace("_", "").lower()
    return _STATUS_BY_LOOKUP.get(lookup, DEFAULT_STATUS)


def status_label(value: str | None) -> str:
    definition = STATUS_BY_VALUE.get(normalize_status_value(value))
    return definition.label if definition else str(value)
