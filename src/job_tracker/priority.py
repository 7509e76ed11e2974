"""Task priority normalization.

The store only accepts capitalized priorities (``Low``/``Medium``/``High``) while
everything above the data-access boundary works with the lowercase
:class:`TaskPriority`. Reads go through :func:`priority_from_storage`, writes
through :func:`priority_to_storage`.
"""

from enum import StrEnum

from loguru import logger


class TaskPriority(StrEnum):
    low = "low"
    medium = "medium"
    high = "high"


DEFAULT_PRIORITY = TaskPriority.medium

_TO_STORAGE: dict[TaskPriority, str] = {p: p.value.capitalize() for p in TaskPriority}
_FROM_STORAGE: dict[str, TaskPriority] = {v: k for k, v in _TO_STORAGE.items()}


def normalize_priority(raw: object) -> TaskPriority:
    """Coerce any raw value into a :class:`TaskPriority`.

    Matching is case-insensitive. Anything unrecognized (including ``None`` and
    the empty string) falls back to ``medium`` instead of failing.
    """
    if isinstance(raw, TaskPriority):
        return raw
    value = str(raw).lower() if raw is not None else ""
    try:
        return TaskPriority(value)
    except ValueError:
        logger.debug(f"Unrecognized priority {raw!r}, defaulting to {DEFAULT_PRIORITY}")
        return DEFAULT_PRIORITY


def is_known_priority(raw: object) -> bool:
    """True when ``raw`` lowercases to one of the canonical values."""
    return raw is not None and str(raw).lower() in TaskPriority._value2member_map_


def priority_to_storage(priority: TaskPriority | str) -> str:
    """``low`` -> ``Low``: the only spelling the store accepts."""
    return _TO_STORAGE[normalize_priority(priority)]


def priority_from_storage(raw: str | None) -> TaskPriority:
    if raw in _FROM_STORAGE:
        return _FROM_STORAGE[raw]
    return normalize_priority(raw)
