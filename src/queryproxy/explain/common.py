"""Helpers shared by the dialect parsers."""

from typing import Any, Mapping, Optional

from .models import ParsedExplainPlan

CANNOT_PARSE_PLAN = "cannot parse plan"
FULL_SCAN_WARNING = "Full table scan: review indexes"


def as_number(value: Any) -> Optional[float]:
    """Coerce a driver value to a number, or ``None``.

    Integral values come back as ``int``. Booleans are not numbers here.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN
        return None
    return int(number) if number.is_integer() else number


def lookup(row: Mapping[str, Any], name: str) -> Any:
    """Fetch a column from a row, matching the name case-insensitively."""
    if name in row:
        return row[name]
    lowered = name.lower()
    for key, value in row.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def unparseable(engine: str, raw: Any, reason: str = CANNOT_PARSE_PLAN) -> ParsedExplainPlan:
    return ParsedExplainPlan(engine=engine, nodes=[], raw_plan=raw, warnings=[reason])
