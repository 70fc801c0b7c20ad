"""Small helpers shared across QueryProxy.

Functions:
    redact_secret: Remove a secret from free text
    to_json_safe: Convert driver values to JSON-compatible values
    format_duration_ms: Round a duration for reporting
"""

import datetime as dt
import decimal
import math
import uuid
from typing import Any, Iterable, Optional

REDACTION = "***"


def _non_finite_name(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


def redact_secret(text: str, secrets: Iterable[Optional[str]]) -> str:
    """Replace every occurrence of each non-empty secret in ``text``.

    Driver error messages sometimes echo a DSN or the login packet, so
    every message that leaves an adapter goes through here.

    Example:
        >>> redact_secret("login failed for s3cret", ["s3cret"])
        'login failed for ***'
    """
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTION)
    return text


def to_json_safe(value: Any) -> Any:
    """Convert a single driver value into something JSON can carry.

    Binary values become hex strings and decimals become int or float.
    NaN and infinities become the strings ``"NaN"``, ``"Infinity"`` and
    ``"-Infinity"``, since JSON has no literal for them. Temporal values
    become ISO-8601 strings and UUIDs become strings.
    Containers are converted recursively.
    """
    if isinstance(value, float) and not math.isfinite(value):
        return _non_finite_name(value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, decimal.Decimal):
        if not value.is_finite():
            return "NaN" if value.is_nan() else _non_finite_name(float(value))
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, dt.timedelta):
        return value.total_seconds()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, dict):
        return {str(k): to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_safe(v) for v in value]
    return str(value)


def format_duration_ms(duration_ms: float, precision: int = 2) -> float:
    """Round a millisecond duration, clamping negatives to zero."""
    return round(max(duration_ms, 0.0), precision)
