"""Validation of the ``connection`` object in API requests."""

from typing import Any, Mapping

from ..core.exceptions import ConnectionValidationError
from ..database.models import ConnectionInfo, DatabaseEngine

MIN_PORT = 1
MAX_PORT = 65535


def _require_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConnectionValidationError(f"{key} is required", context={"field": key})
    return value.strip()


def _parse_port(value: Any) -> int:
    if isinstance(value, bool):
        port = None
    elif isinstance(value, int):
        port = value
    elif isinstance(value, float) and value.is_integer():
        port = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        port = int(value.strip())
    else:
        port = None

    if port is None:
        raise ConnectionValidationError("port is required and must be numeric", context={"field": "port"})
    if not MIN_PORT <= port <= MAX_PORT:
        raise ConnectionValidationError(
            f"port must be between {MIN_PORT} and {MAX_PORT}",
            context={"field": "port"},
        )
    return port


def parse_connection(payload: Any) -> ConnectionInfo:
    """Build a ``ConnectionInfo`` from a raw request payload.

    An empty password is accepted; a missing or null one is not.
    Non-string passwords are stringified.

    Args:
        payload: The decoded ``connection`` object

    Returns:
        Validated connection info

    Raises:
        ConnectionValidationError: If any field is missing or invalid
    """
    if not isinstance(payload, Mapping):
        raise ConnectionValidationError("connection information is required")

    db_type = payload.get("db_type")
    if db_type not in DatabaseEngine.values():
        raise ConnectionValidationError(
            "unsupported database type",
            context={"field": "db_type", "supported": DatabaseEngine.values()},
        )

    host = _require_text(payload, "host")
    port = _parse_port(payload.get("port"))
    database_name = _require_text(payload, "database_name")
    username = _require_text(payload, "username")

    password = payload.get("password")
    if password is None:
        raise ConnectionValidationError("password is required", context={"field": "password"})

    return ConnectionInfo(
        engine=DatabaseEngine(db_type),
        host=host,
        port=port,
        database_name=database_name,
        username=username,
        password=str(password),
    )
