"""Row result shaping: column derivation, JSON-safe values and the row cap."""

from typing import Any, List, Mapping, Optional, Sequence

from ..core.utils import to_json_safe
from .models import QueryResult

DEFAULT_MAX_ROWS = 1000


def derive_columns(
    rows: Sequence[Mapping[str, Any]],
    driver_columns: Optional[Sequence[str]],
) -> List[str]:
    """Prefer the driver's column metadata, then the first row's keys."""
    if driver_columns:
        return [str(column) for column in driver_columns]
    if rows:
        return [str(key) for key in rows[0].keys()]
    return []


def normalize_rows(
    rows: Sequence[Mapping[str, Any]],
    columns: Optional[Sequence[str]],
    *,
    execution_time_ms: float,
    max_rows: int = DEFAULT_MAX_ROWS,
) -> QueryResult:
    """Build a successful ``QueryResult`` from materialized rows.

    At most ``max_rows`` rows are returned. When more were produced,
    ``warning`` names the true count, which ``row_count`` also carries.

    Args:
        rows: All rows the statement returned
        columns: Driver column names, if reported
        execution_time_ms: Wall-clock time of the adapter call
        max_rows: Row cap

    Returns:
        QueryResult with ``success=True``
    """
    total = len(rows)
    warning = None
    if total > max_rows:
        warning = f"Result has {total} rows; only the first {max_rows} are returned."

    return QueryResult(
        success=True,
        rows=[
            {str(key): to_json_safe(value) for key, value in row.items()}
            for row in rows[:max_rows]
        ],
        row_count=total,
        columns=derive_columns(rows, columns),
        execution_time_ms=execution_time_ms,
        warning=warning,
    )
