"""Request and result models shared by adapters, dispatcher and API."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from ..explain.models import ExplainSummary, ParsedExplainPlan, RawPlan


class DatabaseEngine(str, Enum):
    """Supported database engines, valued by their wire name."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    ORACLE = "oracle"
    MSSQL = "mssql"

    @classmethod
    def values(cls) -> List[str]:
        return [engine.value for engine in cls]


@dataclass(frozen=True)
class ConnectionInfo:
    """Credentials and address for one short-lived connection.

    Built once per request and never persisted. The password is excluded
    from ``repr`` and from ``to_safe_dict``.
    """

    engine: DatabaseEngine
    host: str
    port: int
    database_name: str
    username: str
    password: str = field(repr=False)

    def to_safe_dict(self) -> Dict[str, Any]:
        return {
            "engine": self.engine.value,
            "host": self.host,
            "port": self.port,
            "database_name": self.database_name,
            "username": self.username,
        }


Row = Dict[str, Any]


@dataclass
class RawRows:
    """Materialized rows plus the driver's column names, if it reported them."""

    rows: List[Row]
    columns: Optional[List[str]] = None


AdapterOutcome = Union[RawRows, RawPlan]


@dataclass
class QueryResult:
    """Unified outcome of one execute request.

    ``row_count`` is the true number of rows the statement produced;
    ``rows`` holds at most the configured cap.
    """

    success: bool
    execution_time_ms: float = 0.0
    rows: Optional[List[Row]] = None
    row_count: Optional[int] = None
    columns: Optional[List[str]] = None
    explain_plan: Optional[ParsedExplainPlan] = None
    explain_summary: Optional[ExplainSummary] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    warning: Optional[str] = None

    @classmethod
    def failure(
        cls,
        error: str,
        *,
        error_code: Optional[str] = None,
        execution_time_ms: float = 0.0,
    ) -> "QueryResult":
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            execution_time_ms=execution_time_ms,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "executionTimeMs": self.execution_time_ms,
        }
        if self.rows is not None:
            data["rows"] = self.rows
        if self.row_count is not None:
            data["rowCount"] = self.row_count
        if self.columns is not None:
            data["columns"] = self.columns
        if self.explain_plan is not None:
            data["explainPlan"] = self.explain_plan.to_dict()
        if self.explain_summary is not None:
            data["explainSummary"] = self.explain_summary.to_dict()
        if self.error is not None:
            data["error"] = self.error
        if self.error_code is not None:
            data["errorCode"] = self.error_code
        if self.warning is not None:
            data["warning"] = self.warning
        return data


@dataclass
class ConnectionTestResult:
    """Outcome of a connectivity probe."""

    success: bool
    message: str
    server_version: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.server_version is not None:
            data["serverVersion"] = self.server_version
        if self.error_code is not None:
            data["errorCode"] = self.error_code
        return data
