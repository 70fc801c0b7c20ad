"""Request and response bodies for the HTTP API.

Request fields are typed loosely on purpose: connection and SQL checks
run in the domain validators so that every rejection carries the same
400 shape.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TestConnectionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    connection: Any = None


class ExecuteQueryRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    connection: Any = None
    sql: Any = None
    parameters: Optional[Dict[str, Any]] = None
    explain_only: bool = Field(False, alias="explainOnly")


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


class TestConnectionResponse(BaseModel):
    success: bool
    message: str
    serverVersion: Optional[str] = None
    errorCode: Optional[str] = None


class ExecuteQueryResponse(BaseModel):
    """Documented shape of ``/api/execute-query`` responses."""

    model_config = ConfigDict(extra="allow")

    success: bool
    executionTimeMs: float = 0.0
    rows: Optional[List[Dict[str, Any]]] = None
    rowCount: Optional[int] = None
    columns: Optional[List[str]] = None
    explainPlan: Optional[Dict[str, Any]] = None
    explainSummary: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    errorCode: Optional[str] = None
    warning: Optional[str] = None
