"""EXPLAIN plan normalization for PostgreSQL, MySQL, Oracle and SQL Server.

Example:
    >>> plan = normalize_plan(JsonTreePlan(payload=rows[0]["QUERY PLAN"]))
    >>> summarize_plan(plan).has_full_scan
    True
"""

from .models import (
    ExplainNode,
    ExplainSummary,
    FlatRowsPlan,
    IndentedTextPlan,
    JsonTreePlan,
    NodeIdSequence,
    ParentPointerRowsPlan,
    ParsedExplainPlan,
    RawPlan,
)
from .normalizer import normalize_plan
from .summary import summarize_plan

__all__ = [
    "ExplainNode",
    "ExplainSummary",
    "FlatRowsPlan",
    "IndentedTextPlan",
    "JsonTreePlan",
    "NodeIdSequence",
    "ParentPointerRowsPlan",
    "ParsedExplainPlan",
    "RawPlan",
    "normalize_plan",
    "summarize_plan",
]
