"""Engine-neutral EXPLAIN plan model.

Every dialect parser turns its native plan shape into a tree of
``ExplainNode`` objects wrapped in a ``ParsedExplainPlan``. Adapters hand
the parsers one of four raw plan variants; the variant type alone decides
which parser runs.

Classes:
    ExplainNode: One operator in a plan
    ParsedExplainPlan: Normalized plan with totals and warnings
    ExplainSummary: Aggregate flags derived from a plan
    NodeIdSequence: Per-parse node id generator
    JsonTreePlan, FlatRowsPlan, ParentPointerRowsPlan, IndentedTextPlan:
        Raw plan variants
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union


class NodeIdSequence:
    """Hands out ``node_1``, ``node_2``, ... for a single parse call.

    A fresh sequence is created per parse, so ids never leak between
    concurrent requests.
    """

    def __init__(self, prefix: str = "node") -> None:
        self._prefix = prefix
        self._counter = 0

    def next(self) -> str:
        self._counter += 1
        return f"{self._prefix}_{self._counter}"

    @property
    def issued(self) -> int:
        return self._counter


@dataclass
class ExplainNode:
    """One operator in an execution plan."""

    id: str
    operation: str
    object: Optional[str] = None
    rows: Optional[float] = None
    cost: Optional[float] = None
    time: Optional[float] = None
    width: Optional[float] = None
    filter: Optional[str] = None
    children: List["ExplainNode"] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "operation": self.operation}
        for key in ("object", "rows", "cost", "time", "width", "filter"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["children"] = [child.to_dict() for child in self.children]
        if self.extra:
            data["extra"] = dict(self.extra)
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data


@dataclass
class ParsedExplainPlan:
    """A normalized plan for one engine.

    ``nodes`` holds the roots only; ``raw_plan`` is the engine's payload
    exactly as received.
    """

    engine: str
    nodes: List[ExplainNode] = field(default_factory=list)
    raw_plan: Any = None
    total_cost: Optional[float] = None
    total_rows: Optional[float] = None
    execution_time: Optional[float] = None
    warnings: List[str] = field(default_factory=list)

    def iter_nodes(self):
        for root in self.nodes:
            yield from root.walk()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"dbType": self.engine}
        if self.total_cost is not None:
            data["totalCost"] = self.total_cost
        if self.total_rows is not None:
            data["totalRows"] = self.total_rows
        if self.execution_time is not None:
            data["executionTime"] = self.execution_time
        data["nodes"] = [node.to_dict() for node in self.nodes]
        data["rawPlan"] = self.raw_plan
        data["warnings"] = list(self.warnings)
        return data


@dataclass
class ExplainSummary:
    """Aggregate view of a plan for quick display."""

    total_cost: Optional[float]
    total_rows: Optional[float]
    execution_time: Optional[float]
    node_count: int
    warning_count: int
    has_full_scan: bool
    has_sort: bool
    has_temp: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCost": self.total_cost,
            "totalRows": self.total_rows,
            "executionTime": self.execution_time,
            "nodeCount": self.node_count,
            "warningCount": self.warning_count,
            "hasFullScan": self.has_full_scan,
            "hasSort": self.has_sort,
            "hasTemp": self.has_temp,
        }


@dataclass(frozen=True)
class JsonTreePlan:
    """PostgreSQL ``EXPLAIN (FORMAT JSON)`` output: a list of plan objects or JSON text."""

    payload: Union[str, Sequence[Any], Mapping[str, Any]]
    engine: str = "postgresql"


@dataclass(frozen=True)
class FlatRowsPlan:
    """MySQL tabular ``EXPLAIN`` output, one mapping per row."""

    payload: Sequence[Mapping[str, Any]]
    engine: str = "mysql"


@dataclass(frozen=True)
class ParentPointerRowsPlan:
    """Oracle ``PLAN_TABLE`` rows linked by ``ID``/``PARENT_ID``."""

    payload: Sequence[Mapping[str, Any]]
    engine: str = "oracle"


@dataclass(frozen=True)
class IndentedTextPlan:
    """SQL Server ``SHOWPLAN_TEXT`` output as rows, strings, or a showplan XML document."""

    payload: Union[str, Sequence[Any]]
    engine: str = "mssql"


RawPlan = Union[JsonTreePlan, FlatRowsPlan, ParentPointerRowsPlan, IndentedTextPlan]
