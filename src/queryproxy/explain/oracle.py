"""Oracle ``PLAN_TABLE`` parser.

Rows arrive ordered by ``ID`` and point at their parent through
``PARENT_ID``. The first pass builds a node per row; the second links
each node under its parent.
"""

from typing import Any, Dict, List, Mapping, Optional

from .common import FULL_SCAN_WARNING, as_number, lookup, unparseable
from .models import ExplainNode, NodeIdSequence, ParentPointerRowsPlan, ParsedExplainPlan

ENGINE = "oracle"

LARGE_SORT_CARDINALITY = 10000


def _as_id(value: Any) -> Optional[int]:
    number = as_number(value)
    return int(number) if number is not None else None


def parse_oracle_plan(raw: ParentPointerRowsPlan) -> ParsedExplainPlan:
    """Normalize Oracle plan rows into a tree.

    Nodes whose parent is null or missing from the result become roots.
    ``total_cost`` is the cost of the row with ``ID`` 0.
    """
    rows = raw.payload
    if not isinstance(rows, (list, tuple)) or not rows:
        return unparseable(ENGINE, rows)

    ids = NodeIdSequence()
    plan_warnings: List[str] = []
    by_id: Dict[int, ExplainNode] = {}
    total_cost = None

    for row in rows:
        if not isinstance(row, Mapping):
            continue
        oracle_id = _as_id(lookup(row, "ID"))
        if oracle_id is None:
            oracle_id = 0
        parent_id = _as_id(lookup(row, "PARENT_ID"))

        operation = " ".join(
            str(part) for part in (lookup(row, "OPERATION"), lookup(row, "OPTIONS")) if part
        )
        cost = as_number(lookup(row, "COST"))
        cardinality = as_number(lookup(row, "CARDINALITY"))
        object_name = lookup(row, "OBJECT_NAME")

        if oracle_id == 0 and cost is not None:
            total_cost = cost

        node = ExplainNode(
            id=ids.next(),
            operation=operation or "Unknown",
            object=str(object_name) if object_name else None,
            rows=cardinality,
            cost=cost,
            width=as_number(lookup(row, "BYTES")),
            extra={"oracleId": oracle_id, "parentId": parent_id},
        )

        if "TABLE ACCESS FULL" in operation:
            node.warnings.append(FULL_SCAN_WARNING)
            plan_warnings.append(f"{node.object or 'table'}: full table scan")
        if "SORT" in operation and cardinality and cardinality > LARGE_SORT_CARDINALITY:
            node.warnings.append("Large sort operation")

        filter_predicates = lookup(row, "FILTER_PREDICATES")
        if filter_predicates:
            node.filter = str(filter_predicates)
        access_predicates = lookup(row, "ACCESS_PREDICATES")
        if access_predicates:
            node.extra["accessPredicates"] = access_predicates

        by_id[oracle_id] = node

    if not by_id:
        return unparseable(ENGINE, rows)

    roots: List[ExplainNode] = []
    for oracle_id, node in by_id.items():
        parent_id = node.extra["parentId"]
        parent = by_id.get(parent_id) if parent_id is not None and parent_id != oracle_id else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)

    return ParsedExplainPlan(
        engine=ENGINE,
        total_cost=total_cost,
        nodes=roots,
        raw_plan=list(rows),
        warnings=plan_warnings,
    )
