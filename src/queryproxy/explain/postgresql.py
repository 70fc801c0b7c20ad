"""PostgreSQL ``EXPLAIN (FORMAT JSON)`` parser.

The plan is a recursive JSON tree: each node's ``Plans`` array holds its
children in execution order.
"""

import json
from typing import Any, List, Mapping

from .common import FULL_SCAN_WARNING, unparseable
from .models import ExplainNode, JsonTreePlan, NodeIdSequence, ParsedExplainPlan

ENGINE = "postgresql"

SEQ_SCAN_ROW_THRESHOLD = 1000
ROWS_REMOVED_THRESHOLD = 10000

# Copied into ``extra`` verbatim when present.
EXTRA_KEYS = (
    "Sort Key", "Sort Method", "Sort Space Type", "Sort Space Used",
    "Hash Cond", "Merge Cond", "Join Type", "Strategy",
    "Startup Cost", "Parallel Aware", "Workers Planned", "Workers Launched",
)


def _number(node: Mapping[str, Any], key: str):
    value = node.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _parse_node(
    node: Mapping[str, Any],
    ids: NodeIdSequence,
    plan_warnings: List[str],
) -> ExplainNode:
    result = ExplainNode(
        id=ids.next(),
        operation=str(node.get("Node Type") or "Unknown"),
        rows=_number(node, "Plan Rows"),
        cost=_number(node, "Total Cost"),
        time=_number(node, "Actual Total Time"),
        width=_number(node, "Plan Width"),
    )

    relation = node.get("Relation Name")
    index_name = node.get("Index Name")
    if relation:
        result.object = str(relation)
    if index_name:
        result.object = f"{result.object} ({index_name})" if result.object else str(index_name)
    if node.get("Alias"):
        result.extra["alias"] = node["Alias"]

    if node.get("Filter"):
        result.filter = str(node["Filter"])
    if node.get("Index Cond"):
        result.extra["indexCond"] = node["Index Cond"]
    if node.get("Join Filter"):
        result.extra["joinFilter"] = node["Join Filter"]

    if result.operation == "Seq Scan" and result.rows and result.rows > SEQ_SCAN_ROW_THRESHOLD:
        result.warnings.append(FULL_SCAN_WARNING)
        plan_warnings.append(f"{result.object or 'table'}: full table scan (Seq Scan)")

    removed = _number(node, "Rows Removed by Filter")
    if removed is not None and removed > ROWS_REMOVED_THRESHOLD:
        result.warnings.append(f"Filter removed {int(removed):,} rows")

    for key in EXTRA_KEYS:
        if key in node and node[key] is not None:
            result.extra[key] = node[key]

    children = node.get("Plans")
    if isinstance(children, list):
        result.children = [
            _parse_node(child, ids, plan_warnings)
            for child in children
            if isinstance(child, Mapping)
        ]
    return result


def parse_postgresql_plan(raw: JsonTreePlan) -> ParsedExplainPlan:
    """Normalize a PostgreSQL JSON plan.

    Accepts the list ``EXPLAIN (FORMAT JSON)`` returns, a single plan
    object, or the same as JSON text.

    Returns:
        ParsedExplainPlan with one root node
    """
    payload: Any = raw.payload
    if isinstance(payload, (bytes, str)):
        try:
            payload = json.loads(payload)
        except ValueError:
            return unparseable(ENGINE, raw.payload)

    plan_data = payload[0] if isinstance(payload, list) and payload else payload
    if not isinstance(plan_data, Mapping):
        return unparseable(ENGINE, raw.payload)

    root_plan = plan_data.get("Plan", plan_data)
    if not isinstance(root_plan, Mapping) or "Node Type" not in root_plan:
        return unparseable(ENGINE, raw.payload)

    ids = NodeIdSequence()
    plan_warnings: List[str] = []
    root = _parse_node(root_plan, ids, plan_warnings)

    execution_time = _number(plan_data, "Execution Time")
    if execution_time is None:
        execution_time = root.time

    return ParsedExplainPlan(
        engine=ENGINE,
        total_cost=root.cost,
        total_rows=root.rows,
        execution_time=execution_time,
        nodes=[root],
        raw_plan=payload,
        warnings=plan_warnings,
    )
