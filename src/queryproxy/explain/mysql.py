"""MySQL tabular ``EXPLAIN`` parser.

Each EXPLAIN row becomes one flat node. The row format only exposes a
select id, not parent links, so no nesting is attempted.
"""

from typing import Any, List, Mapping

from .common import FULL_SCAN_WARNING, as_number, lookup, unparseable
from .models import ExplainNode, FlatRowsPlan, NodeIdSequence, ParsedExplainPlan

ENGINE = "mysql"

LOW_FILTERED_PERCENT = 10


def _parse_row(row: Mapping[str, Any], ids: NodeIdSequence, plan_warnings: List[str]) -> ExplainNode:
    access_type = lookup(row, "type")
    table = lookup(row, "table")

    node = ExplainNode(
        id=ids.next(),
        operation=str(lookup(row, "select_type") or access_type or "SIMPLE"),
        object=str(table) if table else None,
        rows=as_number(lookup(row, "rows")),
    )

    if access_type:
        node.extra["accessType"] = access_type
        if access_type == "ALL":
            node.warnings.append(FULL_SCAN_WARNING)
            plan_warnings.append(f"{node.object or 'table'}: full table scan")
        elif access_type == "index":
            node.warnings.append("Full index scan")

    for column, key in (
        ("possible_keys", "possibleKeys"),
        ("key", "usedKey"),
        ("key_len", "keyLen"),
        ("ref", "ref"),
    ):
        value = lookup(row, column)
        if value:
            node.extra[key] = value

    filtered = lookup(row, "filtered")
    if filtered is not None:
        filtered_number = as_number(filtered)
        node.extra["filtered"] = filtered_number if filtered_number is not None else filtered
        if filtered_number is not None and filtered_number < LOW_FILTERED_PERCENT:
            node.warnings.append(f"Low filter selectivity: {filtered_number}%")

    extra_text = lookup(row, "Extra")
    if extra_text:
        extra_text = str(extra_text)
        node.extra["extra"] = extra_text
        if "Using filesort" in extra_text:
            node.warnings.append("Filesort used")
            plan_warnings.append(f"{node.object or 'query'}: filesort used")
        if "Using temporary" in extra_text:
            node.warnings.append("Temporary table used")
            plan_warnings.append(f"{node.object or 'query'}: temporary table used")
        if "Using where" in extra_text:
            node.filter = "WHERE condition applied"
        if "Using index" in extra_text:
            node.extra["coveringIndex"] = True

    return node


def parse_mysql_plan(raw: FlatRowsPlan) -> ParsedExplainPlan:
    """Normalize MySQL EXPLAIN rows into a flat node list.

    ``total_rows`` is the sum of the per-row estimates.
    """
    rows = raw.payload
    if not isinstance(rows, (list, tuple)) or not rows:
        return unparseable(ENGINE, rows)

    ids = NodeIdSequence()
    plan_warnings: List[str] = []
    nodes = [_parse_row(row, ids, plan_warnings) for row in rows if isinstance(row, Mapping)]
    if not nodes:
        return unparseable(ENGINE, rows)

    total_rows = sum(node.rows for node in nodes if node.rows)

    return ParsedExplainPlan(
        engine=ENGINE,
        total_rows=total_rows,
        nodes=nodes,
        raw_plan=list(rows),
        warnings=plan_warnings,
    )
