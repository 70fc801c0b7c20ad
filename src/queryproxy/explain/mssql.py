"""SQL Server ``SHOWPLAN_TEXT`` parser.

Every non-empty, non-header line becomes one node, in emitted order.
Leading whitespace is recorded as ``extra.level`` but the list stays
flat: indentation alone does not reliably identify a node's parent, so
no tree is reconstructed.
"""

from typing import Any, Iterable, List, Mapping

from .common import CANNOT_PARSE_PLAN, unparseable
from .models import ExplainNode, IndentedTextPlan, NodeIdSequence, ParsedExplainPlan

ENGINE = "mssql"

OPERATION_PREVIEW_LENGTH = 50


def _row_text(row: Any) -> str:
    if isinstance(row, Mapping):
        values: Iterable[Any] = row.values()
    elif isinstance(row, (list, tuple)):
        values = row
    else:
        values = [row]
    return "\n".join("" if value is None else str(value) for value in values)


def _parse_lines(text: str, raw: Any) -> ParsedExplainPlan:
    ids = NodeIdSequence()
    plan_warnings: List[str] = []
    nodes: List[ExplainNode] = []

    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("--") or trimmed.startswith("StmtText"):
            continue

        indent = len(line) - len(line.lstrip())
        operation = trimmed[:OPERATION_PREVIEW_LENGTH]
        if len(trimmed) > OPERATION_PREVIEW_LENGTH:
            operation += "..."

        node = ExplainNode(
            id=ids.next(),
            operation=operation,
            extra={"fullText": trimmed, "level": indent // 2},
        )
        if "Table Scan" in trimmed or "Clustered Index Scan" in trimmed:
            node.warnings.append("Scan detected: review indexes")
            plan_warnings.append("Table or clustered index scan detected")
        if "Sort" in trimmed:
            node.warnings.append("Sort operation")
        nodes.append(node)

    if not nodes:
        return unparseable(ENGINE, raw)

    return ParsedExplainPlan(engine=ENGINE, nodes=nodes, raw_plan=raw, warnings=plan_warnings)


def parse_mssql_plan(raw: IndentedTextPlan) -> ParsedExplainPlan:
    """Normalize SHOWPLAN output.

    Accepts result rows (mappings or sequences), plain text, or a
    showplan XML document. XML plans are passed through as a single node
    carrying the document in ``extra.xmlPlan``.
    """
    payload = raw.payload

    if isinstance(payload, str):
        if "ShowPlanXML" in payload:
            ids = NodeIdSequence()
            return ParsedExplainPlan(
                engine=ENGINE,
                nodes=[ExplainNode(
                    id=ids.next(),
                    operation="XML Execution Plan",
                    extra={"xmlPlan": payload},
                )],
                raw_plan=payload,
                warnings=["XML execution plans are shown in their raw form"],
            )
        return _parse_lines(payload, payload)

    if isinstance(payload, (list, tuple)) and payload:
        text = "\n".join(_row_text(row) for row in payload)
        return _parse_lines(text, list(payload))

    return unparseable(ENGINE, payload, CANNOT_PARSE_PLAN)
