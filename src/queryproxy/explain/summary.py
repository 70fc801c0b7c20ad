"""Plan summary statistics."""

from .models import ExplainSummary, ParsedExplainPlan

FULL_SCAN_MARKERS = ("seq scan", "full", "table scan")
SORT_MARKERS = ("sort",)
TEMP_MARKERS = ("temp", "materialize")


def summarize_plan(plan: ParsedExplainPlan) -> ExplainSummary:
    """Walk the plan once and aggregate counts and scan/sort/temp flags.

    ``warning_count`` covers plan-level warnings plus every node's own.
    """
    node_count = 0
    warning_count = len(plan.warnings)
    has_full_scan = has_sort = has_temp = False

    for node in plan.iter_nodes():
        node_count += 1
        warning_count += len(node.warnings)

        operation = node.operation.lower()
        if any(marker in operation for marker in FULL_SCAN_MARKERS):
            has_full_scan = True
        if any(marker in operation for marker in SORT_MARKERS):
            has_sort = True
        if any(marker in operation for marker in TEMP_MARKERS):
            has_temp = True

    return ExplainSummary(
        total_cost=plan.total_cost,
        total_rows=plan.total_rows,
        execution_time=plan.execution_time,
        node_count=node_count,
        warning_count=warning_count,
        has_full_scan=has_full_scan,
        has_sort=has_sort,
        has_temp=has_temp,
    )
