"""Unit tests for plan normalization dispatch and the plan model."""

from unittest.mock import patch

from queryproxy.explain.common import CANNOT_PARSE_PLAN
from queryproxy.explain.models import (
    ExplainNode,
    FlatRowsPlan,
    IndentedTextPlan,
    JsonTreePlan,
    NodeIdSequence,
    ParentPointerRowsPlan,
    ParsedExplainPlan,
)
from queryproxy.explain.normalizer import PARSERS, normalize_plan


class TestNormalizePlan:

    def test_routes_by_variant(self):
        assert normalize_plan(JsonTreePlan([{"Plan": {"Node Type": "Result"}}])).engine == "postgresql"
        assert normalize_plan(FlatRowsPlan([{"table": "t"}])).engine == "mysql"
        assert normalize_plan(ParentPointerRowsPlan([{"ID": 0, "OPERATION": "X"}])).engine == "oracle"
        assert normalize_plan(IndentedTextPlan("SELECT 1")).engine == "mssql"

    def test_parser_failure_degrades(self):
        raw = FlatRowsPlan([{"table": "t"}])

        with patch.dict(PARSERS, {FlatRowsPlan: lambda plan: 1 / 0}):
            plan = normalize_plan(raw)

        assert plan.engine == "mysql"
        assert plan.nodes == []
        assert plan.warnings == [CANNOT_PARSE_PLAN]
        assert plan.raw_plan == [{"table": "t"}]

    def test_unknown_variant(self):
        plan = normalize_plan({"not": "a plan"})

        assert plan.engine == "unknown"
        assert plan.warnings == [CANNOT_PARSE_PLAN]


def test_node_ids_restart_per_parse():
    first = normalize_plan(FlatRowsPlan([{"table": "a"}, {"table": "b"}]))
    second = normalize_plan(FlatRowsPlan([{"table": "c"}]))

    assert [node.id for node in first.nodes] == ["node_1", "node_2"]
    assert [node.id for node in second.nodes] == ["node_1"]


def test_node_id_sequence():
    ids = NodeIdSequence()

    assert [ids.next(), ids.next()] == ["node_1", "node_2"]
    assert ids.issued == 2


def test_plan_to_dict():
    child = ExplainNode(id="node_2", operation="Seq Scan", object="t", rows=10, warnings=["w"])
    root = ExplainNode(id="node_1", operation="Limit", cost=1.5, children=[child], extra={"k": 1})
    plan = ParsedExplainPlan(engine="postgresql", nodes=[root], raw_plan=[{}], total_cost=1.5)

    assert plan.to_dict() == {
        "dbType": "postgresql",
        "totalCost": 1.5,
        "nodes": [
            {
                "id": "node_1",
                "operation": "Limit",
                "cost": 1.5,
                "children": [
                    {
                        "id": "node_2",
                        "operation": "Seq Scan",
                        "object": "t",
                        "rows": 10,
                        "children": [],
                        "warnings": ["w"],
                    }
                ],
                "extra": {"k": 1},
            }
        ],
        "rawPlan": [{}],
        "warnings": [],
    }
    assert [node.id for node in plan.iter_nodes()] == ["node_1", "node_2"]
