"""Unit tests for the MySQL plan parser."""

from queryproxy.explain.common import CANNOT_PARSE_PLAN, FULL_SCAN_WARNING
from queryproxy.explain.models import FlatRowsPlan
from queryproxy.explain.mysql import parse_mysql_plan

ROWS = [
    {
        "id": 1,
        "select_type": "SIMPLE",
        "table": "orders",
        "type": "ALL",
        "possible_keys": None,
        "key": None,
        "rows": 5000,
        "filtered": 5.0,
        "Extra": "Using where; Using temporary; Using filesort",
    },
    {
        "id": 1,
        "select_type": "SIMPLE",
        "table": "users",
        "type": "eq_ref",
        "possible_keys": "PRIMARY",
        "key": "PRIMARY",
        "key_len": "4",
        "ref": "shop.orders.user_id",
        "rows": 1,
        "filtered": "100.00",
        "Extra": "Using index",
    },
]


class TestParseMysqlPlan:

    def test_flat_nodes(self):
        plan = parse_mysql_plan(FlatRowsPlan(ROWS))

        assert plan.engine == "mysql"
        assert [node.id for node in plan.nodes] == ["node_1", "node_2"]
        assert all(node.children == [] for node in plan.nodes)
        assert plan.total_rows == 5001
        assert plan.total_cost is None

    def test_full_scan_row(self):
        plan = parse_mysql_plan(FlatRowsPlan(ROWS))
        orders = plan.nodes[0]

        assert orders.operation == "SIMPLE"
        assert orders.object == "orders"
        assert orders.filter == "WHERE condition applied"
        assert orders.extra["accessType"] == "ALL"
        assert FULL_SCAN_WARNING in orders.warnings
        assert "Low filter selectivity: 5%" in orders.warnings
        assert "Filesort used" in orders.warnings
        assert "Temporary table used" in orders.warnings
        assert plan.warnings == [
            "orders: full table scan",
            "orders: filesort used",
            "orders: temporary table used",
        ]

    def test_index_lookup_row(self):
        users = parse_mysql_plan(FlatRowsPlan(ROWS)).nodes[1]

        assert users.warnings == []
        assert users.extra["usedKey"] == "PRIMARY"
        assert users.extra["possibleKeys"] == "PRIMARY"
        assert users.extra["ref"] == "shop.orders.user_id"
        assert users.extra["filtered"] == 100
        assert users.extra["coveringIndex"] is True

    def test_full_index_scan(self):
        plan = parse_mysql_plan(FlatRowsPlan([{"table": "t", "type": "index", "rows": 10}]))

        assert plan.nodes[0].warnings == ["Full index scan"]
        assert plan.nodes[0].operation == "index"

    def test_column_names_are_case_insensitive(self):
        plan = parse_mysql_plan(FlatRowsPlan([{"TABLE": "t", "TYPE": "ALL", "ROWS": "12"}]))

        assert plan.nodes[0].object == "t"
        assert plan.nodes[0].rows == 12

    def test_empty_rows(self):
        plan = parse_mysql_plan(FlatRowsPlan([]))

        assert plan.nodes == []
        assert plan.warnings == [CANNOT_PARSE_PLAN]
