"""Fixtures for database layer tests: an in-memory adapter with scripted behaviour."""

import asyncio

import pytest

from queryproxy.database.base import BaseEngineAdapter
from queryproxy.database.models import DatabaseEngine, RawRows
from queryproxy.database.registry import EngineAdapterRegistry
from queryproxy.explain.models import JsonTreePlan

PLAN = [{"Plan": {"Node Type": "Seq Scan", "Relation Name": "users", "Total Cost": 12.5, "Plan Rows": 4000}}]


class FakeAdapter(BaseEngineAdapter):
    """Adapter whose driver behaviour is set through class attributes."""

    component_name = "FakeAdapter"
    engine = DatabaseEngine.POSTGRESQL

    connect_delay = 0.0
    connect_error = None
    query_delay = 0.0
    query_error = None
    close_error = None
    outcome = RawRows(rows=[{"one": 1}], columns=["one"])
    plan = JsonTreePlan(PLAN)
    version = "PostgreSQL 16.2"
    instances: list = []

    def __init__(self, config, **kwargs):
        super().__init__(config, **kwargs)
        self.events = []
        self.last_sql = None
        self.last_parameters = None
        type(self).instances.append(self)

    async def _connect(self) -> None:
        self.events.append("connect")
        await asyncio.sleep(self.connect_delay)
        if self.connect_error is not None:
            raise self.connect_error

    async def _async_cleanup(self) -> None:
        self.events.append("close")
        if self.close_error is not None:
            raise self.close_error

    async def _run(self, sql, parameters, result):
        self.events.append("run")
        self.last_sql = sql
        self.last_parameters = parameters
        await asyncio.sleep(self.query_delay)
        if self.query_error is not None:
            raise self.query_error
        return result

    async def _run_query(self, sql, parameters):
        return await self._run(sql, parameters, self.outcome)

    async def _run_explain(self, sql, parameters):
        return await self._run(sql, parameters, self.plan)

    async def _fetch_server_version(self) -> str:
        return await self._run("version", {}, self.version)

    def _is_auth_error(self, error: BaseException) -> bool:
        return isinstance(error, PermissionError)


@pytest.fixture
def fake_adapter_class():
    """A fresh FakeAdapter subclass so attribute changes stay per test."""
    return type("FakeAdapter", (FakeAdapter,), {"instances": []})


@pytest.fixture
def fake_registry(fake_adapter_class):
    registry = EngineAdapterRegistry()
    registry.register_adapter(DatabaseEngine.POSTGRESQL, fake_adapter_class)
    return registry
