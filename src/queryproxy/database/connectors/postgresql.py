"""PostgreSQL engine adapter built on asyncpg."""

from typing import Any, Dict, Optional

import asyncpg

from ...explain.models import JsonTreePlan
from ..base import BaseEngineAdapter
from ..models import ConnectionInfo, DatabaseEngine, RawRows
from ..params import to_numeric

CLOSE_TIMEOUT = 5.0


class PostgreSQLAdapter(BaseEngineAdapter):
    """PostgreSQL adapter.

    Statements run inside a read-only transaction. ``statement_timeout`` is
    set on the session and asyncpg's ``command_timeout`` backs it up.
    EXPLAIN uses ``(FORMAT JSON, ANALYZE, BUFFERS)``, so the plan carries
    actual timings.
    """

    component_name = "PostgreSQLAdapter"
    version = "1.0.0"
    engine = DatabaseEngine.POSTGRESQL

    def __init__(self, config: ConnectionInfo, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self._connection: Optional["asyncpg.Connection"] = None

    async def _connect(self) -> None:
        self._connection = await asyncpg.connect(
            host=self.config.host,
            port=self.config.port,
            user=self.config.username,
            password=self.config.password,
            database=self.config.database_name,
            timeout=self.connect_timeout,
            command_timeout=self.query_timeout,
            server_settings={
                "statement_timeout": str(self.query_timeout_ms),
                "application_name": "queryproxy",
            },
        )

    async def _async_cleanup(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        try:
            await connection.close(timeout=CLOSE_TIMEOUT)
        except Exception:
            connection.terminate()
            raise

    def _is_auth_error(self, error: BaseException) -> bool:
        return isinstance(error, asyncpg.InvalidAuthorizationSpecificationError)

    async def _run_query(self, sql: str, parameters: Dict[str, Any]) -> RawRows:
        query, args = to_numeric(sql, parameters)
        async with self._connection.transaction(readonly=True):
            statement = await self._connection.prepare(query)
            records = await statement.fetch(*args)
            columns = [attribute.name for attribute in statement.get_attributes()]
        return RawRows(rows=[dict(record) for record in records], columns=columns)

    async def _run_explain(self, sql: str, parameters: Dict[str, Any]) -> JsonTreePlan:
        query, args = to_numeric(f"EXPLAIN (FORMAT JSON, ANALYZE, BUFFERS) {sql}", parameters)
        async with self._connection.transaction(readonly=True):
            records = await self._connection.fetch(query, *args)
        payload = records[0]["QUERY PLAN"] if records else None
        return JsonTreePlan(payload=payload)

    async def _fetch_server_version(self) -> str:
        return str(await self._connection.fetchval("SELECT version()"))
