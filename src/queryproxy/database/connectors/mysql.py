"""MySQL engine adapter built on aiomysql."""

from typing import Any, Dict, Optional

import aiomysql

from ...explain.models import FlatRowsPlan
from ..base import BaseEngineAdapter
from ..models import ConnectionInfo, DatabaseEngine, RawRows
from ..params import to_pyformat

# ER_ACCESS_DENIED_ERROR, ER_DBACCESS_DENIED_ERROR
AUTH_ERROR_CODES = frozenset({1044, 1045})


class MySQLAdapter(BaseEngineAdapter):
    """MySQL adapter.

    ``MAX_EXECUTION_TIME`` is set for the session right after connecting,
    so the server aborts long SELECTs on its own.
    """

    component_name = "MySQLAdapter"
    version = "1.0.0"
    engine = DatabaseEngine.MYSQL

    def __init__(self, config: ConnectionInfo, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self._connection: Optional["aiomysql.Connection"] = None

    async def _connect(self) -> None:
        self._connection = await aiomysql.connect(
            host=self.config.host,
            port=self.config.port,
            user=self.config.username,
            password=self.config.password,
            db=self.config.database_name,
            connect_timeout=self.connect_timeout,
            charset="utf8mb4",
            autocommit=True,
        )
        async with self._connection.cursor() as cursor:
            await cursor.execute(f"SET SESSION MAX_EXECUTION_TIME={self.query_timeout_ms}")

    async def _async_cleanup(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        try:
            await connection.ensure_closed()
        finally:
            connection.close()

    def _is_auth_error(self, error: BaseException) -> bool:
        return (
            isinstance(error, aiomysql.OperationalError)
            and bool(error.args)
            and error.args[0] in AUTH_ERROR_CODES
        )

    async def _run_query(self, sql: str, parameters: Dict[str, Any]) -> RawRows:
        query, args = to_pyformat(sql, parameters)
        async with self._connection.cursor(aiomysql.DictCursor) as cursor:
            await cursor.execute(query, args)
            columns = [column[0] for column in cursor.description] if cursor.description else None
            rows = await cursor.fetchall()
        return RawRows(rows=list(rows or []), columns=columns)

    async def _run_explain(self, sql: str, parameters: Dict[str, Any]) -> FlatRowsPlan:
        query, args = to_pyformat(f"EXPLAIN {sql}", parameters)
        async with self._connection.cursor(aiomysql.DictCursor) as cursor:
            await cursor.execute(query, args)
            rows = await cursor.fetchall()
        return FlatRowsPlan(payload=list(rows or []))

    async def _fetch_server_version(self) -> str:
        async with self._connection.cursor() as cursor:
            await cursor.execute("SELECT VERSION()")
            row = await cursor.fetchone()
        return f"MySQL {row[0] if row else 'unknown'}"
