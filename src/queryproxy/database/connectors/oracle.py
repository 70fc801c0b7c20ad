"""Oracle engine adapter built on python-oracledb (thin mode, asyncio)."""

import uuid
from typing import Any, Dict, Optional

import oracledb

from ...explain.models import ParentPointerRowsPlan
from ..base import BaseEngineAdapter
from ..models import ConnectionInfo, DatabaseEngine, RawRows
from ..params import to_named

AUTH_ERROR_CODES = frozenset({"ORA-01017", "ORA-01005", "ORA-28000"})

PLAN_TABLE_QUERY = """
SELECT ID, PARENT_ID, OPERATION, OPTIONS, OBJECT_NAME, COST, CARDINALITY, BYTES,
       ACCESS_PREDICATES, FILTER_PREDICATES
  FROM PLAN_TABLE
 WHERE STATEMENT_ID = :statement_id
 ORDER BY ID
"""

_LOB_FETCH_TYPES = {
    oracledb.DB_TYPE_CLOB: oracledb.DB_TYPE_LONG,
    oracledb.DB_TYPE_NCLOB: oracledb.DB_TYPE_LONG_NVARCHAR,
    oracledb.DB_TYPE_BLOB: oracledb.DB_TYPE_LONG_RAW,
}


def fetch_lobs_as_values(cursor: Any, metadata: Any) -> Any:
    """Output type handler returning LOB columns as str/bytes instead of locators."""
    fetch_type = _LOB_FETCH_TYPES.get(metadata.type_code)
    if fetch_type is not None:
        return cursor.var(fetch_type, arraysize=cursor.arraysize)
    return None


class OracleAdapter(BaseEngineAdapter):
    """Oracle adapter.

    The database name is used as the service name in an Easy Connect DSN.
    ``call_timeout`` bounds every round trip on the connection. EXPLAIN
    writes to ``PLAN_TABLE`` under a unique statement id and is rolled
    back afterwards.
    """

    component_name = "OracleAdapter"
    version = "1.0.0"
    engine = DatabaseEngine.ORACLE

    def __init__(self, config: ConnectionInfo, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self._connection: Optional["oracledb.AsyncConnection"] = None

    @property
    def dsn(self) -> str:
        return f"{self.config.host}:{self.config.port}/{self.config.database_name}"

    async def _connect(self) -> None:
        self._connection = await oracledb.connect_async(
            user=self.config.username,
            password=self.config.password,
            dsn=self.dsn,
            tcp_connect_timeout=self.connect_timeout,
        )
        self._connection.call_timeout = self.query_timeout_ms
        self._connection.outputtypehandler = fetch_lobs_as_values

    async def _async_cleanup(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        await connection.close()

    def _is_auth_error(self, error: BaseException) -> bool:
        if not isinstance(error, oracledb.DatabaseError) or not error.args:
            return False
        return getattr(error.args[0], "full_code", None) in AUTH_ERROR_CODES

    async def _run_query(self, sql: str, parameters: Dict[str, Any]) -> RawRows:
        statement, binds = to_named(sql, parameters)
        with self._connection.cursor() as cursor:
            await cursor.execute(statement, binds)
            columns = [column[0] for column in cursor.description] if cursor.description else []
            records = await cursor.fetchall() if cursor.description else []
        return RawRows(rows=[dict(zip(columns, record)) for record in records], columns=columns)

    async def _run_explain(self, sql: str, parameters: Dict[str, Any]) -> ParentPointerRowsPlan:
        # EXPLAIN PLAN does not bind values; placeholders stay unbound.
        statement_id = f"qp_{uuid.uuid4().hex[:24]}"
        try:
            with self._connection.cursor() as cursor:
                await cursor.execute(f"EXPLAIN PLAN SET STATEMENT_ID = '{statement_id}' FOR {sql}")
                await cursor.execute(PLAN_TABLE_QUERY, {"statement_id": statement_id})
                columns = [column[0] for column in cursor.description]
                records = await cursor.fetchall()
        finally:
            await self._connection.rollback()
        return ParentPointerRowsPlan(payload=[dict(zip(columns, record)) for record in records])

    async def _fetch_server_version(self) -> str:
        with self._connection.cursor() as cursor:
            await cursor.execute("SELECT BANNER FROM V$VERSION WHERE ROWNUM = 1")
            row = await cursor.fetchone()
        return str(row[0]) if row else "Oracle"
