"""SQL Server engine adapter built on pymssql.

pymssql is blocking, so every driver call runs in a worker thread via
``asyncio.to_thread``. A timed-out await does not stop its thread, so the
driver's own deadlines are set one second below the client-side ones, and
a connection is never closed while a worker thread is still using it.
"""

import asyncio
import functools
import math
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import pymssql

from ...explain.models import IndentedTextPlan
from ..base import BaseEngineAdapter
from ..models import ConnectionInfo, DatabaseEngine, RawRows
from ..params import to_pyformat

LOGIN_FAILED = 18456

T = TypeVar("T")


def _driver_seconds(deadline: float) -> int:
    # pymssql takes whole seconds; stay under the client-side deadline.
    return max(math.ceil(deadline) - 1, 1)


def _column_names(description: Sequence[Sequence[Any]]) -> List[str]:
    # SQL Server allows unnamed expressions such as ``SELECT 1``.
    return [column[0] or f"column_{index}" for index, column in enumerate(description, start=1)]


class SQLServerAdapter(BaseEngineAdapter):
    """SQL Server adapter.

    EXPLAIN toggles ``SHOWPLAN_TEXT`` on the session, collects every
    result set the statement yields, and switches it off again even if
    the statement failed.
    """

    component_name = "SQLServerAdapter"
    version = "1.0.0"
    engine = DatabaseEngine.MSSQL

    def __init__(self, config: ConnectionInfo, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self._connection: Optional["pymssql.Connection"] = None
        self._worker: Optional["asyncio.Future[Any]"] = None

    def _connect_sync(self) -> "pymssql.Connection":
        return pymssql.connect(
            server=self.config.host,
            port=str(self.config.port),
            user=self.config.username,
            password=self.config.password,
            database=self.config.database_name,
            login_timeout=_driver_seconds(self.connect_timeout),
            timeout=_driver_seconds(self.query_timeout),
            appname="queryproxy",
            autocommit=True,
        )

    def _close_sync(self, connection: "pymssql.Connection") -> None:
        try:
            connection.close()
        except pymssql.Error as e:
            self.logger.warning("Could not close connection", error_type=type(e).__name__)

    def _schedule_close(self, connection: "pymssql.Connection") -> None:
        asyncio.get_running_loop().run_in_executor(None, self._close_sync, connection)

    def _close_late_connection(self, worker: "asyncio.Future[Any]") -> None:
        # The connect thread finished after its caller gave up.
        if worker.cancelled() or worker.exception() is not None:
            return
        self._schedule_close(worker.result())

    def _close_after_worker(self, connection: "pymssql.Connection", worker: "asyncio.Future[Any]") -> None:
        # The caller already reported a timeout; only the outcome is consumed here.
        if not worker.cancelled():
            worker.exception()
        self._schedule_close(connection)

    async def _in_worker(self, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking driver call in a thread that outlives cancellation.

        The worker is shielded so a client-side timeout leaves it running;
        it stays recorded in ``_worker`` until it returns.
        """
        worker = asyncio.ensure_future(asyncio.to_thread(func, *args))
        self._worker = worker
        result = await asyncio.shield(worker)
        self._worker = None
        return result

    async def _connect(self) -> None:
        worker = asyncio.ensure_future(asyncio.to_thread(self._connect_sync))
        try:
            self._connection = await asyncio.shield(worker)
        except asyncio.CancelledError:
            worker.add_done_callback(self._close_late_connection)
            raise

    async def _async_cleanup(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        worker, self._worker = self._worker, None
        if worker is not None and not worker.done():
            # A driver call still owns the connection; close it once that returns.
            worker.add_done_callback(functools.partial(self._close_after_worker, connection))
            return
        await asyncio.to_thread(self._close_sync, connection)

    def _is_auth_error(self, error: BaseException) -> bool:
        if not isinstance(error, pymssql.OperationalError):
            return False
        return str(LOGIN_FAILED) in str(error) or "Login failed" in str(error)

    def _query_sync(
        self, connection: "pymssql.Connection", sql: str, parameters: Optional[Dict[str, Any]]
    ) -> RawRows:
        cursor = connection.cursor()
        try:
            if parameters:
                cursor.execute(sql, parameters)
            else:
                cursor.execute(sql)
            if not cursor.description:
                return RawRows(rows=[], columns=[])
            columns = _column_names(cursor.description)
            rows = [dict(zip(columns, record)) for record in cursor.fetchall()]
        finally:
            cursor.close()
        return RawRows(rows=rows, columns=columns)

    def _showplan_sync(
        self, connection: "pymssql.Connection", sql: str, parameters: Optional[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        cursor = connection.cursor()
        plan_rows: List[Dict[str, Any]] = []
        try:
            cursor.execute("SET SHOWPLAN_TEXT ON")
            try:
                if parameters:
                    cursor.execute(sql, parameters)
                else:
                    cursor.execute(sql)
                while True:
                    if cursor.description:
                        columns = _column_names(cursor.description)
                        plan_rows.extend(dict(zip(columns, record)) for record in cursor.fetchall())
                    if not cursor.nextset():
                        break
            finally:
                try:
                    cursor.execute("SET SHOWPLAN_TEXT OFF")
                except pymssql.Error as e:
                    # The connection is discarded after this request anyway.
                    self.logger.warning("Could not reset SHOWPLAN_TEXT", error_type=type(e).__name__)
        finally:
            cursor.close()
        return plan_rows

    async def _run_query(self, sql: str, parameters: Dict[str, Any]) -> RawRows:
        query, args = to_pyformat(sql, parameters)
        return await self._in_worker(self._query_sync, self._connection, query, args)

    async def _run_explain(self, sql: str, parameters: Dict[str, Any]) -> IndentedTextPlan:
        query, args = to_pyformat(sql, parameters)
        rows = await self._in_worker(self._showplan_sync, self._connection, query, args)
        return IndentedTextPlan(payload=rows)

    def _version_sync(self, connection: "pymssql.Connection") -> str:
        cursor = connection.cursor()
        try:
            cursor.execute("SELECT @@VERSION")
            row = cursor.fetchone()
        finally:
            cursor.close()
        banner = str(row[0]) if row else "SQL Server"
        return banner.split("\n", 1)[0].strip()

    async def _fetch_server_version(self) -> str:
        return await self._in_worker(self._version_sync, self._connection)
