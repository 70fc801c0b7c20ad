"""Unit tests for the SQL Server adapter with pymssql mocked out."""

import asyncio
import threading
import time
from unittest.mock import MagicMock, patch

import pymssql
import pytest

from queryproxy.config.models import TimeoutConfig
from queryproxy.core.exceptions import AuthenticationError, ErrorCodes, QueryError, QueryTimeoutError
from queryproxy.database.connectors.mssql import SQLServerAdapter
from queryproxy.database.models import DatabaseEngine
from queryproxy.explain.models import IndentedTextPlan


@pytest.fixture
def cursor():
    cursor = MagicMock()
    cursor.description = (("id", 3), ("", 1))
    cursor.fetchall.return_value = [(1, "x")]
    cursor.fetchone.return_value = ("Microsoft SQL Server 2022 (RTM) - 16.0.1000.6 (X64)\n\tOct  8 2022\n",)
    cursor.nextset.return_value = None
    return cursor


@pytest.fixture
def mssql_connection(cursor):
    connection = MagicMock()
    connection.cursor.return_value = cursor
    return connection


@pytest.fixture
def connect(mssql_connection):
    with patch("pymssql.connect", MagicMock(return_value=mssql_connection)) as connect:
        yield connect


@pytest.fixture
def adapter(make_connection, timeouts):
    return SQLServerAdapter(make_connection(DatabaseEngine.MSSQL), timeouts=timeouts)


async def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        assert time.monotonic() < deadline, "condition not met in time"
        await asyncio.sleep(0.01)


class TestSQLServerAdapter:

    @pytest.mark.asyncio
    async def test_connect(self, adapter, connect, mssql_connection):
        await adapter.execute("SELECT 1")

        kwargs = connect.call_args.kwargs
        assert kwargs["server"] == "db.internal"
        assert kwargs["port"] == "1433"
        assert kwargs["login_timeout"] == 9
        assert kwargs["timeout"] == 29
        mssql_connection.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_unnamed_columns(self, adapter, connect):
        outcome = await adapter.execute("SELECT id, 'x' FROM t")

        assert outcome.columns == ["id", "column_2"]
        assert outcome.rows == [{"id": 1, "column_2": "x"}]

    @pytest.mark.asyncio
    async def test_parameters(self, adapter, connect, cursor):
        await adapter.execute("SELECT id FROM t WHERE id = :id", parameters={"id": 4})

        cursor.execute.assert_called_once_with("SELECT id FROM t WHERE id = %(id)s", {"id": 4})

    @pytest.mark.asyncio
    async def test_showplan_toggled_around_statement(self, adapter, connect, cursor):
        cursor.description = (("StmtText",),)
        cursor.fetchall.return_value = [("SELECT * FROM t",), ("  |--Table Scan(OBJECT:([t]))",)]

        outcome = await adapter.execute("SELECT * FROM t", explain_only=True)

        assert outcome == IndentedTextPlan(
            payload=[{"StmtText": "SELECT * FROM t"}, {"StmtText": "  |--Table Scan(OBJECT:([t]))"}]
        )
        assert [call.args[0] for call in cursor.execute.call_args_list] == [
            "SET SHOWPLAN_TEXT ON",
            "SELECT * FROM t",
            "SET SHOWPLAN_TEXT OFF",
        ]

    @pytest.mark.asyncio
    async def test_showplan_reset_after_failure(self, adapter, connect, cursor):
        def execute(sql, *args):
            if not sql.startswith("SET"):
                raise pymssql.ProgrammingError("Invalid object name 'missing'.")

        cursor.execute.side_effect = execute

        with pytest.raises(QueryError):
            await adapter.execute("SELECT * FROM missing", explain_only=True)

        assert cursor.execute.call_args_list[-1].args[0] == "SET SHOWPLAN_TEXT OFF"
        cursor.close.assert_called()

    @pytest.mark.asyncio
    async def test_server_version_first_line(self, adapter, connect):
        result = await adapter.test_connection()

        assert result.server_version == "Microsoft SQL Server 2022 (RTM) - 16.0.1000.6 (X64)"

    @pytest.mark.asyncio
    async def test_login_failed(self, adapter):
        error = pymssql.OperationalError(18456, b"Login failed for user 'reader'.")

        with patch("pymssql.connect", MagicMock(side_effect=error)):
            with pytest.raises(AuthenticationError) as exc_info:
                await adapter.execute("SELECT 1")

        assert exc_info.value.code == ErrorCodes.AUTH_FAILED

    @pytest.mark.asyncio
    async def test_driver_deadlines_never_below_one_second(self, make_connection, connect):
        adapter = SQLServerAdapter(
            make_connection(DatabaseEngine.MSSQL),
            timeouts=TimeoutConfig(connect_timeout=0.5, query_timeout=1.5),
        )

        await adapter.execute("SELECT 1")

        assert connect.call_args.kwargs["login_timeout"] == 1
        assert connect.call_args.kwargs["timeout"] == 1


class TestSQLServerWorkerThreads:

    @pytest.mark.asyncio
    async def test_late_connection_closed_after_connect_timeout(self, make_connection, mssql_connection):
        release = threading.Event()

        def slow_connect(**kwargs):
            release.wait(5)
            return mssql_connection

        adapter = SQLServerAdapter(
            make_connection(DatabaseEngine.MSSQL),
            timeouts=TimeoutConfig(connect_timeout=0.05, query_timeout=5),
        )

        with patch("pymssql.connect", MagicMock(side_effect=slow_connect)):
            with pytest.raises(QueryTimeoutError) as exc_info:
                await adapter.execute("SELECT 1")
            mssql_connection.close.assert_not_called()

            release.set()
            await wait_until(lambda: mssql_connection.close.called)

        assert exc_info.value.code == ErrorCodes.CONNECTION_TIMEOUT
        mssql_connection.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_connection_closed_only_after_running_statement_returns(
        self, make_connection, connect, mssql_connection, cursor
    ):
        release = threading.Event()
        cursor.execute.side_effect = lambda *args: release.wait(5)
        adapter = SQLServerAdapter(
            make_connection(DatabaseEngine.MSSQL),
            timeouts=TimeoutConfig(connect_timeout=5, query_timeout=0.05),
        )

        with pytest.raises(QueryTimeoutError) as exc_info:
            await adapter.execute("SELECT 1")
        assert exc_info.value.code == ErrorCodes.QUERY_TIMEOUT
        mssql_connection.close.assert_not_called()

        release.set()
        await wait_until(lambda: mssql_connection.close.called)

        cursor.close.assert_called_once()
        mssql_connection.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_statement_after_timeout_still_closes(
        self, make_connection, connect, mssql_connection, cursor
    ):
        release = threading.Event()

        def failing_execute(*args):
            release.wait(5)
            raise pymssql.OperationalError("connection reset")

        cursor.execute.side_effect = failing_execute
        adapter = SQLServerAdapter(
            make_connection(DatabaseEngine.MSSQL),
            timeouts=TimeoutConfig(connect_timeout=5, query_timeout=0.05),
        )

        with pytest.raises(QueryTimeoutError):
            await adapter.execute("SELECT 1")

        release.set()
        await wait_until(lambda: mssql_connection.close.called)
