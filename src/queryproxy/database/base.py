"""Engine adapter base class.

An adapter owns exactly one live connection for the duration of one
request. ``execute`` and ``test_connection`` open it, run, and always
close it again, so callers never see the connection handle.

Classes:
    BaseEngineAdapter: Common execute/test flow, timeouts and error mapping

Example:
    >>> adapter = PostgreSQLAdapter(connection_info, timeouts=TimeoutConfig())
    >>> outcome = await adapter.execute("SELECT 1")
    >>> outcome.rows
    [{'?column?': 1}]
"""

import asyncio
from contextlib import asynccontextmanager
from abc import abstractmethod
from typing import Any, AsyncGenerator, ClassVar, Dict, Mapping, Optional

from ..config.models import TimeoutConfig
from ..core.base import AsyncComponent
from ..core.exceptions import (
    AuthenticationError,
    DatabaseConnectionError,
    ErrorCodes,
    QueryError,
    QueryProxyException,
    QueryTimeoutError,
)
from ..core.utils import redact_secret
from ..explain.models import RawPlan
from ..logging import get_logger
from ..validation.sql import strip_explain_prefix, validate_sql
from .models import AdapterOutcome, ConnectionInfo, ConnectionTestResult, DatabaseEngine, RawRows


def _strip_terminator(sql: str) -> str:
    return sql.strip().rstrip(";").rstrip()


class BaseEngineAdapter(AsyncComponent[ConnectionInfo]):
    """Common behaviour for all engine adapters.

    Subclasses implement the driver-specific hooks:

    - ``_connect``: open one connection and apply engine-side timeouts
    - ``_async_cleanup``: close it; must be idempotent
    - ``_run_query``: execute a statement and return ``RawRows``
    - ``_run_explain``: return the engine's raw plan variant
    - ``_fetch_server_version``: return a version string
    - ``_is_auth_error``: recognise a credentials failure

    Every timeout is enforced twice: engine-side where the driver allows
    it, and client-side with ``asyncio.wait_for``.
    """

    component_name: ClassVar[str] = "BaseEngineAdapter"
    engine: ClassVar[DatabaseEngine]

    def __init__(
        self,
        config: ConnectionInfo,
        *,
        timeouts: Optional[TimeoutConfig] = None,
    ) -> None:
        """Initialize adapter.

        Args:
            config: Connection address and credentials
            timeouts: Connect and execution deadlines
        """
        super().__init__(config)
        self.timeouts = timeouts or TimeoutConfig()
        self.logger = get_logger(f"connector.{self.engine.value}").bind(
            host=config.host,
            port=config.port,
            database=config.database_name,
        )

    def validate_config(self) -> bool:
        return self._config.engine == self.engine

    @property
    def connect_timeout(self) -> float:
        return self.timeouts.connect_timeout

    @property
    def query_timeout(self) -> float:
        return self.timeouts.query_timeout

    @property
    def query_timeout_ms(self) -> int:
        return int(self.timeouts.query_timeout * 1000)

    def scrub(self, text: str) -> str:
        """Remove the connection password from ``text``."""
        return redact_secret(text, [self._config.password])

    def _error_text(self, error: BaseException) -> str:
        return self.scrub(str(error) or type(error).__name__)

    def _error_context(self) -> Dict[str, Any]:
        return {
            "engine": self.engine.value,
            "host": self._config.host,
            "port": self._config.port,
        }

    # Lifecycle

    async def _async_initialize(self) -> None:
        try:
            await asyncio.wait_for(self._connect(), timeout=self.connect_timeout)
        except asyncio.TimeoutError as e:
            raise QueryTimeoutError(
                f"Connection timed out after {self.connect_timeout:g}s",
                timeout=self.connect_timeout,
                code=ErrorCodes.CONNECTION_TIMEOUT,
                context=self._error_context(),
            ) from e
        except QueryProxyException:
            raise
        except Exception as e:
            if self._is_auth_error(e):
                raise AuthenticationError(
                    self._error_text(e),
                    code=ErrorCodes.AUTH_FAILED,
                    context=self._error_context(),
                ) from e
            raise DatabaseConnectionError(
                self._error_text(e),
                code=ErrorCodes.CONNECTION_FAILED,
                context=self._error_context(),
            ) from e
        self.logger.debug("Connection opened")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator["BaseEngineAdapter", None]:
        """Open the connection for the block and always close it afterwards."""
        async with self.managed_lifecycle():
            yield self

    # Operations

    async def execute(
        self,
        sql: str,
        *,
        explain_only: bool = False,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> AdapterOutcome:
        """Validate, open, run and close.

        Args:
            sql: Statement to run
            explain_only: Return the engine's plan instead of rows
            parameters: Named bind values for ``:name`` placeholders

        Returns:
            ``RawRows`` or, in explain mode, a raw plan variant

        Raises:
            SQLValidationError: If the statement fails the read-only policy
            ConnectionError: If the connection cannot be opened
            QueryTimeoutError: If connect or execution exceeds its deadline
            QueryError: If the engine rejects the statement
        """
        validate_sql(sql)
        statement = _strip_terminator(strip_explain_prefix(sql) if explain_only else sql)
        parameters = dict(parameters or {})

        async with self.session():
            if explain_only:
                operation = self._run_explain(statement, parameters)
            else:
                operation = self._run_query(statement, parameters)
            try:
                return await asyncio.wait_for(operation, timeout=self.query_timeout)
            except asyncio.TimeoutError as e:
                raise QueryTimeoutError(
                    f"Query timed out after {self.query_timeout:g}s",
                    timeout=self.query_timeout,
                    code=ErrorCodes.QUERY_TIMEOUT,
                    context=self._error_context(),
                ) from e
            except QueryProxyException:
                raise
            except Exception as e:
                raise QueryError(
                    self._error_text(e),
                    context={**self._error_context(), "driver_error": type(e).__name__},
                ) from e

    async def test_connection(self) -> ConnectionTestResult:
        """Open a connection and report the server version. Never raises."""
        try:
            async with self.session():
                version = await asyncio.wait_for(
                    self._fetch_server_version(),
                    timeout=self.query_timeout,
                )
        except QueryProxyException as e:
            self.logger.info("Connection test failed", error_code=e.code)
            return ConnectionTestResult(
                success=False,
                message=f"Connection failed: {e.message}",
                error_code=e.code,
            )
        except asyncio.TimeoutError:
            self.logger.info("Connection test timed out")
            return ConnectionTestResult(
                success=False,
                message=f"Connection failed: version probe timed out after {self.query_timeout:g}s",
                error_code=ErrorCodes.QUERY_TIMEOUT,
            )
        except Exception as e:
            self.logger.info("Connection test failed", error_type=type(e).__name__)
            return ConnectionTestResult(
                success=False,
                message=f"Connection failed: {self._error_text(e)}",
                error_code=ErrorCodes.CONNECTION_FAILED,
            )

        return ConnectionTestResult(
            success=True,
            message="Connection successful",
            server_version=version,
        )

    # Driver hooks

    @abstractmethod
    async def _connect(self) -> None:
        """Open the connection and store the handle on the adapter."""

    @abstractmethod
    async def _run_query(self, sql: str, parameters: Dict[str, Any]) -> RawRows:
        """Execute ``sql`` and materialize all rows."""

    @abstractmethod
    async def _run_explain(self, sql: str, parameters: Dict[str, Any]) -> RawPlan:
        """Produce the engine's native plan for ``sql``."""

    @abstractmethod
    async def _fetch_server_version(self) -> str:
        """Return the server's version banner."""

    def _is_auth_error(self, error: BaseException) -> bool:
        return False
