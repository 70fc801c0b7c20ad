"""Request dispatcher: the bridge between the API and the engine adapters.

The dispatcher looks up the adapter for the requested engine, times the
adapter call, and turns whatever happens into a ``QueryResult`` or
``ConnectionTestResult``. It never raises.
"""

from typing import Any, Mapping, Optional

from ..config.models import LimitsConfig, TimeoutConfig
from ..core.exceptions import ErrorCodes, QueryProxyException, UnsupportedEngineError
from ..core.utils import format_duration_ms, to_json_safe
from ..explain import normalize_plan, summarize_plan
from ..logging import get_logger, get_performance_logger
from .models import ConnectionInfo, ConnectionTestResult, QueryResult, RawRows
from .normalizer import normalize_rows
from .registry import EngineAdapterRegistry, create_default_registry

INTERNAL_ERROR_MESSAGE = "Internal server error"


class Dispatcher:
    """Routes requests to the registered engine adapter.

    Example:
        >>> dispatcher = Dispatcher()
        >>> result = await dispatcher.dispatch(connection_info, "SELECT 1")
        >>> result.success
        True
    """

    def __init__(
        self,
        registry: Optional[EngineAdapterRegistry] = None,
        *,
        timeouts: Optional[TimeoutConfig] = None,
        limits: Optional[LimitsConfig] = None,
    ) -> None:
        self.registry = registry if registry is not None else create_default_registry()
        self.timeouts = timeouts or TimeoutConfig()
        self.limits = limits or LimitsConfig()
        self.logger = get_logger("database.dispatcher")
        self.perf_logger = get_performance_logger("dispatcher")

    async def dispatch(
        self,
        connection: ConnectionInfo,
        sql: str,
        *,
        explain_only: bool = False,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> QueryResult:
        """Run ``sql`` on the engine described by ``connection``.

        Args:
            connection: Validated connection info
            sql: Statement to run
            explain_only: Return a normalized plan instead of rows
            parameters: Named bind values

        Returns:
            QueryResult; failures are reported with ``success=False``
        """
        engine = connection.engine.value
        log = self.logger.bind(engine=engine, explain_only=explain_only)

        try:
            adapter = self.registry.create_adapter(connection, timeouts=self.timeouts)
        except UnsupportedEngineError as e:
            log.info("Unsupported engine requested")
            return QueryResult.failure(e.message, error_code=e.code)

        timer = None
        try:
            with self.perf_logger.measure("execute", engine=engine, explain_only=explain_only) as timer:
                outcome = await adapter.execute(sql, explain_only=explain_only, parameters=parameters)
        except QueryProxyException as e:
            log.info("Query failed", error_code=e.code)
            return QueryResult.failure(
                e.message,
                error_code=e.code,
                execution_time_ms=self._elapsed(timer),
            )
        except Exception as e:
            log.error("Unexpected adapter failure", error_type=type(e).__name__)
            return QueryResult.failure(
                INTERNAL_ERROR_MESSAGE,
                error_code=ErrorCodes.INTERNAL_ERROR,
                execution_time_ms=self._elapsed(timer),
            )

        execution_time_ms = self._elapsed(timer)

        if isinstance(outcome, RawRows):
            result = normalize_rows(
                outcome.rows,
                outcome.columns,
                execution_time_ms=execution_time_ms,
                max_rows=self.limits.max_rows,
            )
            log.info(
                "Query executed",
                row_count=result.row_count,
                truncated=result.warning is not None,
                duration_ms=execution_time_ms,
            )
            return result

        plan = normalize_plan(outcome)
        plan.raw_plan = to_json_safe(plan.raw_plan)
        summary = summarize_plan(plan)
        log.info(
            "Plan explained",
            node_count=summary.node_count,
            warning_count=summary.warning_count,
            duration_ms=execution_time_ms,
        )
        return QueryResult(
            success=True,
            explain_plan=plan,
            explain_summary=summary,
            execution_time_ms=execution_time_ms,
        )

    async def test_connection(self, connection: ConnectionInfo) -> ConnectionTestResult:
        """Probe connectivity for ``connection``. Never raises."""
        log = self.logger.bind(engine=connection.engine.value)
        try:
            adapter = self.registry.create_adapter(connection, timeouts=self.timeouts)
        except UnsupportedEngineError as e:
            return ConnectionTestResult(success=False, message=e.message, error_code=e.code)

        try:
            with self.perf_logger.measure("test_connection", engine=connection.engine.value):
                result = await adapter.test_connection()
        except Exception as e:
            log.error("Unexpected connection test failure", error_type=type(e).__name__)
            return ConnectionTestResult(
                success=False,
                message=INTERNAL_ERROR_MESSAGE,
                error_code=ErrorCodes.INTERNAL_ERROR,
            )

        log.info("Connection tested", success=result.success)
        return result

    @staticmethod
    def _elapsed(timer) -> float:
        if timer is None:
            return 0.0
        return format_duration_ms(timer.elapsed_ms())
