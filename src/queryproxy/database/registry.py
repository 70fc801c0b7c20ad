"""Engine adapter registry.

The registry is the single lookup table from ``DatabaseEngine`` to
adapter class; nothing else in the proxy branches on engine type.
"""

from typing import Dict, List, Optional, Type

from ..config.models import TimeoutConfig
from ..core.exceptions import ConfigurationError, ErrorCodes, UnsupportedEngineError
from ..logging import get_logger
from .base import BaseEngineAdapter
from .models import ConnectionInfo, DatabaseEngine


class EngineAdapterRegistry:
    """Registry of adapter classes keyed by engine.

    Example:
        >>> registry = EngineAdapterRegistry()
        >>> registry.register_adapter(DatabaseEngine.MYSQL, MySQLAdapter)
        >>> adapter = registry.create_adapter(connection_info)
    """

    def __init__(self) -> None:
        self.logger = get_logger("database.registry")
        self._adapters: Dict[DatabaseEngine, Type[BaseEngineAdapter]] = {}

    def register_adapter(
        self,
        engine: DatabaseEngine,
        adapter_class: Type[BaseEngineAdapter],
    ) -> None:
        """Register an adapter class for an engine.

        Args:
            engine: Engine the adapter serves
            adapter_class: Subclass of ``BaseEngineAdapter``

        Raises:
            ConfigurationError: If the class is not an adapter for ``engine``
        """
        if not (isinstance(adapter_class, type) and issubclass(adapter_class, BaseEngineAdapter)):
            raise ConfigurationError(
                f"{adapter_class!r} must extend BaseEngineAdapter",
                code=ErrorCodes.CONFIG_INVALID,
                context={"engine": engine.value},
            )
        if getattr(adapter_class, "engine", None) != engine:
            raise ConfigurationError(
                f"{adapter_class.__name__} does not serve {engine.value}",
                code=ErrorCodes.CONFIG_INVALID,
                context={"engine": engine.value, "class": adapter_class.__name__},
            )

        if engine in self._adapters:
            self.logger.warning(
                "Overriding existing adapter registration",
                engine=engine.value,
                existing_class=self._adapters[engine].__name__,
                new_class=adapter_class.__name__,
            )
        self._adapters[engine] = adapter_class
        self.logger.debug("Engine adapter registered", engine=engine.value, class_name=adapter_class.__name__)

    def unregister_adapter(self, engine: DatabaseEngine) -> None:
        self._adapters.pop(engine, None)

    def get_adapter_class(self, engine: DatabaseEngine) -> Type[BaseEngineAdapter]:
        """Look up the adapter class for an engine.

        Raises:
            UnsupportedEngineError: If nothing is registered for ``engine``
        """
        try:
            return self._adapters[engine]
        except KeyError:
            raise UnsupportedEngineError(getattr(engine, "value", str(engine))) from None

    def create_adapter(
        self,
        connection: ConnectionInfo,
        *,
        timeouts: Optional[TimeoutConfig] = None,
    ) -> BaseEngineAdapter:
        """Instantiate the adapter for ``connection.engine``.

        Raises:
            UnsupportedEngineError: If the engine has no adapter
        """
        adapter_class = self.get_adapter_class(connection.engine)
        return adapter_class(connection, timeouts=timeouts)

    def is_engine_supported(self, engine: DatabaseEngine) -> bool:
        return engine in self._adapters

    def get_available_engines(self) -> List[str]:
        return [engine.value for engine in self._adapters]


def create_default_registry() -> EngineAdapterRegistry:
    """Registry with the PostgreSQL, MySQL, Oracle and SQL Server adapters."""
    from .connectors import MySQLAdapter, OracleAdapter, PostgreSQLAdapter, SQLServerAdapter

    registry = EngineAdapterRegistry()
    for adapter_class in (PostgreSQLAdapter, MySQLAdapter, OracleAdapter, SQLServerAdapter):
        registry.register_adapter(adapter_class.engine, adapter_class)
    return registry
