"""Base classes for QueryProxy components.

Classes:
    BaseComponent: Generic base class holding configuration
    AsyncComponent: Base class for components that own an async resource

Example:
    >>> class PostgreSQLAdapter(AsyncComponent[ConnectionInfo]):
    ...     async def _async_initialize(self) -> None:
    ...         self._connection = await asyncpg.connect(...)
    ...     async def _async_cleanup(self) -> None:
    ...         ...
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, ClassVar, Generic, TypeVar

import structlog

from .exceptions import ConfigurationError, QueryProxyException

# Configuration type
T = TypeVar("T")


class BaseComponent(Generic[T], ABC):
    """Base class for all QueryProxy components.

    Type Parameters:
        T: Type of configuration object this component accepts

    Attributes:
        component_name: Name of the component for logging and identification
        version: Component version
    """

    component_name: ClassVar[str] = "BaseComponent"
    version: ClassVar[str] = "1.0.0"

    def __init__(self, config: T) -> None:
        """Initialize base component.

        Args:
            config: Configuration object for this component

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        if config is None:
            raise ConfigurationError(
                "Configuration cannot be None",
                code="CONFIG_NULL",
                context={"component": self.component_name},
            )

        self._config: T = config
        self._initialized: bool = False
        self._logger = structlog.get_logger(self.__class__.__name__)

        if not self.validate_config():
            raise ConfigurationError(
                f"Invalid configuration for {self.component_name}",
                code="CONFIG_INVALID",
                context={"component": self.component_name},
            )

    @property
    def config(self) -> T:
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def validate_config(self) -> bool:
        """Validate component configuration.

        Subclasses override this for component-specific checks.
        """
        return self._config is not None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"name={self.component_name!r}, "
            f"initialized={self._initialized})"
        )


class AsyncComponent(BaseComponent[T]):
    """Base class for components that acquire an async resource.

    ``cleanup`` always runs the subclass's ``_async_cleanup``, even after
    a failed or partial ``initialize``, so ``_async_cleanup`` must be
    idempotent and tolerate a half-open resource. Errors raised while
    releasing are logged and never propagated.
    """

    def __init__(self, config: T) -> None:
        super().__init__(config)
        self._initialization_lock = asyncio.Lock()
        self._cleanup_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize component asynchronously.

        Raises:
            QueryProxyException: If initialization fails. QueryProxy
                exceptions raised by the subclass propagate unchanged.
        """
        async with self._initialization_lock:
            if self._initialized:
                return

            self._logger.debug("Initializing component", component=self.component_name)
            try:
                await self._async_initialize()
            except QueryProxyException:
                raise
            except Exception as e:
                self._logger.error(
                    "Component initialization failed",
                    component=self.component_name,
                    error_type=type(e).__name__,
                )
                raise QueryProxyException(
                    f"Failed to initialize {self.component_name}",
                    code="INIT_FAILED",
                    context={"component": self.component_name},
                    cause=e,
                ) from e

            self._initialized = True
            self._logger.debug("Component initialized", component=self.component_name)

    async def cleanup(self) -> None:
        """Release component resources. Never raises."""
        async with self._cleanup_lock:
            try:
                await self._async_cleanup()
            except Exception as e:
                self._logger.warning(
                    "Component cleanup failed",
                    component=self.component_name,
                    error_type=type(e).__name__,
                )
                # Don't raise during cleanup to avoid masking original errors
            finally:
                self._initialized = False

    @abstractmethod
    async def _async_initialize(self) -> None:
        """Acquire the component's resource."""

    async def _async_cleanup(self) -> None:
        """Release the component's resource. Must be idempotent."""

    @asynccontextmanager
    async def managed_lifecycle(self) -> AsyncGenerator["AsyncComponent[T]", None]:
        """Initialize on entry and always clean up on exit.

        Example:
            >>> async with adapter.managed_lifecycle() as live:
            ...     rows = await live.run(...)
        """
        try:
            await self.initialize()
            yield self
        finally:
            await self.cleanup()

    async def __aenter__(self) -> "AsyncComponent[T]":
        try:
            await self.initialize()
        except BaseException:
            await self.cleanup()
            raise
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.cleanup()
