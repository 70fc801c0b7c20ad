"""Logger factory and configuration for QueryProxy.

Classes:
    LoggerFactory: Logger creation and configuration manager

Functions:
    configure_logging: Configure logging system globally
    get_logger: Convenience function for getting loggers
    get_performance_logger: Convenience function for performance loggers

Example:
    >>> from queryproxy.logging import configure_logging, get_logger
    >>> configure_logging(LoggingConfig(level="INFO", format="json"))
    >>> logger = get_logger(__name__)
    >>> logger.info("Proxy started", port=3001)
"""

import logging
import sys
from typing import Any, Dict, List, Optional

import structlog

from ..config.models import LoggingConfig
from .formatters import get_formatter
from .performance import PerformanceLogger
from .structured import StructuredLogger, redact_secrets


class LoggerFactory:
    """Factory for creating and configuring QueryProxy loggers.

    Loggers can be created before configuration: structlog resolves its
    configuration lazily on first use.

    Example:
        >>> factory = LoggerFactory()
        >>> factory.configure(LoggingConfig(format="text"))
        >>> logger = factory.get_logger("api")
    """

    def __init__(self, config: Optional[LoggingConfig] = None) -> None:
        self.config = config or LoggingConfig()
        self.initialized = False
        self._loggers: Dict[str, StructuredLogger] = {}
        self._performance_loggers: Dict[str, PerformanceLogger] = {}

    def configure(self, config: Optional[LoggingConfig] = None, *, force: bool = False) -> None:
        """Configure stdlib logging and structlog.

        When structlog was already configured elsewhere (tests capture
        events this way) its processors are left alone unless ``force``.

        Args:
            config: Logging configuration, defaults to the current one
            force: Reconfigure even if already configured
        """
        if config is not None:
            self.config = config
        if self.initialized and not force:
            return

        self._configure_stdlib_logging()
        if force or not structlog.is_configured():
            self._configure_structlog()
        self.initialized = True

    def _configure_stdlib_logging(self) -> None:
        level = getattr(logging, self.config.level, logging.INFO)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        handlers: List[logging.Handler] = []
        if self.config.console_output:
            handlers.append(logging.StreamHandler(sys.stdout))
        if self.config.file_path is not None:
            self.config.file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.config.file_path, encoding="utf-8"))

        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(get_formatter(self.config.format))
            root_logger.addHandler(handler)

    def _build_processors(self) -> List[Any]:
        processors: List[Any] = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            redact_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
        if self.config.format == "json":
            processors.append(structlog.processors.JSONRenderer(default=str))
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
        return processors

    def _configure_structlog(self) -> None:
        structlog.configure(
            processors=self._build_processors(),
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    def get_logger(self, name: str) -> StructuredLogger:
        """Get or create a structured logger.

        Args:
            name: Logger name (typically module name)

        Returns:
            StructuredLogger instance
        """
        if name not in self._loggers:
            self._loggers[name] = StructuredLogger(name)
        return self._loggers[name]

    def get_performance_logger(self, name: str, *, auto_log: bool = True) -> PerformanceLogger:
        """Get or create a performance logger.

        Args:
            name: Logger name
            auto_log: Whether to automatically log timing results

        Returns:
            PerformanceLogger instance
        """
        cache_key = f"{name}_{auto_log}"
        if cache_key not in self._performance_loggers:
            self._performance_loggers[cache_key] = PerformanceLogger(
                name=name,
                auto_log=auto_log,
                logger=self.get_logger(f"perf.{name}"),
            )
        return self._performance_loggers[cache_key]

    def shutdown(self) -> None:
        """Drop cached loggers and allow reconfiguration."""
        self._loggers.clear()
        self._performance_loggers.clear()
        self.initialized = False

    def __repr__(self) -> str:
        return (
            f"LoggerFactory("
            f"level={self.config.level!r}, "
            f"format={self.config.format!r}, "
            f"initialized={self.initialized})"
        )


# Global logger factory instance
_global_factory = LoggerFactory()


def configure_logging(config: Optional[LoggingConfig] = None, *, force: bool = False) -> None:
    """Configure QueryProxy logging globally.

    Example:
        >>> configure_logging(LoggingConfig(level="DEBUG", format="text"))
    """
    _global_factory.configure(config, force=force)


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger using the global factory."""
    return _global_factory.get_logger(name)


def get_performance_logger(name: str, *, auto_log: bool = True) -> PerformanceLogger:
    """Get or create a performance logger using the global factory.

    Example:
        >>> perf_logger = get_performance_logger("dispatcher")
        >>> with perf_logger.measure("execute", engine="oracle"):
        ...     ...
    """
    return _global_factory.get_performance_logger(name, auto_log=auto_log)


def get_factory() -> LoggerFactory:
    return _global_factory
