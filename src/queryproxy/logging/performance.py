"""Performance logging for QueryProxy operations.

Classes:
    TimingMetrics: A single timing measurement
    TimingContext: Context manager for operation timing
    PerformanceLogger: Main performance logging interface

Example:
    >>> perf_logger = PerformanceLogger("dispatcher")
    >>> with perf_logger.measure("execute", engine="mysql") as timer:
    ...     outcome = await adapter.execute(sql)
    >>> timer.duration_ms
    12.4
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Optional

from .structured import StructuredLogger


@dataclass
class TimingMetrics:
    """Metrics for a single timing measurement.

    Attributes:
        operation: Operation name
        start_time: ``perf_counter`` value at start
        end_time: ``perf_counter`` value at completion
        duration: Duration in seconds
        metadata: Additional metadata
        success: Whether operation succeeded
        error: Error type name if failed
    """
    operation: str
    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error: Optional[str] = None

    def complete(self, success: bool = True, error: Optional[str] = None) -> None:
        self.end_time = time.perf_counter()
        self.duration = self.end_time - self.start_time
        self.success = success
        self.error = error

    @property
    def duration_ms(self) -> Optional[float]:
        return self.duration * 1000 if self.duration is not None else None

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None


class TimingContext:
    """Context manager for measuring operation timing.

    Works inside coroutines as well: the clock keeps running across
    ``await`` points within the block.

    Example:
        >>> with TimingContext("explain") as timer:
        ...     plan = await adapter.execute(sql, explain_only=True)
        >>> print(f"took {timer.duration_ms:.2f}ms")
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[StructuredLogger] = None,
        metadata: Optional[Dict[str, Any]] = None,
        auto_log: bool = True,
    ) -> None:
        self.operation = operation
        self.logger = logger
        self.metadata = metadata or {}
        self.auto_log = auto_log
        self._timing: Optional[TimingMetrics] = None

    @property
    def timing(self) -> Optional[TimingMetrics]:
        return self._timing

    @property
    def duration(self) -> Optional[float]:
        return self._timing.duration if self._timing else None

    @property
    def duration_ms(self) -> Optional[float]:
        return self._timing.duration_ms if self._timing else None

    def elapsed_ms(self) -> float:
        """Milliseconds elapsed so far, whether or not the block has exited."""
        if self._timing is None:
            return 0.0
        if self._timing.duration is not None:
            return self._timing.duration * 1000
        return (time.perf_counter() - self._timing.start_time) * 1000

    def __enter__(self) -> "TimingContext":
        self._timing = TimingMetrics(
            operation=self.operation,
            start_time=time.perf_counter(),
            metadata=self.metadata,
        )
        if self.logger and self.auto_log:
            self.logger.debug("Operation started", operation=self.operation, **self.metadata)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._timing is None:
            return

        success = exc_type is None
        error = exc_type.__name__ if exc_type else None
        self._timing.complete(success=success, error=error)

        if self.logger and self.auto_log:
            if success:
                self.logger.info(
                    "Operation completed",
                    operation=self.operation,
                    duration_ms=self._timing.duration_ms,
                    success=True,
                    **self.metadata,
                )
            else:
                # Exception text may carry driver output; only the type is logged here.
                self.logger.warning(
                    "Operation failed",
                    operation=self.operation,
                    duration_ms=self._timing.duration_ms,
                    success=False,
                    error_type=error,
                    **self.metadata,
                )


class PerformanceLogger:
    """Performance logger for timing operations.

    Each ``measure()`` call yields its own ``TimingContext``. The logger
    keeps no state between calls.

    Attributes:
        name: Logger name
        logger: Underlying structured logger

    Example:
        >>> perf_logger = PerformanceLogger("dispatcher")
        >>> with perf_logger.measure("execute") as timer:
        ...     ...
        >>> timer.duration_ms
        0.8
    """

    def __init__(
        self,
        name: str,
        *,
        auto_log: bool = True,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self.name = name
        self.auto_log = auto_log
        self.logger = logger or StructuredLogger(f"perf.{name}")

    @contextmanager
    def measure(self, operation: str, **metadata: Any) -> Generator[TimingContext, None, None]:
        """Context manager for measuring operation performance.

        Args:
            operation: Operation name
            **metadata: Additional metadata

        Yields:
            TimingContext for the operation
        """
        timing_context = TimingContext(
            operation=operation,
            logger=self.logger if self.auto_log else None,
            metadata=metadata,
            auto_log=self.auto_log,
        )
        with timing_context as ctx:
            yield ctx

    def __repr__(self) -> str:
        return f"PerformanceLogger(name={self.name!r}, auto_log={self.auto_log})"
