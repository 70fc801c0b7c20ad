"""Tests for performance logging."""

import pytest
from structlog.testing import capture_logs

from queryproxy.logging.performance import PerformanceLogger, TimingContext


class TestTimingContext:

    def test_measures_duration(self):
        with TimingContext("op") as timer:
            assert timer.elapsed_ms() >= 0

        assert timer.timing.success
        assert timer.duration_ms is not None
        assert timer.elapsed_ms() == pytest.approx(timer.duration_ms)

    def test_records_failure_type(self):
        with pytest.raises(ValueError):
            with TimingContext("op") as timer:
                raise ValueError("password=hunter2")

        assert not timer.timing.success
        assert timer.timing.error == "ValueError"

    def test_failure_log_omits_exception_text(self):
        perf_logger = PerformanceLogger("test")

        with capture_logs() as logs:
            with pytest.raises(RuntimeError):
                with perf_logger.measure("execute", engine="mysql"):
                    raise RuntimeError("login failed for hunter2")

        failure = logs[-1]
        assert failure["event"] == "Operation failed"
        assert failure["error_type"] == "RuntimeError"
        assert failure["engine"] == "mysql"
        assert "hunter2" not in str(failure)


class TestPerformanceLogger:

    def test_each_measure_gets_its_own_timer(self):
        perf_logger = PerformanceLogger("test", auto_log=False)

        with perf_logger.measure("execute") as first:
            pass
        with pytest.raises(KeyError):
            with perf_logger.measure("execute") as second:
                raise KeyError("x")

        assert first is not second
        assert first.timing.success
        assert not second.timing.success

    def test_keeps_no_state_between_calls(self):
        perf_logger = PerformanceLogger("test", auto_log=False)
        before = dict(vars(perf_logger))

        for _ in range(50):
            with perf_logger.measure("execute"):
                pass

        assert vars(perf_logger) == before

    def test_auto_log_off_emits_nothing(self):
        perf_logger = PerformanceLogger("test", auto_log=False)

        with capture_logs() as logs:
            with perf_logger.measure("quiet"):
                pass

        assert logs == []
