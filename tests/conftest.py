"""Pytest configuration and shared fixtures for the QueryProxy test suite."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest
import structlog

from queryproxy.database.models import ConnectionInfo, DatabaseEngine

# Capture structlog output instead of writing it during tests. Loggers are
# not cached so ``structlog.testing.capture_logs`` sees every event.
structlog.configure(
    processors=[structlog.testing.LogCapture()],
    logger_factory=structlog.testing.ReturnLoggerFactory(),
    cache_logger_on_first_use=False,
)

SECRET_PASSWORD = "s3cr3t-Pa55"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def connection_payload() -> dict:
    """Connection object as sent by the UI."""
    return {
        "db_type": "postgresql",
        "host": "db.internal",
        "port": 5432,
        "database_name": "analytics",
        "username": "reader",
        "password": SECRET_PASSWORD,
    }


@pytest.fixture
def make_connection():
    """Build a ConnectionInfo for any engine."""
    default_ports = {
        DatabaseEngine.POSTGRESQL: 5432,
        DatabaseEngine.MYSQL: 3306,
        DatabaseEngine.ORACLE: 1521,
        DatabaseEngine.MSSQL: 1433,
    }

    def _make(engine: DatabaseEngine = DatabaseEngine.POSTGRESQL, **overrides) -> ConnectionInfo:
        values = {
            "engine": engine,
            "host": "db.internal",
            "port": default_ports[engine],
            "database_name": "analytics",
            "username": "reader",
            "password": SECRET_PASSWORD,
        }
        values.update(overrides)
        return ConnectionInfo(**values)

    return _make


def pytest_collection_modifyitems(config, items):
    """Mark everything under tests/unit as a unit test."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(config.rootdir) / "tests")
        if test_path.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)
