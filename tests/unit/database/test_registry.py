"""Unit tests for the engine adapter registry."""

import pytest

from queryproxy.core.exceptions import ConfigurationError, UnsupportedEngineError
from queryproxy.database.connectors import (
    MySQLAdapter,
    OracleAdapter,
    PostgreSQLAdapter,
    SQLServerAdapter,
)
from queryproxy.database.models import DatabaseEngine
from queryproxy.database.registry import EngineAdapterRegistry, create_default_registry


class TestEngineAdapterRegistry:

    def test_register_and_create(self, fake_adapter_class, make_connection):
        registry = EngineAdapterRegistry()
        registry.register_adapter(DatabaseEngine.POSTGRESQL, fake_adapter_class)

        adapter = registry.create_adapter(make_connection())

        assert isinstance(adapter, fake_adapter_class)
        assert registry.is_engine_supported(DatabaseEngine.POSTGRESQL)
        assert registry.get_available_engines() == ["postgresql"]

    def test_rejects_non_adapter(self):
        with pytest.raises(ConfigurationError):
            EngineAdapterRegistry().register_adapter(DatabaseEngine.MYSQL, dict)

    def test_rejects_engine_mismatch(self, fake_adapter_class):
        with pytest.raises(ConfigurationError):
            EngineAdapterRegistry().register_adapter(DatabaseEngine.ORACLE, fake_adapter_class)

    def test_unsupported_engine(self, make_connection):
        with pytest.raises(UnsupportedEngineError) as exc_info:
            EngineAdapterRegistry().create_adapter(make_connection(DatabaseEngine.MSSQL))

        assert exc_info.value.message == "unsupported engine: mssql"

    def test_unregister(self, fake_registry):
        fake_registry.unregister_adapter(DatabaseEngine.POSTGRESQL)
        fake_registry.unregister_adapter(DatabaseEngine.POSTGRESQL)

        assert not fake_registry.is_engine_supported(DatabaseEngine.POSTGRESQL)

    def test_timeouts_reach_adapter(self, fake_registry, make_connection):
        from queryproxy.config.models import TimeoutConfig

        adapter = fake_registry.create_adapter(make_connection(), timeouts=TimeoutConfig(query_timeout=3))

        assert adapter.query_timeout == 3


def test_default_registry_covers_every_engine():
    registry = create_default_registry()

    assert registry.get_available_engines() == ["postgresql", "mysql", "oracle", "mssql"]
    assert registry.get_adapter_class(DatabaseEngine.POSTGRESQL) is PostgreSQLAdapter
    assert registry.get_adapter_class(DatabaseEngine.MYSQL) is MySQLAdapter
    assert registry.get_adapter_class(DatabaseEngine.ORACLE) is OracleAdapter
    assert registry.get_adapter_class(DatabaseEngine.MSSQL) is SQLServerAdapter
