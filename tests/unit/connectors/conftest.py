"""Fixtures for connector tests."""

import pytest

from queryproxy.config.models import TimeoutConfig


@pytest.fixture
def timeouts():
    return TimeoutConfig(connect_timeout=10, query_timeout=30)
