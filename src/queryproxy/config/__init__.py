"""QueryProxy configuration management.

Classes:
    ProxyConfig: Top-level configuration
    TimeoutConfig: Connect and execution deadlines
    LimitsConfig: Result size limits
    LoggingConfig: Logging configuration
    ServerConfig: HTTP server configuration

Example:
    >>> from queryproxy.config import ProxyConfig
    >>> config = ProxyConfig.load()
"""

from .models import (
    BaseConfig,
    LimitsConfig,
    LoggingConfig,
    ProxyConfig,
    ServerConfig,
    TimeoutConfig,
)

__all__ = [
    "BaseConfig",
    "LimitsConfig",
    "LoggingConfig",
    "ProxyConfig",
    "ServerConfig",
    "TimeoutConfig",
]
