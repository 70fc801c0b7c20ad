"""Configuration models for QueryProxy.

This module defines Pydantic models for the proxy's runtime settings:
timeouts, result limits, logging and the HTTP server. Values can come
from a YAML file, from environment variables, or both, since string
values support ``${VAR}`` and ``${VAR:default}`` substitution.

Classes:
    BaseConfig: Base configuration class
    TimeoutConfig: Connect and execution deadlines
    LimitsConfig: Result size limits
    LoggingConfig: Logging configuration
    ServerConfig: HTTP server configuration
    ProxyConfig: Top-level configuration

Example:
    >>> config = ProxyConfig.from_file("queryproxy.yaml")
    >>> config.timeouts.query_timeout
    30.0
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt
from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator, model_validator

from ..core.exceptions import ConfigurationError, ErrorCodes

CONFIG_PATH_ENV = "QUERYPROXY_CONFIG"

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _resolve_env(value: Any) -> Any:
    if isinstance(value, str):
        def replace_env_var(match: "re.Match[str]") -> str:
            var_spec = match.group(1)
            if ":" in var_spec:
                var_name, default = var_spec.split(":", 1)
            else:
                var_name, default = var_spec, ""
            return os.getenv(var_name, default)

        return _ENV_PATTERN.sub(replace_env_var, value)
    if isinstance(value, dict):
        return {k: _resolve_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env(item) for item in value]
    return value


class BaseConfig(BaseModel):
    """Base configuration class with common functionality.

    Example:
        >>> class MyConfig(BaseConfig):
        ...     name: str
        ...     value: int = 42
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_environment_variables(cls, values: Any) -> Any:
        """Resolve ``${VAR_NAME}`` and ``${VAR_NAME:default}`` in string values."""
        if isinstance(values, dict):
            return {key: _resolve_env(value) for key, value in values.items()}
        return values

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


class TimeoutConfig(BaseConfig):
    """Connect and execution deadlines, in seconds.

    Both are enforced engine-side where the driver allows it and again
    client-side around the awaited call.
    """

    connect_timeout: PositiveFloat = Field(10.0, description="Connection deadline in seconds")
    query_timeout: PositiveFloat = Field(30.0, description="Execution deadline in seconds")


class LimitsConfig(BaseConfig):
    """Result size limits."""

    max_rows: PositiveInt = Field(1000, description="Maximum rows returned to the client")


class LoggingConfig(BaseConfig):
    """Logging configuration.

    Attributes:
        level: Log level
        format: Log format (json, text)
        file_path: Optional log file path
        console_output: Enable console output
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )
    format: Literal["json", "text"] = Field("json", description="Log format")
    file_path: Optional[Path] = Field(None, description="Log file path")
    console_output: bool = Field(True, description="Enable console output")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class ServerConfig(BaseConfig):
    """HTTP server configuration.

    The port defaults to the ``PORT`` environment variable, then 3001.
    """

    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "3001")),
        ge=1,
        le=65535,
        description="Bind port",
    )
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class ProxyConfig(BaseConfig):
    """Top-level QueryProxy configuration.

    Example:
        >>> config = ProxyConfig(timeouts={"query_timeout": 5})
        >>> config.limits.max_rows
        1000
    """

    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProxyConfig":
        """Build a configuration, wrapping pydantic errors.

        Raises:
            ConfigurationError: If the data fails validation
        """
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.error_count()} error(s)",
                code=ErrorCodes.CONFIG_INVALID,
                context={"errors": [err["loc"] for err in e.errors()]},
                cause=e,
            ) from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ProxyConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML file

        Returns:
            Parsed configuration

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                code=ErrorCodes.CONFIG_NOT_FOUND,
                context={"path": str(config_path)},
            )

        try:
            with config_path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Cannot parse configuration file: {config_path}",
                code=ErrorCodes.CONFIG_INVALID,
                context={"path": str(config_path)},
                cause=e,
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping",
                code=ErrorCodes.CONFIG_INVALID,
                context={"path": str(config_path)},
            )
        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> "ProxyConfig":
        """Build configuration from ``QUERYPROXY_*`` environment variables."""
        env_map = {
            ("timeouts", "connect_timeout"): "QUERYPROXY_CONNECT_TIMEOUT",
            ("timeouts", "query_timeout"): "QUERYPROXY_QUERY_TIMEOUT",
            ("limits", "max_rows"): "QUERYPROXY_MAX_ROWS",
            ("logging", "level"): "QUERYPROXY_LOG_LEVEL",
            ("logging", "format"): "QUERYPROXY_LOG_FORMAT",
            ("logging", "file_path"): "QUERYPROXY_LOG_FILE",
            ("server", "host"): "QUERYPROXY_HOST",
            ("server", "port"): "PORT",
            ("server", "cors_origins"): "QUERYPROXY_CORS_ORIGINS",
        }

        data: Dict[str, Dict[str, Any]] = {}
        for (section, key), env_name in env_map.items():
            value = os.getenv(env_name)
            if value is not None and value != "":
                data.setdefault(section, {})[key] = value
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "ProxyConfig":
        """Load from ``path``, else ``$QUERYPROXY_CONFIG``, else the environment."""
        path = path or os.getenv(CONFIG_PATH_ENV)
        if path:
            return cls.from_file(path)
        return cls.from_env()
