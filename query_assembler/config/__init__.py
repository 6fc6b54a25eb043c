"""Configuration management."""

from .config import (
    Config,
    ConfigError,
    DataSourceConfig,
    ExecutorConfig,
    LoggingConfig,
    create_datasource,
    load_config,
    parse_config,
)

__all__ = [
    "Config",
    "ConfigError",
    "DataSourceConfig",
    "ExecutorConfig",
    "LoggingConfig",
    "create_datasource",
    "load_config",
    "parse_config",
]
