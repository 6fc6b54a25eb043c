"""Configuration management for the query assembler."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import yaml
from pathlib import Path

from ..datasources import DataSource, DuckDBDataSource, PostgreSQLDataSource


class ConfigError(ValueError):
    """Raised when a configuration file is malformed."""


@dataclass
class DataSourceConfig:
    """Configuration for a single data source."""

    name: str
    type: str  # "postgresql", "duckdb"
    config: Dict[str, Any]


@dataclass
class ExecutorConfig:
    """Configuration for query execution."""

    batch_size: int = 10000
    log_parameters: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging setup."""

    level: str = "INFO"
    structured: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    datasources: Dict[str, DataSourceConfig] = field(default_factory=dict)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        datasources:
          shop:
            type: duckdb
            path: /data/shop.duckdb
            read_only: true

          postgres_prod:
            type: postgresql
            host: localhost
            port: 5432
            database: shop
            user: user
            password: pass

        executor:
          batch_size: 10000
          log_parameters: false

        logging:
          level: DEBUG
          structured: true
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    return parse_config(data)


def parse_config(data: Dict[str, Any]) -> Config:
    """Build a Config from an already-loaded mapping.

    Raises:
        ConfigError: If a section is malformed or has unknown keys
    """
    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping")

    datasources = {}
    for name, ds_config in (data.get("datasources") or {}).items():
        if not isinstance(ds_config, dict) or "type" not in ds_config:
            raise ConfigError(f"Data source '{name}' needs a 'type'")
        ds_config = dict(ds_config)
        ds_type = ds_config.pop("type")
        datasources[name] = DataSourceConfig(name=name, type=ds_type, config=ds_config)

    executor = _parse_section(ExecutorConfig, data, "executor")
    logging_config = _parse_section(LoggingConfig, data, "logging")

    return Config(datasources=datasources, executor=executor, logging=logging_config)


def _parse_section(section_class, data: Dict[str, Any], key: str):
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{key}' section must be a mapping")
    try:
        return section_class(**section)
    except TypeError as e:
        raise ConfigError(f"Invalid '{key}' section: {e}") from e


def create_datasource(ds_config: DataSourceConfig) -> DataSource:
    """Instantiate the data source described by a config entry."""
    if ds_config.type == "duckdb":
        return DuckDBDataSource(ds_config.name, ds_config.config)
    if ds_config.type == "postgresql":
        return PostgreSQLDataSource(ds_config.name, ds_config.config)
    raise ValueError(f"Unsupported data source type: {ds_config.type}")
