"""Configuration loading for docsync."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .validation import DEFAULT_RESERVED_KEYS


@dataclass
class ServerConfig:
    base_url: str = "https://parseapi.back4app.com"
    application_id: str = ""
    rest_api_key: str = ""
    timeout_seconds: float = 30.0


@dataclass
class RecordsConfig:
    """Rules applied to record keys and paths."""

    reserved_keys: list[str] = field(
        default_factory=lambda: sorted(DEFAULT_RESERVED_KEYS)
    )
    endpoint_prefix: str = "classes/"


@dataclass
class ExecutorConfig:
    """Thread pool used for background saves and deletes."""

    max_workers: int = 4


@dataclass
class Config:
    server: ServerConfig = field(default_factory=ServerConfig)
    records: RecordsConfig = field(default_factory=RecordsConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with DOCSYNC_ prefix."""
    return os.environ.get(f"DOCSYNC_{key}", default)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    if base_url := _get_env("BASE_URL"):
        config.server.base_url = base_url
    if application_id := _get_env("APPLICATION_ID"):
        config.server.application_id = application_id
    if rest_api_key := _get_env("REST_API_KEY"):
        config.server.rest_api_key = rest_api_key
    if timeout := _get_env("TIMEOUT"):
        config.server.timeout_seconds = float(timeout)

    if max_workers := _get_env("MAX_WORKERS"):
        config.executor.max_workers = int(max_workers)

    return config


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default config.

    Returns:
        Loaded Config object.
    """
    config = Config()

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

            # Parse server config
            if "server" in data:
                server_data = data["server"]
                config.server = ServerConfig(
                    base_url=server_data.get("base_url", config.server.base_url),
                    application_id=server_data.get(
                        "application_id", config.server.application_id
                    ),
                    rest_api_key=server_data.get(
                        "rest_api_key", config.server.rest_api_key
                    ),
                    timeout_seconds=float(
                        server_data.get("timeout_seconds", config.server.timeout_seconds)
                    ),
                )

            # Parse records config
            if "records" in data:
                records_data = data["records"]
                config.records = RecordsConfig(
                    reserved_keys=list(
                        records_data.get("reserved_keys", config.records.reserved_keys)
                    ),
                    endpoint_prefix=records_data.get(
                        "endpoint_prefix", config.records.endpoint_prefix
                    ),
                )

            # Parse executor config
            if "executor" in data:
                executor_data = data["executor"]
                config.executor = ExecutorConfig(
                    max_workers=executor_data.get(
                        "max_workers", config.executor.max_workers
                    ),
                )

    # Apply environment variable overrides
    config = _apply_env_overrides(config)

    if config.executor.max_workers < 1:
        config.executor.max_workers = 1

    return config
