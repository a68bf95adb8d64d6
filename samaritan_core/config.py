"""
samaritan_core.config
---------------------
Runtime configuration for the contract.

Explicit values in the config dict win; anything missing falls back to the
``SAM_*`` environment variables, then to the defaults below.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import os

from .constants import DEFAULT_DB_PATH, DEFAULT_EVENT_TOPIC_PREFIX, DEFAULT_MAX_NODES


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _pick(config: dict, key: str, env: str, default):
    value = config.get(key)
    if value is None:
        value = os.getenv(env, default)
    return value


@dataclass
class ContractConfig:
    max_nodes: int = DEFAULT_MAX_NODES
    node_directory_enabled: bool = True
    storage_provider: str = "sqlite"
    sqlite_path: str = DEFAULT_DB_PATH
    event_transport: str = "local"
    event_topic_prefix: str = DEFAULT_EVENT_TOPIC_PREFIX
    http_url: str = "http://localhost:8080"
    kafka_brokers: str = "localhost:9092"
    log_level: str = "INFO"

    def __post_init__(self):
        if isinstance(self.max_nodes, bool) or int(self.max_nodes) < 1:
            raise ValueError(f"max_nodes must be a positive integer, got {self.max_nodes!r}")
        self.max_nodes = int(self.max_nodes)
        self.log_level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"unknown log_level {self.log_level!r}")

    def storage_config(self) -> dict:
        return {"storage_provider": self.storage_provider, "sqlite_path": self.sqlite_path}


def load_config(overrides: dict | None = None) -> ContractConfig:
    config = overrides or {}
    return ContractConfig(
        max_nodes=int(_pick(config, "max_nodes", "SAM_MAX_NODES", DEFAULT_MAX_NODES)),
        node_directory_enabled=_as_bool(
            _pick(config, "node_directory_enabled", "SAM_NODE_DIRECTORY_ENABLED", "true")
        ),
        storage_provider=_pick(config, "storage_provider", "SAM_STORAGE_PROVIDER", "sqlite"),
        sqlite_path=_pick(config, "sqlite_path", "SAM_DB_PATH", DEFAULT_DB_PATH),
        event_transport=_pick(config, "event_transport", "SAM_EVENT_TRANSPORT", "local").lower(),
        event_topic_prefix=_pick(
            config, "event_topic_prefix", "SAM_EVENT_TOPIC_PREFIX", DEFAULT_EVENT_TOPIC_PREFIX
        ),
        http_url=_pick(config, "http_url", "SAM_INDEXER_URL", "http://localhost:8080"),
        kafka_brokers=_pick(config, "kafka_brokers", "SAM_KAFKA_BROKERS", "localhost:9092"),
        log_level=str(_pick(config, "log_level", "SAM_LOG_LEVEL", "INFO")).upper(),
    )
