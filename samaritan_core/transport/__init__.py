# samaritan_core/transport/__init__.py
import os
from samaritan_core.transport.transport_base import BaseTransport
from samaritan_core.transport.transport_local import LocalAdapter
from samaritan_core.transport.transport_http import HTTPAdapter
from samaritan_core.transport.transport_kafka import KafkaAdapter


def transport_factory(mode: str = None, config: dict = None) -> BaseTransport:
    """
    mode:
      - "local" → in-process loopback (default)
      - "http"  → POST events to an indexer
      - "kafka" → producer-only mesh egress
    """
    config = config or {}
    mode = (mode or os.getenv("SAM_EVENT_TRANSPORT", "local")).lower()

    if mode == "kafka":
        return KafkaAdapter(
            brokers=config.get("kafka_brokers") or os.getenv("SAM_KAFKA_BROKERS", "localhost:9092"),
            enabled=os.getenv("SAM_KAFKA_ENABLED", "1") == "1",
        )

    if mode == "http":
        return HTTPAdapter(
            config.get("http_url") or os.getenv("SAM_INDEXER_URL", "http://localhost:8080"),
            token=os.getenv("SAM_INDEXER_TOKEN"),
        )

    if mode == "local":
        return LocalAdapter()

    raise ValueError(f"Unknown event transport: {mode}")


__all__ = [
    "BaseTransport",
    "LocalAdapter",
    "HTTPAdapter",
    "KafkaAdapter",
    "transport_factory",
]
