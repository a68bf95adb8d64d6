# samaritan_core/transport/transport_local.py
from collections import defaultdict
from typing import Callable, Dict, List
from samaritan_core.logger import get_logger
from samaritan_core.transport.transport_base import BaseTransport

log = get_logger("Samaritan.Transport.Local")


class LocalAdapter(BaseTransport):
    """
    In-process loopback bus.

    Handlers subscribed to a topic are called synchronously on publish.
    A topic ending in ``.*`` matches every topic under that prefix, which is
    how an in-process indexer follows all contract events.
    """

    name = "local"

    def __init__(self):
        self.handlers: Dict[str, List[Callable[[dict], None]]] = defaultdict(list)

    def subscribe(self, topic: str, handler):
        self.handlers[topic].append(handler)
        log.debug(f"[LOCAL SUB] {topic}")

    def _matching(self, topic: str):
        for pattern, handlers in list(self.handlers.items()):
            if pattern == topic or (pattern.endswith(".*") and topic.startswith(pattern[:-1])):
                yield from handlers

    def publish(self, topic: str, payload, headers=None, key=None):
        message = self.to_dict(payload)
        log.info(f"[LOCAL PUB] {topic}")
        delivered = 0
        for handler in self._matching(topic):
            try:
                handler(message)
                delivered += 1
            except Exception:
                log.exception(f"[LOCAL PUB] handler failed topic={topic}")
        return {"delivered": delivered}
