"""
samaritan_core.events
---------------------
Contract events and the emitter that records and publishes them.

Mutation events are emitted inside ``EventEmitter.transaction()`` together with
the write they describe, so the audit trail holds an event iff its state
change committed. ``EntryNotFound`` is the one observability signal emitted
on a failed lookup.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, Iterator, List, Optional, Type

from .constants import DEFAULT_EVENT_TOPIC_PREFIX
from .logger import get_logger

log = get_logger("Samaritan.Events")


@dataclass(frozen=True)
class ContractEvent:

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AccountCreated(ContractEvent):
    did: str


@dataclass(frozen=True)
class HashTableAddressUpdated(ContractEvent):
    did: str
    ipfs_address: str


@dataclass(frozen=True)
class EntryNotFound(ContractEvent):
    entry_value: str


@dataclass(frozen=True)
class BootNodeAdded(ContractEvent):
    address: str


@dataclass(frozen=True)
class BootNodeRemoved(ContractEvent):
    address: str


@dataclass(frozen=True)
class TopicSubscriptionComplete(ContractEvent):
    did: str
    node: str


@dataclass(frozen=True)
class TopicUnsubscriptionComplete(ContractEvent):
    did: str
    node: str


@dataclass(frozen=True)
class RestrictApplicationAccess(ContractEvent):
    user_did: str
    application_did: str


@dataclass(frozen=True)
class UnrestrictApplicationAccess(ContractEvent):
    user_did: str
    application_did: str


EVENT_TYPES: Dict[str, Type[ContractEvent]] = {
    cls.__name__: cls
    for cls in (
        AccountCreated, BootNodeAdded, BootNodeRemoved, HashTableAddressUpdated,
        EntryNotFound, TopicSubscriptionComplete, TopicUnsubscriptionComplete,
        RestrictApplicationAccess, UnrestrictApplicationAccess,
    )
}


def event_from_dict(event_type: str, payload: Dict[str, Any]) -> ContractEvent:
    """Rebuild an event from its audit-log form (inverse of ``to_dict``)."""
    try:
        cls = EVENT_TYPES[event_type]
    except KeyError:
        raise ValueError(f"Unknown event type: {event_type}")
    return cls(**payload)


Listener = Callable[[ContractEvent], None]


class EventEmitter:
    """
    Records events to the storage audit log and fans them out.

    Transport publishing is best effort: adapters log their own failures
    and a committed mutation is never undone because an observer was
    unreachable. In-process listeners run synchronously after the commit;
    a listener that raises is logged and skipped, and the rest still run.
    """

    def __init__(self, storage, transport=None, topic_prefix: str = DEFAULT_EVENT_TOPIC_PREFIX):
        self.storage = storage
        self.transport = transport
        self.topic_prefix = topic_prefix.rstrip(".")
        self._listeners: List[Listener] = []
        self._pending: Optional[List[ContractEvent]] = None

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def topic_for(self, event: ContractEvent) -> str:
        return f"{self.topic_prefix}.{event.event_type}"

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Commit writes and their audit records together, then publish.

        Events emitted inside the block are held back until the storage
        commit succeeds and dropped if it rolls back.
        """
        if self._pending is not None:
            raise RuntimeError("event transactions do not nest")
        self._pending = []
        try:
            with self.storage.atomic():
                yield
            pending = self._pending
        finally:
            self._pending = None
        for event in pending:
            self._publish(event)

    def emit(self, event: ContractEvent) -> None:
        payload = event.to_dict()
        self.storage.log_event(event.event_type, payload)
        if self._pending is not None:
            self._pending.append(event)
        else:
            self._publish(event)

    def _publish(self, event: ContractEvent) -> None:
        payload = event.to_dict()
        log.info(f"[EVENTS] {event.event_type} {payload}")

        if self.transport is not None:
            self.transport.publish(
                self.topic_for(event),
                {"event_type": event.event_type, "payload": payload},
            )

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception(f"[EVENTS] listener failed on {event.event_type}")

    def history(self, event_type: Optional[str] = None) -> List[ContractEvent]:
        return [
            event_from_dict(kind, payload)
            for kind, payload in self.storage.list_events()
            if event_type is None or kind == event_type
        ]
