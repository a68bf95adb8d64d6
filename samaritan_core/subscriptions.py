"""
samaritan_core.subscriptions
----------------------------
SubscriptionGraph: many-to-many edges between application DIDs and nodes.

An edge can only be created to a node currently in the directory. Removing
the node later does not remove its edges; ``get_subscribers`` returns them
unless the reader asks for ``live_only``.
"""

from __future__ import annotations
from typing import List

from .codec import encode_list
from .errors import AddressNotFound, AlreadySubscribed, SubscriptionNotFound
from .events import EventEmitter, TopicSubscriptionComplete, TopicUnsubscriptionComplete
from .identifiers import NetworkAddress, validate_address, validate_did
from .logger import get_logger
from .nodes import AddressBook
from .storage.provider import StorageProvider

log = get_logger("Samaritan.Subscriptions")


class SubscriptionGraph:
    def __init__(self, storage: StorageProvider, events: EventEmitter, directory: AddressBook):
        self.storage = storage
        self.events = events
        self.directory = directory

    def subscribe_node(self, app_did, node) -> None:
        app_did = validate_did(app_did)
        node = validate_address(node)

        if not self.directory.contains(node):
            log.warning(f"[SUBS] {app_did} -> unknown node {node}")
            raise AddressNotFound(f"address not registered: {node}", address=node)

        if self.storage.has_subscription(app_did, node):
            log.warning(f"[SUBS] {app_did} already subscribed to {node}")
            raise AlreadySubscribed(f"{node} already serves {app_did}", did=app_did, node=node)

        with self.events.transaction():
            self.storage.insert_subscription(app_did, node)
            self.events.emit(TopicSubscriptionComplete(did=app_did, node=node))
        log.info(f"[SUBS] subscribed {node} to {app_did}")

    def unsubscribe_node(self, app_did, node) -> None:
        app_did = validate_did(app_did)
        node = validate_address(node)

        if not self.storage.has_subscription(app_did, node):
            log.warning(f"[SUBS] no subscription {app_did} -> {node}")
            raise SubscriptionNotFound(f"{node} does not serve {app_did}", did=app_did, node=node)

        with self.events.transaction():
            self.storage.delete_subscription(app_did, node)
            self.events.emit(TopicUnsubscriptionComplete(did=app_did, node=node))
        log.info(f"[SUBS] unsubscribed {node} from {app_did}")

    def get_subscribers(self, app_did, live_only: bool = False) -> List[NetworkAddress]:
        app_did = validate_did(app_did)
        nodes = self.storage.list_subscribers(app_did)
        if live_only:
            nodes = [n for n in nodes if self.directory.contains(n)]
        return [NetworkAddress(n) for n in nodes]

    def get_subscribers_encoded(self, app_did, live_only: bool = False) -> bytes:
        return encode_list(self.get_subscribers(app_did, live_only=live_only), terminated=True)
