"""
samaritan_core.nodes
--------------------
NodeDirectory: bounded, deduplicated, insertion-ordered bootnode set.

Deprecated subsystem: kept behind ``AddressBook`` so it can be disabled or
dropped without touching accounts or restrictions. At capacity the
directory fails closed; nothing is evicted.
"""

from __future__ import annotations
from typing import List, Protocol

from .codec import encode_list
from .constants import DEFAULT_MAX_NODES
from .errors import AddressNotFound, CapacityExceeded, DuplicateAddress
from .events import BootNodeAdded, BootNodeRemoved, EventEmitter
from .identifiers import NetworkAddress, validate_address
from .logger import get_logger
from .storage.provider import StorageProvider

log = get_logger("Samaritan.Nodes")


class AddressBook(Protocol):
    """The only view of the directory the subscription graph relies on."""

    def contains(self, addr: NetworkAddress) -> bool: ...


class NodeDirectory:
    def __init__(self, storage: StorageProvider, events: EventEmitter, max_nodes: int = DEFAULT_MAX_NODES):
        if max_nodes < 1:
            raise ValueError(f"max_nodes must be positive, got {max_nodes}")
        self.storage = storage
        self.events = events
        self.max_nodes = max_nodes

    def add_address(self, addr) -> None:
        addr = validate_address(addr)

        if self.storage.has_node(addr):
            log.warning(f"[NODES] duplicate address {addr}")
            raise DuplicateAddress(f"address already registered: {addr}", address=addr)

        if self.storage.count_nodes() >= self.max_nodes:
            log.warning(f"[NODES] directory full ({self.max_nodes}), rejecting {addr}")
            raise CapacityExceeded(
                f"node directory is full ({self.max_nodes})", address=addr, max_nodes=self.max_nodes
            )

        with self.events.transaction():
            self.storage.insert_node(addr)
            self.events.emit(BootNodeAdded(address=addr))
        log.info(f"[NODES] added {addr}")

    def remove_address(self, addr) -> None:
        addr = validate_address(addr)

        if not self.storage.has_node(addr):
            log.warning(f"[NODES] remove of unknown address {addr}")
            raise AddressNotFound(f"address not registered: {addr}", address=addr)

        # subscription edges to this address are left in place
        with self.events.transaction():
            self.storage.delete_node(addr)
            self.events.emit(BootNodeRemoved(address=addr))
        log.info(f"[NODES] removed {addr}")

    def get_node_addresses(self) -> List[NetworkAddress]:
        return [NetworkAddress(a) for a in self.storage.list_nodes()]

    def get_node_addresses_encoded(self) -> bytes:
        return encode_list(self.storage.list_nodes(), terminated=True)

    def contains(self, addr: NetworkAddress) -> bool:
        return self.storage.has_node(addr)
