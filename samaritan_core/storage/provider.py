# samaritan_core/storage/provider.py
from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from samaritan_core.storage.models import AccountInfo


class StorageProvider(ABC):
    """
    Ordered key-value substrate behind the contract.

    Holds the four independently keyed collections (accounts, bootnodes,
    subscriptions, restrictions) plus the audit trail and the host replay
    guard. Providers preserve insertion order on every list they return and
    never enforce relations between collections.
    """

    # --- accounts ---
    @abstractmethod
    def get_account(self, did: str) -> Optional[AccountInfo]: ...

    @abstractmethod
    def insert_account(self, rec: AccountInfo) -> None: ...

    @abstractmethod
    def update_account_cid(self, did: str, hashtable_cid: str, updated_at: str) -> None: ...

    # --- bootnodes ---
    @abstractmethod
    def list_nodes(self) -> List[str]: ...

    @abstractmethod
    def has_node(self, address: str) -> bool: ...

    @abstractmethod
    def insert_node(self, address: str) -> None: ...

    @abstractmethod
    def delete_node(self, address: str) -> None: ...

    def count_nodes(self) -> int:
        return len(self.list_nodes())

    # --- subscriptions ---
    @abstractmethod
    def list_subscribers(self, app_did: str) -> List[str]: ...

    @abstractmethod
    def has_subscription(self, app_did: str, node: str) -> bool: ...

    @abstractmethod
    def insert_subscription(self, app_did: str, node: str) -> None: ...

    @abstractmethod
    def delete_subscription(self, app_did: str, node: str) -> None: ...

    # --- restrictions ---
    @abstractmethod
    def list_restricted_users(self, app_did: str) -> List[str]: ...

    @abstractmethod
    def list_restricted_apps(self, user_did: str) -> List[str]: ...

    @abstractmethod
    def has_restriction(self, user_did: str, app_did: str) -> bool: ...

    @abstractmethod
    def insert_restriction(self, user_did: str, app_did: str) -> None: ...

    @abstractmethod
    def delete_restriction(self, user_did: str, app_did: str) -> None: ...

    # --- audit ---
    @abstractmethod
    def log_event(self, event_type: str, payload: Dict[str, Any]) -> None: ...

    @abstractmethod
    def list_events(self) -> List[Tuple[str, Dict[str, Any]]]: ...

    # --- replay guard ---
    @abstractmethod
    def seen_msg(self, msg_id: str) -> bool: ...

    @abstractmethod
    def mark_msg(self, msg_id: str) -> None: ...

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Group writes so they commit together or not at all."""
        yield

    def close(self) -> None:
        return
