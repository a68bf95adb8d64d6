import copy
from contextlib import contextmanager
from typing import Callable, Optional, Dict, Any, List, Tuple
from samaritan_core.storage.models import AccountInfo
from samaritan_core.storage.provider import StorageProvider

class InMemoryStorage(StorageProvider):
    # dicts double as insertion-ordered sets (values are None)
    def __init__(self):
        self.accounts: Dict[str, AccountInfo] = {}
        self.nodes: Dict[str, None] = {}
        self.subscriptions: Dict[str, Dict[str, None]] = {}
        # restrictions indexed both ways: app -> users and user -> apps
        self.restricted_users: Dict[str, Dict[str, None]] = {}
        self.restricted_apps: Dict[str, Dict[str, None]] = {}
        self.audit: List[Tuple[str, Dict[str, Any]]] = []
        self.replay = set()
        self._undo: Optional[List[Callable[[], None]]] = None

    def _journal(self, undo: Callable[[], None]):
        if self._undo is not None:
            self._undo.append(undo)

    @staticmethod
    def _set_add(index: Dict[str, Dict[str, None]], key: str, member: str):
        index.setdefault(key, {})[member] = None

    @staticmethod
    def _set_discard(index: Dict[str, Dict[str, None]], key: str, member: str):
        members = index.get(key)
        if members is None:
            return
        members.pop(member, None)
        if not members:
            del index[key]

    # accounts
    def get_account(self, did: str) -> Optional[AccountInfo]:
        rec = self.accounts.get(did)
        return copy.copy(rec) if rec else None

    def insert_account(self, rec: AccountInfo):
        previous = self.accounts.get(rec.did)
        self.accounts[rec.did] = copy.copy(rec)
        if previous is None:
            self._journal(lambda: self.accounts.pop(rec.did, None))
        else:
            self._journal(lambda: self.accounts.__setitem__(rec.did, previous))

    def update_account_cid(self, did: str, hashtable_cid: str, updated_at: str):
        rec = self.accounts.get(did)
        if rec:
            self.accounts[did] = copy.copy(rec)
            self.accounts[did].hashtable_cid = hashtable_cid
            self.accounts[did].updated_at = updated_at
            self._journal(lambda: self.accounts.__setitem__(did, rec))

    # bootnodes
    def list_nodes(self) -> List[str]:
        return list(self.nodes)

    def has_node(self, address: str) -> bool:
        return address in self.nodes

    def insert_node(self, address: str):
        if address in self.nodes:
            return
        self.nodes[address] = None
        self._journal(lambda: self.nodes.pop(address, None))

    def delete_node(self, address: str):
        if address not in self.nodes:
            return
        # a dict cannot reinsert at the old position, so rebuild on undo
        before = list(self.nodes)
        del self.nodes[address]
        self._journal(lambda: setattr(self, "nodes", dict.fromkeys(before)))

    def count_nodes(self) -> int:
        return len(self.nodes)

    # subscriptions
    def list_subscribers(self, app_did: str) -> List[str]:
        return list(self.subscriptions.get(app_did, {}))

    def has_subscription(self, app_did: str, node: str) -> bool:
        return node in self.subscriptions.get(app_did, {})

    def insert_subscription(self, app_did: str, node: str):
        if self.has_subscription(app_did, node):
            return
        self._set_add(self.subscriptions, app_did, node)
        self._journal(lambda: self._set_discard(self.subscriptions, app_did, node))

    def delete_subscription(self, app_did: str, node: str):
        if not self.has_subscription(app_did, node):
            return
        before = list(self.subscriptions[app_did])
        self._set_discard(self.subscriptions, app_did, node)
        self._journal(lambda: self.subscriptions.__setitem__(app_did, dict.fromkeys(before)))

    # restrictions
    def list_restricted_users(self, app_did: str) -> List[str]:
        return list(self.restricted_users.get(app_did, {}))

    def list_restricted_apps(self, user_did: str) -> List[str]:
        return list(self.restricted_apps.get(user_did, {}))

    def has_restriction(self, user_did: str, app_did: str) -> bool:
        return user_did in self.restricted_users.get(app_did, {})

    def insert_restriction(self, user_did: str, app_did: str):
        if self.has_restriction(user_did, app_did):
            return
        self._set_add(self.restricted_users, app_did, user_did)
        self._set_add(self.restricted_apps, user_did, app_did)

        def undo():
            self._set_discard(self.restricted_users, app_did, user_did)
            self._set_discard(self.restricted_apps, user_did, app_did)
        self._journal(undo)

    def delete_restriction(self, user_did: str, app_did: str):
        if not self.has_restriction(user_did, app_did):
            return
        users = list(self.restricted_users[app_did])
        apps = list(self.restricted_apps[user_did])
        self._set_discard(self.restricted_users, app_did, user_did)
        self._set_discard(self.restricted_apps, user_did, app_did)

        def undo():
            self.restricted_users[app_did] = dict.fromkeys(users)
            self.restricted_apps[user_did] = dict.fromkeys(apps)
        self._journal(undo)

    # audit
    def log_event(self, event_type: str, payload: Dict[str, Any]):
        self.audit.append((event_type, dict(payload)))

    def list_events(self) -> List[Tuple[str, Dict[str, Any]]]:
        return list(self.audit)

    # replay guard
    def seen_msg(self, msg_id: str) -> bool:
        return msg_id in self.replay

    def mark_msg(self, msg_id: str):
        self.replay.add(msg_id)

    @contextmanager
    def atomic(self):
        # nested blocks share the outermost journal
        if self._undo is not None:
            yield
            return
        self._undo = []
        audit_len = len(self.audit)
        try:
            yield
        except BaseException:
            for undo in reversed(self._undo):
                undo()
            del self.audit[audit_len:]
            raise
        finally:
            self._undo = None
