"""
samaritan_core.contract
-----------------------
DbContract: the four state components composed behind one dispatcher.

The host hands over one authenticated call at a time. ``dispatch`` routes it
to exactly one component operation, passing the caller identity to the
operations that check origin. Node directory and subscription operations
are only routable while that subsystem is enabled.
"""

from __future__ import annotations
import inspect
from typing import Any, Callable, Dict, Optional

from .accounts import AccountRegistry
from .config import ContractConfig, load_config
from .errors import UnknownOperation
from .events import EventEmitter
from .logger import get_logger, set_log_level
from .nodes import NodeDirectory
from .restrictions import RestrictionLedger
from .storage import load_storage_provider
from .storage.provider import StorageProvider
from .subscriptions import SubscriptionGraph
from .transport import transport_factory

log = get_logger("Samaritan.Contract")

# operations that receive the authenticated caller as their first argument
_ORIGIN_CHECKED = {"update_account_ht_cid"}

_NODE_OPERATIONS = {
    "add_address", "remove_address", "get_node_addresses", "get_node_addresses_encoded",
    "subscribe_node", "unsubscribe_node", "get_subscribers", "get_subscribers_encoded",
}


class DbContract:
    def __init__(
        self,
        storage: StorageProvider,
        events: Optional[EventEmitter] = None,
        config: Optional[ContractConfig] = None,
    ):
        self.config = config or ContractConfig()
        self.storage = storage
        self.events = events or EventEmitter(storage, topic_prefix=self.config.event_topic_prefix)

        self.accounts = AccountRegistry(storage, self.events)
        self.restrictions = RestrictionLedger(storage, self.events)

        self.nodes: Optional[NodeDirectory] = None
        self.subscriptions: Optional[SubscriptionGraph] = None
        if self.config.node_directory_enabled:
            self.nodes = NodeDirectory(storage, self.events, max_nodes=self.config.max_nodes)
            self.subscriptions = SubscriptionGraph(storage, self.events, self.nodes)

        self._routes: Dict[str, Callable[..., Any]] = self._build_routes()

    def _build_routes(self) -> Dict[str, Callable[..., Any]]:
        routes = {
            "new_account": self.accounts.new_account,
            "update_account_ht_cid": self.accounts.update_account_ht_cid,
            "get_account_ht_cid": self.accounts.get_account_ht_cid,
            "authenticate_account": self.accounts.authenticate_account,
            "restrict": self.restrictions.restrict,
            "unrestrict": self.restrictions.unrestrict,
            "get_restriction_list": self.restrictions.get_restriction_list,
            "get_restricted_applications": self.restrictions.get_restricted_applications,
            "get_restricted_users": self.restrictions.get_restricted_users,
            "is_access_restricted": self.restrictions.is_access_restricted,
        }
        if self.nodes is not None:
            routes.update({
                "add_address": self.nodes.add_address,
                "remove_address": self.nodes.remove_address,
                "get_node_addresses": self.nodes.get_node_addresses,
                "get_node_addresses_encoded": self.nodes.get_node_addresses_encoded,
                "subscribe_node": self.subscriptions.subscribe_node,
                "unsubscribe_node": self.subscriptions.unsubscribe_node,
                "get_subscribers": self.subscriptions.get_subscribers,
                "get_subscribers_encoded": self.subscriptions.get_subscribers_encoded,
            })
        return routes

    @property
    def operations(self):
        return sorted(self._routes)

    def dispatch(self, caller: str, operation: str, args: Optional[Dict[str, Any]] = None) -> Any:
        """Route one authenticated call. Typed failures propagate unchanged."""
        handler = self._routes.get(operation)
        if handler is None:
            if operation in _NODE_OPERATIONS:
                raise UnknownOperation(f"{operation} is disabled", operation=operation)
            raise UnknownOperation(f"unknown operation: {operation}", operation=operation)

        args = dict(args or {})
        call_args = (caller,) if operation in _ORIGIN_CHECKED else ()
        try:
            inspect.signature(handler).bind(*call_args, **args)
        except TypeError as e:
            raise UnknownOperation(f"bad arguments for {operation}: {e}", operation=operation)

        log.debug(f"[DISPATCH] {operation} caller={caller}")
        return handler(*call_args, **args)

    # --- direct entry points, one per operation ---

    def new_account(self, did, hashtable_cid, auth_material, did_document_uri: str = ""):
        return self.accounts.new_account(did, hashtable_cid, auth_material, did_document_uri)

    def update_account_ht_cid(self, caller, did, new_cid):
        return self.accounts.update_account_ht_cid(caller, did, new_cid)

    def get_account_ht_cid(self, did):
        return self.accounts.get_account_ht_cid(did)

    def restrict(self, user_did, app_did):
        return self.restrictions.restrict(user_did, app_did)

    def unrestrict(self, user_did, app_did):
        return self.restrictions.unrestrict(user_did, app_did)

    def get_restriction_list(self, app_did) -> bytes:
        return self.restrictions.get_restriction_list(app_did)

    def _require_nodes(self, operation: str):
        if self.nodes is None:
            raise UnknownOperation(f"{operation} is disabled", operation=operation)

    def add_address(self, addr):
        self._require_nodes("add_address")
        return self.nodes.add_address(addr)

    def remove_address(self, addr):
        self._require_nodes("remove_address")
        return self.nodes.remove_address(addr)

    def get_node_addresses(self):
        self._require_nodes("get_node_addresses")
        return self.nodes.get_node_addresses()

    def subscribe_node(self, app_did, node):
        self._require_nodes("subscribe_node")
        return self.subscriptions.subscribe_node(app_did, node)

    def unsubscribe_node(self, app_did, node):
        self._require_nodes("unsubscribe_node")
        return self.subscriptions.unsubscribe_node(app_did, node)

    def get_subscribers(self, app_did, live_only: bool = False):
        self._require_nodes("get_subscribers")
        return self.subscriptions.get_subscribers(app_did, live_only=live_only)


def build_contract(config: dict | ContractConfig | None = None) -> DbContract:
    """Wire storage, event transport and emitter from configuration."""
    if not isinstance(config, ContractConfig):
        config = load_config(config)

    set_log_level(config.log_level)
    storage = load_storage_provider(config.storage_config())
    transport = transport_factory(
        config.event_transport,
        {"http_url": config.http_url, "kafka_brokers": config.kafka_brokers},
    )
    events = EventEmitter(storage, transport, topic_prefix=config.event_topic_prefix)
    log.info(
        f"[CONTRACT] storage={config.storage_provider} transport={config.event_transport} "
        f"nodes={'on' if config.node_directory_enabled else 'off'} max_nodes={config.max_nodes}"
    )
    return DbContract(storage, events, config)
