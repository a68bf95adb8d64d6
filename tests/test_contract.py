import pytest

from samaritan_core.config import ContractConfig, load_config
from samaritan_core.contract import DbContract, build_contract
from samaritan_core.errors import (
    AccountNotFound, CapacityExceeded, InvalidIdentifier, Unauthorized, UnknownOperation,
)
from samaritan_core.storage import InMemoryStorage, SQLiteStorage
from samaritan_core.transport import LocalAdapter


def test_account_scenario_through_dispatch(contract):
    alice = "did:sam:alice"
    contract.dispatch(alice, "new_account",
                      {"did": alice, "hashtable_cid": "cidA", "auth_material": b"auth1"})

    with pytest.raises(Unauthorized):
        contract.dispatch("did:sam:eve", "update_account_ht_cid", {"did": alice, "new_cid": "cidB"})

    contract.dispatch(alice, "update_account_ht_cid", {"did": alice, "new_cid": "cidB"})
    assert contract.dispatch(alice, "get_account_ht_cid", {"did": alice}) == "cidB"


def test_capacity_scenario(make_contract):
    contract = make_contract(max_nodes=2)
    contract.add_address("/ip4/1.1.1.1")
    contract.add_address("/ip4/2.2.2.2")
    with pytest.raises(CapacityExceeded):
        contract.add_address("/ip4/3.3.3.3")
    assert len(contract.get_node_addresses()) == 2


def test_restriction_scenario(contract):
    contract.restrict("did:sam:bob", "did:sam:app1")
    contract.restrict("did:sam:carol", "did:sam:app1")

    assert contract.get_restriction_list("did:sam:app1") == b"did:sam:bob$$$did:sam:carol"
    assert contract.get_restriction_list("did:sam:unknown") == b""


def test_events_published_on_transport(contract, published):
    contract.add_address("/ip4/1.1.1.1")
    contract.subscribe_node("did:sam:app1", "/ip4/1.1.1.1")

    assert [m["event_type"] for m in published] == ["BootNodeAdded", "TopicSubscriptionComplete"]
    assert published[1]["payload"] == {"did": "did:sam:app1", "node": "/ip4/1.1.1.1"}


def test_failed_call_publishes_nothing(contract, published):
    with pytest.raises(AccountNotFound):
        contract.update_account_ht_cid("did:sam:x", "did:sam:x", "cid")
    assert published == []


def test_unknown_operation(contract):
    with pytest.raises(UnknownOperation):
        contract.dispatch("did:sam:x", "drop_everything", {})


def test_bad_arguments(contract):
    with pytest.raises(UnknownOperation):
        contract.dispatch("did:sam:x", "restrict", {"user": "did:sam:x"})


def test_invalid_identifier_through_dispatch(contract):
    with pytest.raises(InvalidIdentifier):
        contract.dispatch("did:sam:x", "restrict", {"user_did": "", "app_did": "did:sam:app"})


def test_node_subsystem_can_be_disabled(make_contract):
    contract = make_contract(node_directory_enabled=False)

    assert contract.nodes is None and contract.subscriptions is None
    assert "add_address" not in contract.operations
    with pytest.raises(UnknownOperation):
        contract.dispatch("did:sam:x", "add_address", {"addr": "/ip4/1.1.1.1"})
    with pytest.raises(UnknownOperation):
        contract.subscribe_node("did:sam:app", "/ip4/1.1.1.1")

    # accounts and restrictions are unaffected
    contract.restrict("did:sam:bob", "did:sam:app")
    assert contract.get_restriction_list("did:sam:app") == b"did:sam:bob"


def test_load_config_env_fallback(monkeypatch):
    monkeypatch.setenv("SAM_MAX_NODES", "4")
    monkeypatch.setenv("SAM_NODE_DIRECTORY_ENABLED", "false")
    monkeypatch.setenv("SAM_STORAGE_PROVIDER", "memory")

    cfg = load_config({"max_nodes": 7})
    assert cfg.max_nodes == 7
    assert cfg.node_directory_enabled is False
    assert cfg.storage_provider == "memory"


@pytest.mark.parametrize("value", [0, -3])
def test_config_rejects_bad_capacity(value):
    with pytest.raises(ValueError):
        ContractConfig(max_nodes=value)


def test_build_contract_memory():
    contract = build_contract({"storage_provider": "memory", "event_transport": "local", "max_nodes": 3})

    assert isinstance(contract.storage, InMemoryStorage)
    assert isinstance(contract.events.transport, LocalAdapter)
    assert contract.nodes.max_nodes == 3


def test_build_contract_sqlite_persists(tmp_path):
    cfg = {"storage_provider": "sqlite", "sqlite_path": str(tmp_path / "db" / "state.db"),
           "event_transport": "local"}
    first = build_contract(cfg)
    assert isinstance(first.storage, SQLiteStorage)
    first.new_account("did:sam:alice", "cidA", b"auth1")
    first.add_address("/ip4/1.1.1.1")
    first.storage.close()

    second = build_contract(cfg)
    assert second.get_account_ht_cid("did:sam:alice") == "cidA"
    assert second.get_node_addresses() == ["/ip4/1.1.1.1"]
    assert [e.event_type for e in second.events.history()] == ["AccountCreated", "BootNodeAdded"]


def test_contract_defaults_without_emitter():
    contract = DbContract(InMemoryStorage())
    contract.restrict("did:sam:bob", "did:sam:app")
    assert contract.events.transport is None
    assert contract.events.history()[0].event_type == "RestrictApplicationAccess"


def test_failure_is_surfaced_with_kind(contract):
    contract.restrict("did:sam:bob", "did:sam:app")
    with pytest.raises(Exception) as info:
        contract.dispatch("did:sam:bob", "restrict", {"user_did": "did:sam:bob", "app_did": "did:sam:app"})

    assert info.value.to_dict() == {
        "kind": "AlreadyRestricted",
        "message": "did:sam:bob already restricts did:sam:app",
        "user_did": "did:sam:bob",
        "app_did": "did:sam:app",
    }


def test_raising_listener_leaves_call_successful(contract):
    def broken(event):
        raise RuntimeError("listener down")

    contract.events.add_listener(broken)
    contract.restrict("did:sam:bob", "did:sam:app")

    assert contract.get_restriction_list("did:sam:app") == b"did:sam:bob"
    contract.unrestrict("did:sam:bob", "did:sam:app")
    assert contract.get_restriction_list("did:sam:app") == b""


@pytest.fixture
def restore_log_level(monkeypatch):
    from samaritan_core import logger as sam_logger
    yield
    sam_logger.set_log_level("INFO")
    monkeypatch.setattr(sam_logger, "_level", None)


def test_build_contract_applies_log_level(restore_log_level):
    import logging
    from samaritan_core.logger import get_logger

    build_contract({"storage_provider": "memory", "log_level": "debug"})

    assert logging.getLogger("Samaritan.Contract").level == logging.DEBUG
    assert logging.getLogger("Samaritan.Restrictions").level == logging.DEBUG
    assert get_logger("Samaritan.Later").level == logging.DEBUG


def test_log_level_env_fallback(monkeypatch):
    monkeypatch.setenv("SAM_LOG_LEVEL", "warning")
    assert load_config({}).log_level == "WARNING"


def test_config_rejects_unknown_log_level():
    with pytest.raises(ValueError):
        ContractConfig(log_level="chatty")


def test_restricted_users_through_dispatch(contract):
    contract.restrict("did:sam:bob", "did:sam:app")
    contract.restrict("did:sam:carol", "did:sam:app")

    assert "get_restricted_users" in contract.operations
    assert contract.dispatch("did:sam:x", "get_restricted_users", {"app_did": "did:sam:app"}) == [
        "did:sam:bob", "did:sam:carol",
    ]
