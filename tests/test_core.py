from samaritan_core.codec import decode_list, encode_list
from samaritan_core.crypto import (
    compute_pubkey_fingerprint, ed25519_generate, sign_envelope, verify_envelope,
)
from samaritan_core.envelope import Envelope
from samaritan_core.storage import AccountInfo, SQLiteStorage, load_storage_provider, InMemoryStorage
import pytest


def test_sign_verify():
    priv, pub = ed25519_generate()
    env = Envelope.make_call("did:sam:alice", "restrict", user_did="did:sam:alice", app_did="did:sam:app")
    env = sign_envelope(env, priv, compute_pubkey_fingerprint(pub))
    assert verify_envelope(env, pub)

    env.payload["app_did"] = "did:sam:other"
    assert not verify_envelope(env, pub)


def test_envelope_json_roundtrip_keeps_signature():
    priv, pub = ed25519_generate()
    env = sign_envelope(
        Envelope.make_call("did:sam:alice", "new_account", did="did:sam:alice",
                           hashtable_cid="cidA", auth_material=b"\x00\x01"),
        priv, "k1",
    )
    restored = Envelope.from_json(env.to_json())

    assert restored.payload["auth_material"] == "AAE="
    assert verify_envelope(restored, pub)


def test_unsigned_envelope_does_not_verify():
    _, pub = ed25519_generate()
    assert not verify_envelope(Envelope(producer="did:sam:a", subject="x"), pub)


def test_list_codec():
    assert encode_list([]) == b""
    assert decode_list(b"") == []
    assert decode_list(encode_list(["did:sam:bob", "did:sam:carol"])) == ["did:sam:bob", "did:sam:carol"]

    single = "/ip4/192.168.44.205/tcp/1509"
    assert encode_list([single], terminated=True) == b"/ip4/192.168.44.205/tcp/1509$$$"
    assert encode_list([], terminated=True) == b""
    assert decode_list(encode_list([single], terminated=True)) == [single]


def test_storage_roundtrip(tmp_path):
    s = SQLiteStorage(str(tmp_path / "state.db"))
    s.insert_account(AccountInfo(did="did:sam:a", hashtable_cid="cidA", auth_material=b"\xff\x00"))
    got = s.get_account("did:sam:a")
    assert got and got.hashtable_cid == "cidA" and got.auth_material == b"\xff\x00"
    s.mark_msg("123")
    assert s.seen_msg("123")


def test_sqlite_schema(tmp_path):
    s = SQLiteStorage(str(tmp_path / "state.db"))
    tables = {r[0] for r in s.db.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"accounts", "bootnodes", "subscriptions", "restrictions", "audit", "replay_guard"} <= tables


def test_load_storage_provider(monkeypatch, tmp_path):
    assert isinstance(load_storage_provider({"storage_provider": "memory"}), InMemoryStorage)

    monkeypatch.setenv("SAM_STORAGE_PROVIDER", "sqlite")
    monkeypatch.setenv("SAM_DB_PATH", str(tmp_path / "x.db"))
    assert isinstance(load_storage_provider(), SQLiteStorage)

    with pytest.raises(ValueError):
        load_storage_provider({"storage_provider": "postgres"})
