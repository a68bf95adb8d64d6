"""
samaritan_core.host
-------------------
LocalHost: an in-process stand-in for the consensus/execution host.

It provides what the contract assumes of its real host:
- caller authentication (Ed25519 signature over the call envelope),
- exactly-once delivery (each msg_id is applied at most once),
- total ordering (one call at a time under a lock).

Deployments on a real ledger host do not use this module; tests and local
tooling drive the contract through it.
"""

from __future__ import annotations
import threading
from typing import Any, Dict

from .contract import DbContract
from .crypto import compute_pubkey_fingerprint, verify_envelope
from .envelope import BINARY_ARGS, Envelope
from .errors import ContractError, InvalidIdentifier
from .logger import get_logger
from .utils import b64d

log = get_logger("Samaritan.Host")


class HostError(Exception):
    kind = "HostError"


class UnknownCaller(HostError):
    kind = "UnknownCaller"


class InvalidSignature(HostError):
    kind = "InvalidSignature"


class ReplayedCall(HostError):
    kind = "ReplayedCall"


class LocalHost:
    def __init__(self, contract: DbContract):
        self.contract = contract
        self._keys: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def register_caller(self, did: str, pubkey_raw: bytes) -> str:
        """Bind a DID to its Ed25519 public key; returns the key fingerprint."""
        self._keys[did] = bytes(pubkey_raw)
        fpr = compute_pubkey_fingerprint(pubkey_raw)
        log.info(f"[HOST] registered caller {did} key={fpr}")
        return fpr

    def _authenticate(self, env: Envelope) -> str:
        pub = self._keys.get(env.producer)
        if pub is None:
            raise UnknownCaller(f"no key registered for {env.producer!r}")
        if not verify_envelope(env, pub):
            raise InvalidSignature(f"bad signature on {env.msg_id} from {env.producer}")
        return env.producer

    @staticmethod
    def _decode_args(payload: Dict[str, Any]) -> Dict[str, Any]:
        args = dict(payload)
        for name in BINARY_ARGS:
            if isinstance(args.get(name), str):
                try:
                    args[name] = b64d(args[name])
                except ValueError:
                    raise InvalidIdentifier(f"{name} is not valid base64", field=name)
        return args

    def submit(self, env: Envelope) -> Any:
        """
        Authenticate, de-duplicate and apply one call.

        Contract failures propagate to the submitter unchanged. A call that
        failed is still marked as seen: the host delivered it, and replaying
        the same signed envelope must not apply it later.
        """
        with self._lock:
            caller = self._authenticate(env)
            if not env.msg_id:
                raise ReplayedCall("envelope has no msg_id")
            if self.contract.storage.seen_msg(env.msg_id):
                log.warning(f"[HOST] replayed call {env.msg_id} from {caller}")
                raise ReplayedCall(f"call {env.msg_id} already applied")
            self.contract.storage.mark_msg(env.msg_id)

            try:
                result = self.contract.dispatch(caller, env.subject, self._decode_args(env.payload))
            except ContractError as e:
                log.warning(f"[HOST] {env.subject} from {caller} failed: {e.kind}")
                raise
            log.info(f"[HOST] applied {env.subject} from {caller}")
            return result
