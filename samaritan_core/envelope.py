"""
samaritan_core.envelope
-----------------------
Defines the Envelope class: the signed container a host uses to deliver one
contract call.

- producer: DID of the calling identity
- subject:  operation name (e.g. "restrict")
- payload:  operation arguments as JSON; binary arguments are base64 text
- msg_id:   unique per call, covered by the signature and used for replay
            protection
"""

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional
from .constants import SCHEMA_VERSION
from .utils import b64e, canonical_json, new_id, now_ts
import json

# arguments that travel base64-encoded inside JSON payloads
BINARY_ARGS = ("auth_material",)


@dataclass
class Envelope:
    schema_ver: str = SCHEMA_VERSION
    msg_id: str = field(default_factory=new_id)
    ts: str = field(default_factory=now_ts)
    producer: str = ""          # caller DID
    subject: str = ""           # operation name
    key_id: str = ""            # identifies signing key/pubkey
    sig: Optional[str] = None   # base64 signature over to_signing_bytes()
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_signing_bytes(self) -> bytes:
        body = {
            "schema_ver": self.schema_ver,
            "msg_id": self.msg_id,
            "ts": self.ts,
            "producer": self.producer,
            "subject": self.subject,
            "payload": self.payload,
        }
        return canonical_json(body)

    def to_json(self) -> str:
        """Full JSON serialization (including signature)."""
        return json.dumps(asdict(self), sort_keys=True)

    @staticmethod
    def make_call(caller: str, operation: str, **args) -> "Envelope":
        """Build an unsigned call envelope, base64-encoding binary arguments."""
        payload = {}
        for name, value in args.items():
            if name in BINARY_ARGS and isinstance(value, (bytes, bytearray)):
                value = b64e(bytes(value))
            payload[name] = value
        return Envelope(producer=caller, subject=operation, payload=payload)

    @classmethod
    def from_dict(cls, data: dict) -> "Envelope":
        """Reconstruct Envelope from dict (inverse of to_dict)."""
        return cls(
            schema_ver=data.get("schema_ver", SCHEMA_VERSION),
            msg_id=data.get("msg_id") or "",
            ts=data.get("ts", now_ts()),
            producer=data.get("producer", ""),
            subject=data.get("subject", ""),
            key_id=data.get("key_id", ""),
            sig=data.get("sig"),
            payload=dict(data.get("payload") or {}),
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Envelope":
        return cls.from_dict(json.loads(raw))
