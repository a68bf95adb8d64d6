"""
samaritan_core.crypto
---------------------
Ed25519 helpers for the reference host.

- ed25519_generate / ed25519_sign / ed25519_verify on raw key bytes
- sign_envelope / verify_envelope over Envelope.to_signing_bytes()
- compute_pubkey_fingerprint for key ids

The contract itself never verifies signatures; by the time a call reaches
DbContract the host has already established who the caller is.
"""

from __future__ import annotations
from typing import Tuple
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519
import hashlib
from .utils import b64e, b64d
from .envelope import Envelope


def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = ed25519.Ed25519PrivateKey.generate()
    pk = sk.public_key()
    return sk.private_bytes_raw(), pk.public_bytes_raw()

def ed25519_sign(priv_raw: bytes, data: bytes) -> bytes:
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(priv_raw)
    return sk.sign(data)

def ed25519_verify(pub_raw: bytes, sig: bytes, data: bytes) -> bool:
    try:
        ed25519.Ed25519PublicKey.from_public_bytes(pub_raw).verify(sig, data)
        return True
    except (InvalidSignature, ValueError):
        return False

def sign_envelope(env: Envelope, priv_raw: bytes, key_id: str) -> Envelope:
    env.key_id = key_id
    sig = ed25519_sign(priv_raw, env.to_signing_bytes())
    env.sig = b64e(sig)
    return env

def verify_envelope(env: Envelope, pub_raw: bytes) -> bool:
    if not env.sig:
        return False
    try:
        sig = b64d(env.sig)
    except ValueError:
        return False
    return ed25519_verify(pub_raw, sig, env.to_signing_bytes())

def compute_pubkey_fingerprint(pub_raw: bytes) -> str:
    """SHA256 of the raw public key, hex, truncated to 32 chars."""
    return hashlib.sha256(pub_raw).hexdigest()[:32]
