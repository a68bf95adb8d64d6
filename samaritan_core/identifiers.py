"""
samaritan_core.identifiers
--------------------------
Opaque identifier types checked at the contract boundary.

DIDs, CIDs and network addresses are compared by exact equality and never
parsed for meaning here; resolution belongs to external collaborators. The
only checks are type, non-emptiness, a length bound, and the absence of the
list separator so that joined encodings stay unambiguous.
"""

from __future__ import annotations
from typing import NewType, Union

from .constants import (
    LIST_SEPARATOR,
    MAX_ADDRESS_LENGTH,
    MAX_AUTH_MATERIAL_LENGTH,
    MAX_CID_LENGTH,
    MAX_DID_LENGTH,
)
from .errors import InvalidIdentifier

DID = NewType("DID", str)
CID = NewType("CID", str)
NetworkAddress = NewType("NetworkAddress", str)

RawIdentifier = Union[str, bytes, bytearray]

_SEPARATOR = LIST_SEPARATOR.decode("ascii")


def _as_text(kind: str, value: RawIdentifier, max_len: int) -> str:
    if isinstance(value, (bytes, bytearray)):
        try:
            value = bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidIdentifier(f"{kind} is not valid UTF-8", field=kind)
    if not isinstance(value, str):
        raise InvalidIdentifier(f"{kind} must be str or bytes, got {type(value).__name__}", field=kind)
    if not value:
        raise InvalidIdentifier(f"{kind} must not be empty", field=kind)
    if len(value) > max_len:
        raise InvalidIdentifier(f"{kind} exceeds {max_len} characters", field=kind)
    if _SEPARATOR in value:
        raise InvalidIdentifier(f"{kind} must not contain {_SEPARATOR!r}", field=kind)
    return value


def validate_did(value: RawIdentifier) -> DID:
    return DID(_as_text("did", value, MAX_DID_LENGTH))


def validate_cid(value: RawIdentifier) -> CID:
    return CID(_as_text("cid", value, MAX_CID_LENGTH))


def validate_address(value: RawIdentifier) -> NetworkAddress:
    return NetworkAddress(_as_text("address", value, MAX_ADDRESS_LENGTH))


def validate_auth_material(value) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidIdentifier("auth_material must be bytes", field="auth_material")
    value = bytes(value)
    if not value:
        raise InvalidIdentifier("auth_material must not be empty", field="auth_material")
    if len(value) > MAX_AUTH_MATERIAL_LENGTH:
        raise InvalidIdentifier(
            f"auth_material exceeds {MAX_AUTH_MATERIAL_LENGTH} bytes", field="auth_material"
        )
    return value
