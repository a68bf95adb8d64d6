"""
samaritan_core.errors
---------------------
Typed failures returned by contract operations.

Every mutating operation checks all of its preconditions before touching
state, so raising any of these means nothing was written and no event was
emitted. ``kind`` is the stable name surfaced to callers by the host.
"""

from __future__ import annotations


class ContractError(Exception):
    """Base class for every failure the contract reports."""

    kind = "ContractError"

    def __init__(self, message: str = "", **context):
        self.context = context
        super().__init__(message or self.kind)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": str(self), **self.context}


# --- AccountRegistry ---

class DuplicateAccount(ContractError):
    kind = "DuplicateAccount"


class AccountNotFound(ContractError):
    kind = "AccountNotFound"


class Unauthorized(ContractError):
    """Caller is not the DID it is trying to mutate."""
    kind = "Unauthorized"


# --- NodeDirectory ---

class CapacityExceeded(ContractError):
    kind = "CapacityExceeded"


class DuplicateAddress(ContractError):
    kind = "DuplicateAddress"


class AddressNotFound(ContractError):
    kind = "AddressNotFound"


# --- SubscriptionGraph ---

class AlreadySubscribed(ContractError):
    kind = "AlreadySubscribed"


class SubscriptionNotFound(ContractError):
    kind = "SubscriptionNotFound"


# --- RestrictionLedger ---

class AlreadyRestricted(ContractError):
    kind = "AlreadyRestricted"


class NotRestricted(ContractError):
    kind = "NotRestricted"


# --- Boundary ---

class InvalidIdentifier(ContractError, ValueError):
    kind = "InvalidIdentifier"


class UnknownOperation(ContractError):
    """Operation name is unknown, or belongs to a disabled subsystem."""
    kind = "UnknownOperation"
