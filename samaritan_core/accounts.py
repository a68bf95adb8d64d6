"""
samaritan_core.accounts
-----------------------
AccountRegistry: DID -> AccountInfo records.

Accounts are permanent once created. Only the caller authenticated as a DID
may change that DID's hashtable CID; the DID, its authentication material
and its DID document URI are fixed at creation.
"""

from __future__ import annotations
import hmac

from .errors import AccountNotFound, DuplicateAccount, InvalidIdentifier, Unauthorized
from .events import AccountCreated, EntryNotFound, EventEmitter, HashTableAddressUpdated
from .identifiers import (
    CID, validate_auth_material, validate_cid, validate_did,
)
from .logger import get_logger
from .storage.models import AccountInfo
from .storage.provider import StorageProvider
from .utils import now_ts

log = get_logger("Samaritan.Accounts")


def _caller_did(caller):
    try:
        return validate_did(caller)
    except InvalidIdentifier:
        return None


class AccountRegistry:
    def __init__(self, storage: StorageProvider, events: EventEmitter):
        self.storage = storage
        self.events = events

    def new_account(self, did, hashtable_cid, auth_material, did_document_uri: str = "") -> None:
        did = validate_did(did)
        hashtable_cid = validate_cid(hashtable_cid)
        auth_material = validate_auth_material(auth_material)

        if self.storage.get_account(did) is not None:
            log.warning(f"[ACCOUNTS] duplicate account did={did}")
            raise DuplicateAccount(f"account already exists: {did}", did=did)

        rec = AccountInfo(
            did=did,
            hashtable_cid=hashtable_cid,
            auth_material=auth_material,
            did_document_uri=did_document_uri or "",
        )
        with self.events.transaction():
            self.storage.insert_account(rec)
            self.events.emit(AccountCreated(did=did))
        log.info(f"[ACCOUNTS] created did={did}")

    def update_account_ht_cid(self, caller, did, new_cid) -> None:
        did = validate_did(did)
        new_cid = validate_cid(new_cid)

        # origin check comes before any state read
        if _caller_did(caller) != did:
            log.warning(f"[ACCOUNTS] unauthorized update did={did} caller={caller}")
            raise Unauthorized(f"caller may not update {did}", did=did, caller=str(caller))

        if self.storage.get_account(did) is None:
            log.warning(f"[ACCOUNTS] update of unknown did={did}")
            raise AccountNotFound(f"no account for {did}", did=did)

        with self.events.transaction():
            self.storage.update_account_cid(did, new_cid, now_ts())
            self.events.emit(HashTableAddressUpdated(did=did, ipfs_address=new_cid))
        log.info(f"[ACCOUNTS] hashtable updated did={did} cid={new_cid}")

    def get_account_ht_cid(self, did) -> CID:
        did = validate_did(did)
        rec = self.storage.get_account(did)
        if rec is None:
            self.events.emit(EntryNotFound(entry_value=did))
            raise AccountNotFound(f"no account for {did}", did=did)
        return CID(rec.hashtable_cid)

    def authenticate_account(self, did, auth_material) -> bool:
        """
        Check presented authentication material against the stored record.

        Applications prove they own an account this way during node
        initialization before being handed its hashtable. Unknown DIDs and
        malformed material simply fail the check.
        """
        did = validate_did(did)
        if not isinstance(auth_material, (bytes, bytearray, memoryview)):
            return False
        rec = self.storage.get_account(did)
        if rec is None:
            return False
        return hmac.compare_digest(rec.auth_material, bytes(auth_material))
