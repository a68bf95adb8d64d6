"""
samaritan_core.restrictions
---------------------------
RestrictionLedger: which users have denied which applications access.

Access is opt-out. A recorded ``(user_did, app_did)`` pair means the
application must be denied access to that user's data; no record, including
for DIDs the contract has never seen, means access is allowed.

The ledger keeps genuine rows; the ``$$$``-joined form only exists in the
return value of ``get_restriction_list``.
"""

from __future__ import annotations
from typing import List

from .codec import encode_list
from .errors import AlreadyRestricted, NotRestricted
from .events import EventEmitter, RestrictApplicationAccess, UnrestrictApplicationAccess
from .identifiers import DID, validate_did
from .logger import get_logger
from .storage.provider import StorageProvider

log = get_logger("Samaritan.Restrictions")


class RestrictionLedger:
    def __init__(self, storage: StorageProvider, events: EventEmitter):
        self.storage = storage
        self.events = events

    def restrict(self, user_did, app_did) -> None:
        user_did = validate_did(user_did)
        app_did = validate_did(app_did)

        if self.storage.has_restriction(user_did, app_did):
            log.warning(f"[RESTRICT] {user_did} already restricts {app_did}")
            raise AlreadyRestricted(
                f"{user_did} already restricts {app_did}", user_did=user_did, app_did=app_did
            )

        with self.events.transaction():
            self.storage.insert_restriction(user_did, app_did)
            self.events.emit(RestrictApplicationAccess(user_did=user_did, application_did=app_did))
        log.info(f"[RESTRICT] {user_did} restricted {app_did}")

    def unrestrict(self, user_did, app_did) -> None:
        user_did = validate_did(user_did)
        app_did = validate_did(app_did)

        if not self.storage.has_restriction(user_did, app_did):
            log.warning(f"[RESTRICT] {user_did} does not restrict {app_did}")
            raise NotRestricted(
                f"{user_did} does not restrict {app_did}", user_did=user_did, app_did=app_did
            )

        with self.events.transaction():
            self.storage.delete_restriction(user_did, app_did)
            self.events.emit(UnrestrictApplicationAccess(user_did=user_did, application_did=app_did))
        log.info(f"[RESTRICT] {user_did} lifted restriction on {app_did}")

    def get_restriction_list(self, app_did) -> bytes:
        # total: malformed or unknown app DIDs yield b""
        try:
            app_did = validate_did(app_did)
        except ValueError:
            return b""
        return encode_list(self.storage.list_restricted_users(app_did))

    def get_restricted_users(self, app_did) -> List[DID]:
        return [DID(u) for u in self.storage.list_restricted_users(validate_did(app_did))]

    def get_restricted_applications(self, user_did) -> List[DID]:
        return [DID(a) for a in self.storage.list_restricted_apps(validate_did(user_did))]

    def is_access_restricted(self, user_did, app_did) -> bool:
        return self.storage.has_restriction(validate_did(user_did), validate_did(app_did))
