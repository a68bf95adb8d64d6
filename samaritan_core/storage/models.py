# samaritan_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, field

from samaritan_core.utils import now_ts


@dataclass
class AccountInfo:
    """
    Storage-level representation of an account record.

    Storage-agnostic so every provider (SQLite, memory, host-supplied
    key-value substrate) can hand the same shape back to the registry.
    Only ``hashtable_cid`` and ``updated_at`` change after creation.
    """
    did: str
    hashtable_cid: str
    auth_material: bytes = b""
    did_document_uri: str = ""
    created_at: str = field(default_factory=now_ts)
    updated_at: str = field(default_factory=now_ts)
