from __future__ import annotations
from contextlib import contextmanager
from typing import Optional, Dict, Any, List, Tuple
import json, sqlite3, os
from samaritan_core.storage.provider import StorageProvider
from samaritan_core.storage.models import AccountInfo
from samaritan_core.utils import now_ts


class SQLiteStorage(StorageProvider):
    def __init__(self, path="db/samaritan_state.db"):
        if path != ":memory:":
            # If no directory, default to current working directory
            dir_path = os.path.dirname(path) or "."
            os.makedirs(dir_path, exist_ok=True)
        self.db = sqlite3.connect(path, check_same_thread=False)
        self._depth = 0

        self._init()

    def _init(self) -> None:
        c = self.db.cursor()

        c.execute("""CREATE TABLE IF NOT EXISTS accounts(
            did TEXT PRIMARY KEY,
            hashtable_cid TEXT NOT NULL,
            auth_material BLOB NOT NULL,
            did_document_uri TEXT NOT NULL DEFAULT '',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )""")
        # seq columns keep enumeration in insertion order
        c.execute("""CREATE TABLE IF NOT EXISTS bootnodes(
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            address TEXT NOT NULL UNIQUE
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS subscriptions(
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            app_did TEXT NOT NULL,
            node TEXT NOT NULL,
            UNIQUE(app_did, node)
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS restrictions(
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            user_did TEXT NOT NULL,
            app_did TEXT NOT NULL,
            UNIQUE(user_did, app_did)
        )""")
        c.execute("CREATE INDEX IF NOT EXISTS idx_restrictions_app ON restrictions(app_did)")
        c.execute("""CREATE TABLE IF NOT EXISTS audit(
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            ts TEXT,
            event_type TEXT,
            payload TEXT
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS replay_guard(
            msg_id TEXT PRIMARY KEY
        )""")

        self.db.commit()

    def _commit(self) -> None:
        # inside atomic() the outermost block commits
        if self._depth == 0:
            self.db.commit()

    @contextmanager
    def atomic(self):
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self.db.rollback()
            raise
        else:
            self._depth -= 1
            self._commit()

    # --- accounts ---

    def get_account(self, did: str) -> Optional[AccountInfo]:
        cur = self.db.execute(
            "SELECT did,hashtable_cid,auth_material,did_document_uri,created_at,updated_at "
            "FROM accounts WHERE did=?", (did,)
        )
        row = cur.fetchone()
        if not row: return None
        did, cid, auth, uri, created_at, updated_at = row
        return AccountInfo(did, cid, bytes(auth), uri, created_at, updated_at)

    def insert_account(self, rec: AccountInfo) -> None:
        self.db.execute(
            "INSERT INTO accounts(did,hashtable_cid,auth_material,did_document_uri,created_at,updated_at) "
            "VALUES(?,?,?,?,?,?)",
            (rec.did, rec.hashtable_cid, sqlite3.Binary(rec.auth_material),
             rec.did_document_uri, rec.created_at, rec.updated_at)
        )
        self._commit()

    def update_account_cid(self, did: str, hashtable_cid: str, updated_at: str) -> None:
        self.db.execute(
            "UPDATE accounts SET hashtable_cid=?, updated_at=? WHERE did=?",
            (hashtable_cid, updated_at, did)
        )
        self._commit()

    # --- bootnodes ---

    def list_nodes(self) -> List[str]:
        cur = self.db.execute("SELECT address FROM bootnodes ORDER BY seq")
        return [r[0] for r in cur.fetchall()]

    def has_node(self, address: str) -> bool:
        cur = self.db.execute("SELECT 1 FROM bootnodes WHERE address=?", (address,))
        return cur.fetchone() is not None

    def insert_node(self, address: str) -> None:
        self.db.execute("INSERT INTO bootnodes(address) VALUES(?)", (address,))
        self._commit()

    def delete_node(self, address: str) -> None:
        self.db.execute("DELETE FROM bootnodes WHERE address=?", (address,))
        self._commit()

    def count_nodes(self) -> int:
        return self.db.execute("SELECT COUNT(*) FROM bootnodes").fetchone()[0]

    # --- subscriptions ---

    def list_subscribers(self, app_did: str) -> List[str]:
        cur = self.db.execute(
            "SELECT node FROM subscriptions WHERE app_did=? ORDER BY seq", (app_did,)
        )
        return [r[0] for r in cur.fetchall()]

    def has_subscription(self, app_did: str, node: str) -> bool:
        cur = self.db.execute(
            "SELECT 1 FROM subscriptions WHERE app_did=? AND node=?", (app_did, node)
        )
        return cur.fetchone() is not None

    def insert_subscription(self, app_did: str, node: str) -> None:
        self.db.execute("INSERT INTO subscriptions(app_did,node) VALUES(?,?)", (app_did, node))
        self._commit()

    def delete_subscription(self, app_did: str, node: str) -> None:
        self.db.execute("DELETE FROM subscriptions WHERE app_did=? AND node=?", (app_did, node))
        self._commit()

    # --- restrictions ---

    def list_restricted_users(self, app_did: str) -> List[str]:
        cur = self.db.execute(
            "SELECT user_did FROM restrictions WHERE app_did=? ORDER BY seq", (app_did,)
        )
        return [r[0] for r in cur.fetchall()]

    def list_restricted_apps(self, user_did: str) -> List[str]:
        cur = self.db.execute(
            "SELECT app_did FROM restrictions WHERE user_did=? ORDER BY seq", (user_did,)
        )
        return [r[0] for r in cur.fetchall()]

    def has_restriction(self, user_did: str, app_did: str) -> bool:
        cur = self.db.execute(
            "SELECT 1 FROM restrictions WHERE user_did=? AND app_did=?", (user_did, app_did)
        )
        return cur.fetchone() is not None

    def insert_restriction(self, user_did: str, app_did: str) -> None:
        self.db.execute(
            "INSERT INTO restrictions(user_did,app_did) VALUES(?,?)", (user_did, app_did)
        )
        self._commit()

    def delete_restriction(self, user_did: str, app_did: str) -> None:
        self.db.execute(
            "DELETE FROM restrictions WHERE user_did=? AND app_did=?", (user_did, app_did)
        )
        self._commit()

    # --- audit ---

    def log_event(self, event_type: str, payload: Dict[str, Any]) -> None:
        self.db.execute("INSERT INTO audit(ts,event_type,payload) VALUES(?,?,?)",
                        (now_ts(), event_type, json.dumps(payload, separators=(",", ":"), sort_keys=True)))
        self._commit()

    def list_events(self) -> List[Tuple[str, Dict[str, Any]]]:
        cur = self.db.execute("SELECT event_type, payload FROM audit ORDER BY seq")
        return [(event_type, json.loads(payload)) for event_type, payload in cur.fetchall()]

    # --- replay guard ---

    def seen_msg(self, msg_id: str) -> bool:
        cur = self.db.execute("SELECT 1 FROM replay_guard WHERE msg_id=?", (msg_id,))
        return cur.fetchone() is not None

    def mark_msg(self, msg_id: str) -> None:
        self.db.execute("INSERT OR IGNORE INTO replay_guard(msg_id) VALUES(?)", (msg_id,))
        self._commit()

    def close(self):
        self.db.close()
