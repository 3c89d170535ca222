"""
Arcania - Account Store

SQLite storage behind the reference backend. It holds only what the client
sends at signup: salts and client-derived hashes. No password ever reaches
this table.

Database structure:
- accounts: one row per email (salts, auth hash, master check hash)
"""

import os
import sqlite3
import threading
import time
from typing import Dict, Optional


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_DB_PATH = os.path.join(os.path.expanduser("~"), ".arcania", "accounts.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    email TEXT PRIMARY KEY,
    auth_salt BLOB NOT NULL,          -- salt for authHash and masterPasswordCheckHash
    encryption_salt BLOB NOT NULL,    -- salt for client-side encryption keys
    auth_hash BLOB NOT NULL,          -- derive(account_password, auth_salt)
    master_check_hash BLOB NOT NULL,  -- derive(master_password, auth_salt)
    created_at INTEGER NOT NULL,
    last_login_at INTEGER
);
"""

PRAGMAS = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=FULL;
PRAGMA secure_delete=ON;
"""


class AccountExists(Exception):
    """An account with this email is already registered."""


# =============================================================================
# STORE CLASS
# =============================================================================

class AccountStore:
    """
    Account table access.

    Usage:
        store = AccountStore("accounts.db")
        store.open()
        store.create_account("a@example.com", auth_salt, enc_salt, h, check)
        row = store.get_account("a@example.com")
        store.close()
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None
        # Serializes every statement and commit/rollback on the shared connection
        self._lock = threading.Lock()

    def open(self) -> "AccountStore":
        """Connect, apply PRAGMAs and create the table if needed."""
        d = os.path.dirname(self.db_path)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)

        # Flask may serve requests from worker threads
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(PRAGMAS)
        self.conn.executescript(SCHEMA)
        return self

    def close(self) -> None:
        with self._lock:
            if self.conn:
                self.conn.close()
                self.conn = None

    def create_account(
        self,
        email: str,
        auth_salt: bytes,
        encryption_salt: bytes,
        auth_hash: bytes,
        master_check_hash: bytes
    ) -> None:
        """
        Insert a new account.

        Raises:
            AccountExists: email already registered
        """
        with self._lock:
            self._require_open()
            try:
                self.conn.execute(
                    """INSERT INTO accounts
                       (email, auth_salt, encryption_salt, auth_hash, master_check_hash, created_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (email, auth_salt, encryption_salt, auth_hash, master_check_hash,
                     int(time.time()))
                )
                self.conn.commit()
            except sqlite3.IntegrityError as e:
                self.conn.rollback()
                raise AccountExists(email) from e

    def get_account(self, email: str) -> Optional[Dict]:
        """Return the account row as a dict, or None if unknown."""
        with self._lock:
            self._require_open()
            row = self.conn.execute(
                "SELECT * FROM accounts WHERE email = ?", (email,)
            ).fetchone()
        return dict(row) if row else None

    def record_login(self, email: str) -> None:
        """Stamp last_login_at for a successful login."""
        with self._lock:
            self._require_open()
            self.conn.execute(
                "UPDATE accounts SET last_login_at = ? WHERE email = ?",
                (int(time.time()), email)
            )
            self.conn.commit()

    def _require_open(self) -> None:
        if not self.conn:
            raise Exception("Account store is not open")
