"""
Local persisted state — a small transactional key-value store on SQLite.

The dashboard, the background schedule thread, a `--background-once` run
started by the OS scheduler and the desk widget process all share one
database file. Every operation opens its own short-lived connection, so
the store is safe to use from any thread; `transaction()` takes the
write lock up front (BEGIN IMMEDIATE) for read-modify-write updates.
"""

import sqlite3
import time
from contextlib import contextmanager

from .constants import KEY_WIDGET_TEXT, CURRENCY_SYMBOL
from .config import STATE_DB
from .errors import StoreError

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at REAL NOT NULL
)
"""


class KeyValueStore:

    def __init__(self, path=STATE_DB, busy_timeout_ms=5000):
        self._path = str(path)
        self._busy_timeout_ms = busy_timeout_ms
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute(_SCHEMA)

    @property
    def path(self):
        return self._path

    def _connect(self):
        try:
            conn = sqlite3.connect(
                self._path,
                timeout=self._busy_timeout_ms / 1000,
                isolation_level=None,           # explicit BEGIN/COMMIT only
            )
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open state database {self._path}: {e}") from e
        conn.execute(f"PRAGMA busy_timeout = {int(self._busy_timeout_ms)}")
        return _ClosingConnection(conn)

    @contextmanager
    def transaction(self):
        """Yield a Transaction holding the database write lock until exit."""
        with self._connect() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StoreError(f"Could not lock state database: {e}") from e
            try:
                yield Transaction(conn)
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            else:
                try:
                    conn.execute("COMMIT")
                except sqlite3.Error as e:
                    raise StoreError(f"Commit failed: {e}") from e

    def get(self, key, default=None):
        with self._connect() as conn:
            return Transaction(conn).get(key, default)

    def set(self, key, value):
        with self.transaction() as tx:
            tx.set(key, value)

    def get_int(self, key, default=0):
        with self._connect() as conn:
            return Transaction(conn).get_int(key, default)


class Transaction:
    """Typed get/set against an open connection."""

    def __init__(self, conn):
        self._conn = conn

    def get(self, key, default=None):
        try:
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Read of {key} failed: {e}") from e
        return row[0] if row else default

    def get_int(self, key, default=0):
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError as e:
            raise StoreError(f"{key} holds non-integer value {raw!r}") from e

    def set(self, key, value):
        try:
            self._conn.execute(
                "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                "updated_at = excluded.updated_at",
                (key, str(value), time.time()),
            )
        except sqlite3.Error as e:
            raise StoreError(f"Write of {key} failed: {e}") from e


class _ClosingConnection:
    """sqlite3.Connection's own context manager commits but never closes."""

    def __init__(self, conn):
        self._conn = conn

    def execute(self, *args):
        return self._conn.execute(*args)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self._conn.close()
        return False


# ─── Widget display value ────────────────────────────────────────

def format_amount(amount):
    """Widget text for a money total, e.g. 152000 → '₹152000'."""
    return f"{CURRENCY_SYMBOL}{int(amount)}"


class WidgetStore:
    """Last known widget text. Readable whether or not the dashboard is running."""

    def __init__(self, store):
        self._store = store

    def set(self, display_text):
        self._store.set(KEY_WIDGET_TEXT, display_text)

    def get(self):
        return self._store.get(KEY_WIDGET_TEXT, format_amount(0))
