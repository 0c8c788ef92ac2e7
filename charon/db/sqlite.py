from __future__ import annotations

"""
SQLite-backed record store
==========================

Durable `RecordStore` over the stdlib `sqlite3` module.

- Table schema: kv(k BLOB PRIMARY KEY, v BLOB NOT NULL)
- `create` is a single `INSERT ... ON CONFLICT DO NOTHING`; `compare_and_swap`
  a single `UPDATE ... WHERE k = ? AND v = ?`. Each runs as its own
  autocommit statement, so both are atomic across threads *and* across
  processes sharing the file; success is read from `rowcount`.

Pragmas: WAL journal, NORMAL sync, a busy timeout so concurrent writers wait
for each other instead of failing with "database is locked".

URIs
----
- "sqlite:////abs/path/charon.db"  → absolute file
- "sqlite:///rel/charon.db"        → path relative to the working directory
- "sqlite:///:memory:"             → private in-memory database
"""

import os
import sqlite3
import threading
from typing import Iterator, Optional, Tuple, Union

from ..core import logging as clog

log = clog.get_logger(__name__)

URI_SCHEME = "sqlite:///"

DEFAULT_PRAGMAS = {
    "journal_mode": "WAL",
    "synchronous": "NORMAL",
    "temp_store": "MEMORY",
    "busy_timeout": 5000,  # ms
}


def _apply_pragmas(conn: sqlite3.Connection, pragmas: Optional[dict] = None) -> None:
    p = dict(DEFAULT_PRAGMAS)
    if pragmas:
        p.update(pragmas)
    cur = conn.cursor()
    cur.execute("PRAGMA busy_timeout=%d" % int(p["busy_timeout"]))
    cur.execute("PRAGMA journal_mode=%s" % p["journal_mode"])
    cur.execute("PRAGMA synchronous=%s" % p["synchronous"])
    cur.execute("PRAGMA temp_store=%s" % p["temp_store"])
    cur.close()


def _migrate(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            k BLOB PRIMARY KEY,
            v BLOB NOT NULL
        )
        """
    )


def _prefix_hi(prefix: bytes) -> Optional[bytes]:
    """
    Smallest byte string greater than every key starting with `prefix`, or
    None if there is none (prefix is empty or all 0xFF).

    Example: b"ab\\x01" -> b"ab\\x02"; b"\\xff\\xff" -> None
    """
    p = bytearray(prefix)
    for i in range(len(p) - 1, -1, -1):
        if p[i] != 0xFF:
            p[i] += 1
            del p[i + 1 :]
            return bytes(p)
    return None


def path_from_uri(uri: str) -> str:
    if not uri.startswith(URI_SCHEME):
        raise ValueError(f"not a sqlite uri: {uri!r}")
    path = uri[len(URI_SCHEME):]
    if not path:
        raise ValueError("sqlite uri has an empty path")
    return path


def _open_connection(path: Union[str, "os.PathLike[str]"], *, pragmas: Optional[dict] = None) -> sqlite3.Connection:
    path_str = os.fspath(path)
    if path_str.startswith(URI_SCHEME):
        path_str = path_from_uri(path_str)
    conn = sqlite3.connect(
        path_str,
        detect_types=0,
        isolation_level=None,      # autocommit; every write is one statement
        check_same_thread=False,   # shared across threads under SQLiteStore._lock
    )
    _apply_pragmas(conn, pragmas)
    _migrate(conn)
    log.debug("sqlite store opened", extra={"path": path_str})
    return conn


class SQLiteStore:
    """
    SQLite-backed `RecordStore`. Safe for multi-threaded use: calls on the
    shared connection are serialized by an internal lock, and atomicity of
    each write comes from SQLite itself.

    Use `open_sqlite_store(uri_or_path)` to construct.
    """

    __slots__ = ("_conn", "_lock")

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            cur = self._conn.execute("SELECT v FROM kv WHERE k = ?", (memoryview(key),))
            row = cur.fetchone()
            cur.close()
        return bytes(row[0]) if row is not None else None

    def create(self, key: bytes, value: bytes) -> bool:
        with self._lock:
            cur = self._conn.execute(
                "INSERT INTO kv(k, v) VALUES(?, ?) ON CONFLICT(k) DO NOTHING",
                (memoryview(key), memoryview(value)),
            )
            created = cur.rowcount == 1
            cur.close()
        return created

    def compare_and_swap(self, key: bytes, expected: bytes, new: bytes) -> bool:
        with self._lock:
            cur = self._conn.execute(
                "UPDATE kv SET v = ? WHERE k = ? AND v = ?",
                (memoryview(new), memoryview(key), memoryview(expected)),
            )
            swapped = cur.rowcount == 1
            cur.close()
        return swapped

    def iter_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        hi = _prefix_hi(prefix)
        if hi is not None:
            sql = "SELECT k, v FROM kv WHERE k >= ? AND k < ? ORDER BY k"
            args: tuple = (memoryview(prefix), memoryview(hi))
        else:
            sql = "SELECT k, v FROM kv WHERE substr(k, 1, ?) = ? ORDER BY k"
            args = (len(prefix), memoryview(prefix))
        with self._lock:
            rows = self._conn.execute(sql, args).fetchall()
        return iter([(bytes(k), bytes(v)) for k, v in rows])

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def open_sqlite_store(path: Union[str, "os.PathLike[str]"], *, pragmas: Optional[dict] = None) -> SQLiteStore:
    """Open (or create) a SQLite record store at a `sqlite:///` URI or a plain path."""
    return SQLiteStore(_open_connection(path, pragmas=pragmas))


__all__ = ["SQLiteStore", "open_sqlite_store", "path_from_uri"]
