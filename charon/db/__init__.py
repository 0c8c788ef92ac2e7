from __future__ import annotations

"""
charon.db
=========

Backend selection for the vault record store.

URIs
----
- "memory://"                   → in-process dict (devnet / tests)
- "sqlite:////abs/path/v.db"    → SQLite file
- "sqlite:///:memory:"          → private in-memory SQLite

API
---
- open_store(uri) -> RecordStore

The store interface itself lives in charon.db.kv.
"""

from ..core.errors import ConfigError
from .kv import VAULT, Prefix, RecordStore, vault_key
from .memory import MemoryStore
from .sqlite import SQLiteStore, open_sqlite_store


def open_store(uri: str) -> RecordStore:
    """Open the record store named by `uri`. Raises ConfigError for unknown schemes."""
    u = uri.strip()
    if u == "memory://":
        return MemoryStore()
    if u.startswith("sqlite:///"):
        return open_sqlite_store(u)
    raise ConfigError("unsupported db uri", uri=uri)


__all__ = [
    "open_store",
    "RecordStore",
    "Prefix",
    "VAULT",
    "vault_key",
    "MemoryStore",
    "SQLiteStore",
]
