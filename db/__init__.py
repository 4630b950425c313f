"""
Sub-paquete de persistencia.

Importar así:

    from db import make_engine, make_sessionmaker, async_init_db, SqlKVStore
"""
from __future__ import annotations

# ───────────────────── re-exports públicos ────────────────────
from .database import Base, async_init_db, make_engine, make_sessionmaker, sqlite_uri  # noqa: F401
from .models   import KVEntry                                                         # noqa: F401
from .kv       import MemoryKVStore, SqlKVStore                                       # noqa: F401

__all__ = [
    "Base",
    "async_init_db",
    "make_engine",
    "make_sessionmaker",
    "sqlite_uri",
    "KVEntry",
    "SqlKVStore",
    "MemoryKVStore",
]
