# memeradar/db/kv.py
"""
Adaptadores clave/valor con la misma interfaz async:

    await kv.load("positions")          → objeto JSON o None
    await kv.save("positions", [...])

• SqlKVStore    – tabla `kv_entries` (SQLite vía aiosqlite).
• MemoryKVStore – dict en memoria (tests, modo --no-db).

`load` devuelve None si la clave no existe. Si el texto guardado no es JSON
válido se lanza ValueError; decidir el valor por defecto es cosa del
llamador (`state.app_state.load_state`).
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import KVEntry, _utcnow

log = logging.getLogger("db")


class SqlKVStore:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sm = sessionmaker

    async def load(self, key: str) -> Optional[Any]:
        async with self._sm() as session:
            row = await session.get(KVEntry, key)
            if row is None:
                return None
            return json.loads(row.value)

    async def save(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        now = _utcnow()
        # upsert atómico: dos escrituras concurrentes de la misma clave no chocan con la PK
        stmt = sqlite_insert(KVEntry).values(key=key, value=payload, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[KVEntry.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
        async with self._sm() as session:
            await session.execute(stmt)
            await session.commit()
        log.debug("[kv] %s guardado (%d bytes)", key, len(payload))


class MemoryKVStore:
    """Mismo contrato que SqlKVStore; guarda el JSON serializado."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    async def load(self, key: str) -> Optional[Any]:
        raw = self.data.get(key)
        return None if raw is None else json.loads(raw)

    async def save(self, key: str, value: Any) -> None:
        self.data[key] = json.dumps(value, ensure_ascii=False)


__all__ = ["SqlKVStore", "MemoryKVStore"]
