# memeradar/db/database.py
"""
Motor SQLite asíncrono (SQLAlchemy 2 + aiosqlite).

Sin efectos al importar: el motor se crea con `make_engine()` y las tablas
con `async_init_db(engine)`. Así los tests pueden usar una BD bajo tmp_path.

    python -m db.database          # crea data/memeradar.db
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config import DB_PATH, DB_URI

log = logging.getLogger("db")


# ───────── Declarative Base ─────────
class Base(DeclarativeBase):  # type: ignore
    """Declarative base (async)."""


# ───────── Engine / Session factory ─────────
def sqlite_uri(path: Path) -> str:
    return f"sqlite+aiosqlite:///{Path(path).expanduser().as_posix()}"


def make_engine(url: Optional[str] = None) -> AsyncEngine:
    """Motor async; crea el directorio de la BD si hace falta."""
    if url is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        url = DB_URI
    return create_async_engine(url, echo=False, future=True)


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


# ─────────── Init helper ───────────
async def async_init_db(engine: AsyncEngine) -> None:
    """
    Crea las tablas si no existen. Idempotente.
    """
    from . import models  # noqa: F401  (registra modelos)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # WAL = mejor concurrencia (solo ficheros; :memory: lo ignora)
    if engine.url.database and engine.url.database != ":memory:":
        async with engine.begin() as conn:
            await conn.exec_driver_sql("PRAGMA journal_mode=WAL;")

    log.info("[DB] OK  →  %s", engine.url.database or ":memory:")


async def _main() -> None:
    engine = make_engine()
    try:
        await async_init_db(engine)
    finally:
        await engine.dispose()


# ─────────── CLI helper ───────────
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main())
