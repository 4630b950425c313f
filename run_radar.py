# memeradar/run_radar.py
"""
⏯️  Runner de refresco de MemeRadar
───────────────────────────────────
• Carga el estado persistido (SQLite, tabla kv_entries).
• Refresca cotizaciones del radar y recalcula el P&L de la cartera.
• Imprime el resumen (KPIs) y persiste la caché de posiciones.
• Si `autoRefresh` está activo en los settings, repite cada
  `refreshInterval` (30s / 1m / 5m); con --once hace una sola pasada.

Uso:
    python run_radar.py --once
    python run_radar.py --db /tmp/radar.db --log
"""

from __future__ import annotations

# ───────── stdlib ────────────────────────────────────────────────────────────
import argparse
import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence

import aiohttp

# Reduce ruido de librerías verbosas
logging.getLogger("aiosqlite").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

from config import CFG, risk                                                  # noqa: E402
from db import SqlKVStore, async_init_db, make_engine, make_sessionmaker, sqlite_uri  # noqa: E402
from state import RadarSession                                                # noqa: E402
from utils.logger import enable_file_logging, log_portfolio                   # noqa: E402

log = logging.getLogger("run_radar")


# ╭─────────────────────── CLI ───────────────────────────────────────────────╮
def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MemeRadar – refresco de cartera simulada")
    parser.add_argument("--once", action="store_true", help="Una sola pasada (sin bucle)")
    parser.add_argument("--db", type=Path, default=None, help="Ruta SQLite (por defecto SQLITE_DB)")
    parser.add_argument(
        "--interval",
        choices=sorted(risk.REFRESH_INTERVALS),
        default=None,
        help="Fuerza el intervalo de refresco (ignora settings)",
    )
    parser.add_argument("--log", action="store_true", help="Girar logs detallados en /logs")
    return parser.parse_args(argv)


# ╭─────────────────────── Bucle ─────────────────────────────────────────────╮
async def refresh_once(radar: RadarSession, http: aiohttp.ClientSession) -> None:
    summary = await radar.refresh_quotes(http)
    log_portfolio(summary, stale=len(radar.stale_positions()))
    await radar.flush()


async def main_loop(radar: RadarSession, *, once: bool = False, interval: Optional[str] = None) -> None:
    async with aiohttp.ClientSession() as http:
        while True:
            await refresh_once(radar, http)
            settings = radar.state.settings
            if once or not (settings.auto_refresh or interval):
                return
            seconds = risk.REFRESH_INTERVALS[interval] if interval else settings.refresh_seconds
            await asyncio.sleep(seconds)


# ╭─────────────────────── Entrypoint ───────────────────────────────────────╮
async def _runner(args: argparse.Namespace) -> None:
    engine = make_engine(sqlite_uri(args.db) if args.db else None)
    try:
        await async_init_db(engine)
        kv = SqlKVStore(make_sessionmaker(engine))
        radar = await RadarSession.load(kv)
        try:
            await main_loop(radar, once=args.once, interval=args.interval)
        finally:
            await radar.flush()
    finally:
        await engine.dispose()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=CFG.LOG_LEVEL,
        format="%(asctime)s  %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )
    if args.log:
        run_id = enable_file_logging()
        log.info("📂 File-logging activo (run_id %s)", run_id)
    if args.db:
        args.db.expanduser().parent.mkdir(parents=True, exist_ok=True)
    try:
        asyncio.run(_runner(args))
    except KeyboardInterrupt:
        log.info("⏹️  Runner detenido por usuario")


if __name__ == "__main__":
    main()
