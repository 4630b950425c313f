# config/config.py – MemeRadar
"""
Configuración central leída desde `.env` (python-dotenv).

Añadidos 2026-09-02
──────────────────
• RADAR_API_BASE           (endpoint del feed de tokens /api/tokens)
• QUOTE_TTL_OK / QUOTE_TTL_NIL (TTL de caché del feed, aciertos / fallos)
• QUOTE_STALE_S            (segundos tras los que un precio se considera viejo)
• RADAR_RPM                (rate-limit sencillo del cliente HTTP)

Añadidos 2026-09-20
──────────────────
• DEFAULT_EXIT_STRATEGY    (estrategia de salida por defecto al abrir posición)
• DUST_REL_TOL             (tolerancia relativa para limpiar residuos de cantidad)
• REFRESH_INTERVAL_DEFAULT (intervalo de auto-refresh si no hay settings guardados)
"""

from __future__ import annotations

import os
import pathlib
import re
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

T = TypeVar("T", int, float)
_num_re = re.compile(r"-?\d+(?:\.\d+)?(?:[eE]-?\d+)?")


# ───────────────────────── helpers ──────────────────────────
def _num_env(key: str, cast: Callable[[str], T], default: T) -> T:
    """Lee key numérica del .env con casting seguro y fallback."""
    raw = os.getenv(key, str(default))
    m = _num_re.search(raw or "")
    try:
        return cast(m.group()) if m else default
    except (ValueError, TypeError):
        return default


def _choice_env(key: str, choices: tuple[str, ...], default: str) -> str:
    """Lee un valor de un conjunto cerrado; si no encaja, `default`."""
    raw = (os.getenv(key) or "").strip().lower()
    return raw if raw in choices else default


# ───────────────────────── .env loading ─────────────────────
PKG_DIR = pathlib.Path(__file__).resolve().parent


def _find_project_root(start: pathlib.Path) -> pathlib.Path:
    """Sube directorios hasta encontrar .env o /data."""
    for p in [start] + list(start.parents):
        if (p / ".env").exists() or (p / "data").is_dir():
            return p
    return start.parent


PROJECT_ROOT = _find_project_root(PKG_DIR)
load_dotenv(PROJECT_ROOT / ".env", override=False)


# ───────────────────────── Config dataclass ─────────────────
@dataclass(frozen=True)
class _Config:
    # ------- feed de precios ---------------------------------------
    RADAR_API_BASE: str = (
        os.getenv("RADAR_API_BASE")
        or os.getenv("VITE_API_URL")
        or "https://api.memecoinradar.online"
    )
    QUOTE_TTL_OK: int = _num_env("QUOTE_TTL_OK", int, 30)
    QUOTE_TTL_NIL: int = _num_env("QUOTE_TTL_NIL", int, 15)
    QUOTE_STALE_S: int = _num_env("QUOTE_STALE_S", int, 300)
    QUOTE_TIMEOUT_S: float = _num_env("QUOTE_TIMEOUT_S", float, 15.0)
    QUOTE_MAX_TRIES: int = _num_env("QUOTE_MAX_TRIES", int, 3)
    RADAR_RPM: int = _num_env("RADAR_RPM", int, 30)

    # ------- cartera / contabilidad --------------------------------
    DEFAULT_EXIT_STRATEGY: str = _choice_env(
        "DEFAULT_EXIT_STRATEGY", ("conservative", "standard", "moonshot"), "standard"
    )
    DUST_REL_TOL: float = _num_env("DUST_REL_TOL", float, 1e-9)

    # ------- auto-refresh ------------------------------------------
    REFRESH_INTERVAL_DEFAULT: str = _choice_env(
        "REFRESH_INTERVAL_DEFAULT", ("30s", "1m", "5m"), "1m"
    )

    # ------- base de datos -----------------------------------------
    SQLITE_DB: str = os.getenv("SQLITE_DB", "data/memeradar.db")

    # ------- logging -----------------------------------------------
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH: pathlib.Path = pathlib.Path(os.getenv("LOG_PATH", PROJECT_ROOT / "logs"))


# instancia global inmutable
CFG = _Config()

# Aliases/export cómodos
RADAR_API_BASE = CFG.RADAR_API_BASE
QUOTE_TTL_OK = CFG.QUOTE_TTL_OK
QUOTE_TTL_NIL = CFG.QUOTE_TTL_NIL
QUOTE_STALE_S = CFG.QUOTE_STALE_S
RADAR_RPM = CFG.RADAR_RPM

DEFAULT_EXIT_STRATEGY = CFG.DEFAULT_EXIT_STRATEGY
DUST_REL_TOL = CFG.DUST_REL_TOL
REFRESH_INTERVAL_DEFAULT = CFG.REFRESH_INTERVAL_DEFAULT

# DB
SQLITE_DB = CFG.SQLITE_DB
_sqlite_path = pathlib.Path(SQLITE_DB).expanduser()
if not _sqlite_path.is_absolute():
    _sqlite_path = PROJECT_ROOT / _sqlite_path
DB_PATH: pathlib.Path = _sqlite_path.resolve()
DB_URI = f"sqlite+aiosqlite:///{DB_PATH.as_posix()}"

# Miscelánea
LOG_LEVEL = CFG.LOG_LEVEL
LOG_PATH = CFG.LOG_PATH
PROJECT_ROOT = PROJECT_ROOT  # re-export
