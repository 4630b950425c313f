"""
utils.simple_cache
~~~~~~~~~~~~~~~~~~
Caché en memoria con TTL muy ligero. No persiste entre ejecuciones.

Uso:
    from utils.simple_cache import cache_get, cache_set

    v = cache_get("radar:tokens")
    if v is None:
        v = await algo_costoso()
        cache_set("radar:tokens", v, ttl=30)
"""
from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple

# clave → (expira_at, valor)
_CACHE: Dict[str, Tuple[float, Any]] = {}


def cache_get(key: str) -> Any | None:
    exp, val = _CACHE.get(key, (0.0, None))
    if exp > time.time():
        return val
    # expirado → lo quitamos
    _CACHE.pop(key, None)
    return None


def cache_set(key: str, value: Any, ttl: int = 60) -> None:
    _CACHE[key] = (time.time() + ttl, value)


def cache_clear(key: Optional[str] = None) -> None:
    """Borra una clave (o toda la caché si `key` es None)."""
    if key is None:
        _CACHE.clear()
    else:
        _CACHE.pop(key, None)
