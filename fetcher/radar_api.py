# memeradar/fetcher/radar_api.py
"""
Cliente del feed de tokens del radar (async) con back-off y TTL-cache.

Endpoint:
    GET {RADAR_API_BASE}/api/tokens
    → {"ok": true, "tokens": [{symbol, name, chain, priceUsd, change24hPct}, …]}

• Payload sin `ok` o sin lista `tokens` → lista vacía (no es error).
• 429/5xx y errores de red → reintento (tenacity, espera fija) y, si se
  agotan, QuoteSourceError. Quien llama (QuoteBook) decide degradar.
• 4xx restantes → QuoteSourceError inmediato.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import aiohttp
import tenacity

from config import CFG
from utils.data_utils import safe_float
from utils.errors import QuoteSourceError
from utils.rate_limiter import RateLimiter
from utils.simple_cache import cache_get, cache_set

log = logging.getLogger("radar_api")

_CACHE_KEY = "radar:tokens"
_RETRY_STATUS = {429, 500, 502, 503, 504}

RADAR_LIMITER = RateLimiter(max_calls=max(1, CFG.RADAR_RPM), interval=60.0)


class _Transient(Exception):
    """Fallo reintentable (red / 429 / 5xx)."""


def _u(*parts: str) -> str:
    return "/".join([CFG.RADAR_API_BASE.rstrip("/")] + [p.strip("/") for p in parts if p])


def _normalize(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    symbol = raw.get("symbol")
    chain = raw.get("chain")
    if not symbol or not chain:
        return None
    return {
        "symbol": str(symbol),
        "name": str(raw.get("name") or symbol),
        "chain": str(chain),
        "price_usd": safe_float(raw.get("priceUsd")),
        "change_24h_pct": safe_float(raw.get("change24hPct")),
    }


@tenacity.retry(
    wait=tenacity.wait_fixed(2),
    stop=tenacity.stop_after_attempt(CFG.QUOTE_MAX_TRIES),
    retry=tenacity.retry_if_exception_type(_Transient),
    reraise=True,
)
async def _fetch_payload(sess: aiohttp.ClientSession) -> Any:
    async with RADAR_LIMITER:
        try:
            async with sess.get(
                _u("api/tokens"),
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=CFG.QUOTE_TIMEOUT_S),
            ) as r:
                if r.status in _RETRY_STATUS:
                    raise _Transient(f"HTTP {r.status}")
                if r.status != 200:
                    raise QuoteSourceError(f"API error {r.status}")
                return await r.json()
        except aiohttp.ClientError as exc:
            raise _Transient(str(exc)) from exc


async def fetch_tokens(session: Optional[aiohttp.ClientSession] = None) -> List[Dict[str, Any]]:
    """Lista normalizada de cotizaciones. Lanza QuoteSourceError si el feed falla."""
    if (hit := cache_get(_CACHE_KEY)) is not None:
        return hit

    try:
        if session is not None:
            data = await _fetch_payload(session)
        else:
            async with aiohttp.ClientSession() as sess:
                data = await _fetch_payload(sess)
    except _Transient as exc:
        raise QuoteSourceError(f"radar feed unavailable: {exc}") from exc

    if not isinstance(data, dict) or not data.get("ok") or not isinstance(data.get("tokens"), list):
        log.warning("[radar] payload inesperado; 0 tokens")
        cache_set(_CACHE_KEY, [], ttl=CFG.QUOTE_TTL_NIL)
        return []

    tokens = [t for t in (_normalize(x) for x in data["tokens"] if isinstance(x, dict)) if t]
    cache_set(_CACHE_KEY, tokens, ttl=CFG.QUOTE_TTL_OK)
    log.debug("[radar] %d tokens", len(tokens))
    return tokens


__all__ = ["fetch_tokens", "RADAR_LIMITER"]
