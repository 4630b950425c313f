# memeradar/utils/price_service.py
"""
Libro de cotizaciones: último precio conocido por token, con marca de tiempo.

Fuente:
    fetcher.radar_api.fetch_tokens()  (TTL-cache + back-off en el propio fetcher)

Comportamiento ante fallos
──────────────────────────
• `refresh()` nunca lanza: si el feed cae (QuoteSourceError) se registra un
  warning y se conservan los precios anteriores.
• Un precio se considera *stale* si tiene más de CFG.QUOTE_STALE_S segundos;
  se sigue sirviendo (la UI decide si lo marca), pero se avisa en el log.
• Precios no finitos o negativos se ignoran.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple

import aiohttp

from config import CFG
from fetcher import radar_api
from utils.errors import QuoteSourceError
from utils.logger import warn_if_no_quote
from utils.time import age_seconds, utc_now
from utils.token_catalog import TokenCatalog, TokenRef

log = logging.getLogger("price_service")


class QuoteBook:
    """Precio USD + instante de la última actualización, por token id."""

    def __init__(self) -> None:
        self._quotes: Dict[str, Tuple[float, datetime]] = {}

    def __len__(self) -> int:
        return len(self._quotes)

    def __contains__(self, token_id: object) -> bool:
        return token_id in self._quotes

    # —— lectura ——
    def get_price(self, token_id: str) -> Optional[float]:
        hit = self._quotes.get(token_id)
        return hit[0] if hit else None

    def updated_at(self, token_id: str) -> Optional[datetime]:
        hit = self._quotes.get(token_id)
        return hit[1] if hit else None

    def is_stale(self, token_id: str, now: Optional[datetime] = None) -> bool:
        """True si no hay precio o si es más viejo que QUOTE_STALE_S."""
        ts = self.updated_at(token_id)
        if ts is None:
            return True
        return age_seconds(ts, now) > CFG.QUOTE_STALE_S

    # —— escritura ——
    def update(self, token_id: str, price: Optional[float], ts: Optional[datetime] = None) -> bool:
        if price is None or not math.isfinite(price) or price < 0:
            return False
        self._quotes[token_id] = (float(price), ts or utc_now())
        return True

    def seed_from_catalog(self, tokens: Iterable[TokenRef], ts: Optional[datetime] = None) -> int:
        """Carga precios iniciales (p.ej. catálogo embebido). Devuelve cuántos."""
        return sum(1 for t in tokens if self.update(t.id, t.price, ts))

    async def refresh(
        self,
        catalog: Optional[TokenCatalog] = None,
        session: Optional[aiohttp.ClientSession] = None,
        *,
        now: Optional[datetime] = None,
    ) -> TokenCatalog:
        """
        Descarga cotizaciones, actualiza el libro y devuelve el catálogo
        fusionado (los tokens del feed sustituyen a los existentes por id).
        """
        base = catalog if catalog is not None else TokenCatalog()
        try:
            quotes = await radar_api.fetch_tokens(session)
        except QuoteSourceError as exc:
            log.warning("[quotes] feed no disponible (%s); se mantienen %d precios", exc, len(self))
            return base

        ts = now or utc_now()
        fresh = [TokenRef.from_quote(q) for q in quotes]
        updated = 0
        for tok in fresh:
            if self.update(tok.id, tok.price, ts):
                updated += 1
            else:
                warn_if_no_quote(tok.id, context="refresh")
        log.debug("[quotes] %d/%d precios actualizados", updated, len(fresh))
        return base.merged(fresh)


__all__ = ["QuoteBook"]
