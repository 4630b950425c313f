# memeradar/state/session.py
"""
Adaptador fino entre el núcleo puro y el mundo exterior.

Cada operación:
    1. aplica la transición pura (ledger / reconciler / alertas / settings)
    2. recalcula P&L con el precio del QuoteBook
    3. sustituye `self.state` por el snapshot nuevo
    4. entrega las claves tocadas al almacén clave/valor (fire-and-forget,
       un escritor por clave: las escrituras de una misma clave no se solapan)

Si la transición lanza, `self.state` no cambia y no se escribe nada.
Los fallos de escritura se registran; nunca suben al núcleo. `flush()`
espera las escrituras pendientes (útil al salir y en tests).
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp

from alerts.rules import AlertFrequency
from portfolio import reconciler
from portfolio.models import ExitStrategyId, Position, Transaction
from portfolio.pnl import PortfolioSummary, summarize
from prefs.profile import update_profile
from prefs.settings import AppSettings, SettingsEditor
from state.app_state import (
    AppState,
    KEY_ALERTS,
    KEY_POSITIONS,
    KEY_PROFILE,
    KEY_SETTINGS,
    KEY_WATCHLIST,
    load_state,
)
from utils.errors import InvalidInput
from utils.price_service import QuoteBook
from utils.token_catalog import TokenCatalog, TokenRef

log = logging.getLogger("session")


class RadarSession:
    def __init__(
        self,
        kv,
        state: Optional[AppState] = None,
        *,
        catalog: Optional[TokenCatalog] = None,
        quotes: Optional[QuoteBook] = None,
    ) -> None:
        self.kv = kv
        self.state: AppState = state or AppState()
        self.catalog: TokenCatalog = catalog if catalog is not None else TokenCatalog()
        self.quotes: QuoteBook = quotes if quotes is not None else QuoteBook()
        if not len(self.quotes):
            self.quotes.seed_from_catalog(self.catalog)
        self.editor = SettingsEditor(self.state.settings)
        self._pending: Dict[str, Any] = {}
        self._writers: Dict[str, asyncio.Task] = {}

    @classmethod
    async def load(
        cls,
        kv,
        *,
        catalog: Optional[TokenCatalog] = None,
        quotes: Optional[QuoteBook] = None,
    ) -> "RadarSession":
        quotes = quotes if quotes is not None else QuoteBook()
        if catalog is not None and not len(quotes):
            quotes.seed_from_catalog(catalog)
        state = await load_state(kv, quotes.get_price)
        return cls(kv, state, catalog=catalog, quotes=quotes)

    # ───────────────────────── precios ─────────────────────────
    def price_of(self, token_id: str) -> Optional[float]:
        price = self.quotes.get_price(token_id)
        if price is None:
            tok = self.catalog.get(token_id)
            price = tok.price if tok else None
        return price

    async def refresh_quotes(self, session: Optional[aiohttp.ClientSession] = None) -> PortfolioSummary:
        """Descarga precios, recalcula P&L y persiste la caché de posiciones."""
        self.catalog = await self.quotes.refresh(self.catalog, session)
        self._set(ledger=self.state.ledger.refresh_pnl(self.price_of))
        self._persist(KEY_POSITIONS)
        return self.summary()

    def summary(self) -> PortfolioSummary:
        return summarize(self.state.ledger, self.price_of)

    def stale_positions(self, now: Optional[datetime] = None) -> List[Position]:
        return [p for p in self.state.ledger if self.quotes.is_stale(p.token_id, now)]

    # ───────────────────────── posiciones ─────────────────────────
    def open_position(
        self,
        token_id: str,
        invested: Any,
        price: Any,
        strategy: Optional[ExitStrategyId | str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Position:
        token: TokenRef = self.catalog.resolve(token_id)
        watch, ledger, pos = reconciler.promote(
            self.state.watchlist,
            self.state.ledger,
            token,
            Transaction.open(invested, price, strategy),
            current_price=self.price_of(token.id),
            now=now,
        )
        self._set(watchlist=watch, ledger=ledger)
        self._persist(KEY_POSITIONS, KEY_WATCHLIST)
        return pos

    def _apply(self, position_id: str, txn: Transaction, now: Optional[datetime]) -> Position:
        existing = self.state.ledger.get(position_id)
        if existing is None:
            raise InvalidInput(f"unknown position {position_id!r}")
        ledger, pos = self.state.ledger.apply(
            position_id, txn, current_price=self.price_of(existing.token_id), now=now
        )
        self._set(ledger=ledger)
        self._persist(KEY_POSITIONS)
        return pos  # type: ignore[return-value]

    def add(self, position_id: str, invested: Any, price: Any, *, now: Optional[datetime] = None) -> Position:
        return self._apply(position_id, Transaction.add(invested, price), now)

    def reduce(self, position_id: str, sold_value: Any, price: Any, *, now: Optional[datetime] = None) -> Position:
        return self._apply(position_id, Transaction.reduce(sold_value, price), now)

    def adjust(
        self,
        position_id: str,
        investment: Any,
        entry_price: Any,
        strategy: Optional[ExitStrategyId | str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Position:
        return self._apply(position_id, Transaction.adjust(investment, entry_price, strategy), now)

    def close_position(self, position_id: str) -> None:
        watch, ledger = reconciler.demote(self.state.watchlist, self.state.ledger, position_id)
        self._set(watchlist=watch, ledger=ledger)
        self._persist(KEY_POSITIONS, KEY_WATCHLIST)

    # ───────────────────────── watchlist ─────────────────────────
    def toggle_watch(self, token_id: str) -> reconciler.TrackState:
        self._set(watchlist=reconciler.toggle_watch(self.state.watchlist, token_id))
        self._persist(KEY_WATCHLIST)
        return self.track_state(token_id)

    def track_state(self, token_id: str) -> reconciler.TrackState:
        return reconciler.classify(token_id, self.state.watchlist, self.state.ledger)

    def favorites(self) -> List[TokenRef]:
        return reconciler.favorites_view(self.state.watchlist, self.state.ledger, self.catalog)

    def tracked(self) -> List[reconciler.TrackedItem]:
        return reconciler.combined_view(self.state.watchlist, self.state.ledger, self.catalog)

    # ───────────────────────── alertas ─────────────────────────
    def create_alert(
        self,
        token_id: str,
        metric,
        operator,
        threshold: Any,
        frequency=AlertFrequency.REAL_TIME,
        *,
        now: Optional[datetime] = None,
    ):
        alerts = self.state.alerts.create(
            self.catalog, token_id,
            metric=metric, operator=operator, threshold=threshold, frequency=frequency, now=now,
        )
        self._set(alerts=alerts)
        self._persist(KEY_ALERTS)
        return alerts.rules[0]

    def update_alert(self, rule_id: str, *, token_id: str, metric, operator, threshold: Any, frequency) -> None:
        self._set(alerts=self.state.alerts.update(
            self.catalog, rule_id,
            token_id=token_id, metric=metric, operator=operator, threshold=threshold, frequency=frequency,
        ))
        self._persist(KEY_ALERTS)

    def toggle_alert(self, rule_id: str) -> None:
        self._set(alerts=self.state.alerts.toggle_enabled(rule_id))
        self._persist(KEY_ALERTS)

    def remove_alert(self, rule_id: str) -> None:
        self._set(alerts=self.state.alerts.remove(rule_id))
        self._persist(KEY_ALERTS)

    # ───────────────────────── settings / perfil ─────────────────────────
    def save_settings(self) -> AppSettings:
        saved = self.editor.save()
        self._set(settings=saved)
        self._persist(KEY_SETTINGS)
        return saved

    def update_profile(self, *, name: Optional[str] = None, avatar: Optional[str] = None):
        self._set(profile=update_profile(self.state.profile, name=name, avatar=avatar))
        self._persist(KEY_PROFILE)
        return self.state.profile

    # ───────────────────────── persistencia ─────────────────────────
    def _set(self, **changes) -> None:
        self.state = dataclasses.replace(self.state, **changes)

    def _persist(self, *keys: str) -> None:
        """
        Programa la escritura del snapshot actual de `keys`.

        Un único escritor por clave: si ya hay uno en marcha, solo se
        actualiza el valor pendiente y el escritor lo recoge al terminar,
        así el último snapshot siempre es el que queda guardado.
        """
        for key in keys:
            self._pending[key] = self.state.dump(key)
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                continue  # sin loop: lo escribe el próximo flush()
            if key not in self._writers:
                self._writers[key] = loop.create_task(self._drain(key))

    async def _drain(self, key: str) -> None:
        try:
            while key in self._pending:
                await self._write(key, self._pending.pop(key))
        finally:
            self._writers.pop(key, None)

    async def _write(self, key: str, value: Any) -> None:
        try:
            await self.kv.save(key, value)
        except Exception as exc:  # noqa: BLE001
            log.error("[session] no se pudo guardar %s: %s", key, exc)

    async def flush(self) -> None:
        """Espera las escrituras en vuelo y envía las pendientes."""
        loop = asyncio.get_running_loop()
        while self._pending or self._writers:
            for key in list(self._pending):
                if key not in self._writers:
                    self._writers[key] = loop.create_task(self._drain(key))
            await asyncio.gather(*list(self._writers.values()))


__all__ = ["RadarSession"]
