# memeradar/state/app_state.py
"""
Estado explícito de la app y su forma persistida.

Claves del almacén clave/valor (JSON, camelCase como el dashboard):

    watchlist     → ["sol:pepe2", …]
    positions     → [Position.to_dict(), …]
    alerts        → [AlertRule.to_dict(), …]
    app_settings  → AppSettings.to_dict()
    user_profile  → UserProfile.to_dict()

Al cargar, una clave ausente o corrupta se sustituye por su valor por
defecto (se registra un warning, no se aborta la carga). La caché de P&L de
las posiciones se recalcula siempre con el precio que se pase.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from alerts.store import AlertRuleStore
from portfolio.ledger import Ledger
from portfolio.pnl import PriceLookup
from prefs.profile import UserProfile
from prefs.settings import AppSettings

log = logging.getLogger("state")

KEY_WATCHLIST = "watchlist"
KEY_POSITIONS = "positions"
KEY_ALERTS = "alerts"
KEY_SETTINGS = "app_settings"
KEY_PROFILE = "user_profile"

ALL_KEYS: Tuple[str, ...] = (KEY_WATCHLIST, KEY_POSITIONS, KEY_ALERTS, KEY_SETTINGS, KEY_PROFILE)


@dataclass(frozen=True)
class AppState:
    watchlist: Tuple[str, ...] = ()
    ledger: Ledger = field(default_factory=Ledger)
    alerts: AlertRuleStore = field(default_factory=AlertRuleStore)
    settings: AppSettings = field(default_factory=AppSettings)
    profile: UserProfile = field(default_factory=UserProfile)

    def dump(self, key: str) -> Any:
        """Forma JSON de una clave."""
        try:
            return _DUMPERS[key](self)
        except KeyError:
            raise KeyError(f"unknown state key {key!r}") from None

    def dump_all(self) -> Dict[str, Any]:
        return {k: self.dump(k) for k in ALL_KEYS}


def _watchlist(raw: Any) -> Tuple[str, ...]:
    if not isinstance(raw, list):
        raise TypeError("watchlist must be a list")
    out: list[str] = []
    for tid in raw:
        if isinstance(tid, str) and tid and tid not in out:
            out.append(tid)
    return tuple(out)


def _mapping(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, dict):
        raise TypeError("expected an object")
    return raw


_DUMPERS: Dict[str, Callable[[AppState], Any]] = {
    KEY_WATCHLIST: lambda s: list(s.watchlist),
    KEY_POSITIONS: lambda s: s.ledger.to_list(),
    KEY_ALERTS: lambda s: s.alerts.to_list(),
    KEY_SETTINGS: lambda s: s.settings.to_dict(),
    KEY_PROFILE: lambda s: s.profile.to_dict(),
}

_PARSERS: Dict[str, Callable[[Any], Any]] = {
    KEY_WATCHLIST: _watchlist,
    KEY_POSITIONS: Ledger.from_list,
    KEY_ALERTS: AlertRuleStore.from_list,
    KEY_SETTINGS: lambda raw: AppSettings.from_dict(_mapping(raw)),
    KEY_PROFILE: lambda raw: UserProfile.from_dict(_mapping(raw)),
}

_FIELDS = {
    KEY_WATCHLIST: "watchlist",
    KEY_POSITIONS: "ledger",
    KEY_ALERTS: "alerts",
    KEY_SETTINGS: "settings",
    KEY_PROFILE: "profile",
}


async def load_state(kv, price_of: Optional[PriceLookup] = None) -> AppState:
    """
    Lee todas las claves de `kv` (objeto con `async load(key)`).
    Errores de lectura/forma en una clave → valor por defecto de esa clave.
    """
    values: Dict[str, Any] = {}
    for key in ALL_KEYS:
        try:
            raw = await kv.load(key)
        except ValueError as exc:      # JSON corrupto
            log.warning("[state] clave %s ilegible (%s); se usa el valor por defecto", key, exc)
            continue
        if raw is None:
            continue
        try:
            values[_FIELDS[key]] = _PARSERS[key](raw)
        except (TypeError, ValueError, LookupError, AttributeError) as exc:
            log.warning("[state] clave %s con forma inválida (%s); se usa el valor por defecto", key, exc)

    state = AppState(**values)
    lookup = price_of or (lambda _tid: None)
    state = dataclasses.replace(state, ledger=state.ledger.refresh_pnl(lookup))
    log.info(
        "[state] cargado: %d posiciones, %d vigilados, %d alertas",
        len(state.ledger), len(state.watchlist), len(state.alerts),
    )
    return state


__all__ = [
    "AppState",
    "ALL_KEYS",
    "KEY_WATCHLIST",
    "KEY_POSITIONS",
    "KEY_ALERTS",
    "KEY_SETTINGS",
    "KEY_PROFILE",
    "load_state",
]
