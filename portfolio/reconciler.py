# memeradar/portfolio/reconciler.py
"""
Reconciliador watchlist ↔ posiciones.

Un token está en uno de tres estados:
    UNTRACKED      → ni en watchlist ni con posición
    WATCHED_ONLY   → en watchlist, sin posición abierta
    HAS_POSITION   → con posición abierta (esté o no en la watchlist)

Dos políticas de vista sobre los mismos datos, cada una consistente consigo
misma:
    • favorites_view → exclusiva: solo tokens vigilados SIN posición.
    • combined_view  → unión: filas de posición primero, después vigilados.

`promote` abre posición y saca el token de la watchlist; `demote` cierra la
posición y lo devuelve a la watchlist para que no se pierda el seguimiento.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from portfolio.ledger import Ledger
from portfolio.models import Position, Transaction
from utils.errors import InvalidInput
from utils.token_catalog import TokenCatalog, TokenRef

log = logging.getLogger("reconciler")

Watchlist = Tuple[str, ...]


class TrackState(str, enum.Enum):
    UNTRACKED = "untracked"
    WATCHED_ONLY = "watched-only"
    HAS_POSITION = "has-open-position"


@dataclass(frozen=True)
class TrackedItem:
    token_id: str
    state: TrackState
    position: Optional[Position] = None
    token: Optional[TokenRef] = None

    @property
    def is_position(self) -> bool:
        return self.position is not None


# ───────────────────────── consultas ─────────────────────────
def classify(token_id: str, watchlist: Iterable[str], ledger: Ledger) -> TrackState:
    if ledger.for_token(token_id) is not None:
        return TrackState.HAS_POSITION
    if token_id in tuple(watchlist):
        return TrackState.WATCHED_ONLY
    return TrackState.UNTRACKED


def tracked_token_ids(watchlist: Iterable[str], ledger: Ledger) -> frozenset[str]:
    """Unión watchlist ∪ tokens con posición = todo lo seguido."""
    return frozenset(watchlist) | ledger.token_ids()


def favorites_view(watchlist: Watchlist, ledger: Ledger, catalog: TokenCatalog) -> List[TokenRef]:
    held = ledger.token_ids()
    return [
        tok for tid in watchlist
        if tid not in held and (tok := catalog.get(tid)) is not None
    ]


def combined_view(
    watchlist: Watchlist, ledger: Ledger, catalog: Optional[TokenCatalog] = None
) -> List[TrackedItem]:
    items = [
        TrackedItem(
            token_id=p.token_id,
            state=TrackState.HAS_POSITION,
            position=p,
            token=catalog.get(p.token_id) if catalog else None,
        )
        for p in ledger
    ]
    seen = {i.token_id for i in items}
    for tid in watchlist:
        if tid in seen:
            continue
        tok = catalog.get(tid) if catalog else None
        if catalog is not None and tok is None:
            continue
        seen.add(tid)
        items.append(TrackedItem(token_id=tid, state=TrackState.WATCHED_ONLY, token=tok))
    return items


# ───────────────────────── mutaciones ─────────────────────────
def toggle_watch(watchlist: Watchlist, token_id: str) -> Watchlist:
    if token_id in watchlist:
        return tuple(t for t in watchlist if t != token_id)
    return tuple(watchlist) + (token_id,)


def promote(
    watchlist: Watchlist,
    ledger: Ledger,
    token: TokenRef,
    txn: Transaction,
    *,
    current_price: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Tuple[Watchlist, Ledger, Position]:
    if ledger.for_token(token.id) is not None:
        raise InvalidInput(f"token {token.id} already has an open position")
    new_ledger, pos = ledger.open(token, txn, current_price=current_price, now=now)
    new_watch = tuple(t for t in watchlist if t != token.id)
    log.info("[reconciler] %s → posición abierta (fuera de favoritos)", token.symbol)
    return new_watch, new_ledger, pos


def demote(watchlist: Watchlist, ledger: Ledger, position_id: str) -> Tuple[Watchlist, Ledger]:
    pos = ledger.get(position_id)
    if pos is None:
        raise InvalidInput(f"unknown position {position_id!r}")
    new_ledger = ledger.close(position_id)
    new_watch = watchlist if pos.token_id in watchlist else tuple(watchlist) + (pos.token_id,)
    log.info("[reconciler] %s → posición cerrada (vuelve a watchlist)", pos.token_symbol)
    return new_watch, new_ledger


__all__ = [
    "TrackState",
    "TrackedItem",
    "Watchlist",
    "classify",
    "tracked_token_ids",
    "favorites_view",
    "combined_view",
    "toggle_watch",
    "promote",
    "demote",
]
