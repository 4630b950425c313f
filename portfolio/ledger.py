# memeradar/portfolio/ledger.py
"""
Ledger de posiciones: transición pura de estado por transacción.

Reglas (contabilidad de coste medio, no FIFO/LIFO)
──────────────────────────────────────────────────
• OPEN    qty = invest/price ; basis = invest ; avg = price
• ADD     qty += invest/price ; basis += invest ; avg = basis/qty
• REDUCE  sold = value/price (rechaza si sold > qty)
          basis -= sold * avg (mínimo 0) ; qty -= sold ; avg sin cambios
• ADJUST  override absoluto: basis = invest ; avg = price ; qty = invest/price
• CLOSE   la posición desaparece (sin registro en historial)

El P&L realizado en REDUCE no se contabiliza: solo se retira coste base al
precio medio original.

Tras cada transacción (salvo CLOSE) se recalcula el P&L con el precio actual,
de modo que la posición devuelta está lista para mostrarse. Ninguna función
hace I/O; la persistencia la gestiona `state.session`.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Tuple

from config import CFG
from portfolio.models import (
    ExitStrategyId,
    HistoryItem,
    Position,
    Transaction,
    TxnType,
    new_id,
)
from portfolio.pnl import with_pnl
from utils.data_utils import require_positive
from utils.errors import InsufficientQuantity, InvalidInput
from utils.time import utc_iso
from utils.token_catalog import TokenRef

log = logging.getLogger("ledger")


def _strategy(value, default: ExitStrategyId) -> ExitStrategyId:
    if value is None or value == "":
        return default
    try:
        return ExitStrategyId(value)
    except ValueError as exc:
        raise InvalidInput(f"unknown exit strategy {value!r}") from exc


def _history(kind: TxnType, price: float, qty: float, value: float, now: Optional[datetime]) -> HistoryItem:
    return HistoryItem(type=kind, price_usd=price, quantity=qty, value_usd=value, timestamp=utc_iso(now))


# ───────────────────────── transición pura ─────────────────────────
def apply_transaction(
    existing: Optional[Position],
    txn: Transaction,
    *,
    token: Optional[TokenRef] = None,
    current_price: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Optional[Position]:
    """
    Aplica `txn` sobre `existing` y devuelve la posición nueva (o None en
    CLOSE). Lanza InvalidInput / InsufficientQuantity sin efectos laterales.
    """
    try:
        kind = TxnType(txn.type)
    except ValueError as exc:
        raise InvalidInput(f"unknown transaction type {txn.type!r}") from exc

    if kind is TxnType.CLOSE:
        if existing is None:
            raise InvalidInput("CLOSE requires an open position")
        return None

    invested = require_positive(txn.invested_amount, "invested_amount")
    price = require_positive(txn.execution_price, "execution_price")
    txn_qty = invested / price

    if kind is TxnType.OPEN:
        if existing is not None:
            raise InvalidInput(f"position {existing.id} already open; use ADD")
        if token is None:
            raise InvalidInput("OPEN requires a token reference")
        stamp = utc_iso(now)
        pos = Position(
            id=new_id(),
            token_id=token.id,
            token_name=token.name,
            token_symbol=token.symbol,
            chain=token.chain,
            investment_usd=invested,
            entry_price_usd=price,
            quantity=txn_qty,
            exit_strategy_id=_strategy(txn.strategy, ExitStrategyId(CFG.DEFAULT_EXIT_STRATEGY)),
            history=(_history(kind, price, txn_qty, invested, now),),
            entry_date=stamp,
        )
        log.info("[ledger] OPEN %s qty=%.6g @ %.8g (basis %.2f)", token.symbol, txn_qty, price, invested)
        return with_pnl(pos, current_price)

    if existing is None:
        raise InvalidInput(f"{kind.value} requires an open position")

    if kind is TxnType.ADD:
        new_qty = existing.quantity + txn_qty
        new_invest = existing.investment_usd + invested
        updated = dataclasses.replace(
            existing,
            quantity=new_qty,
            investment_usd=new_invest,
            entry_price_usd=new_invest / new_qty,
        )

    elif kind is TxnType.REDUCE:
        held = existing.quantity
        tol = held * CFG.DUST_REL_TOL
        if txn_qty > held + tol:
            raise InsufficientQuantity(requested=txn_qty, available=held)
        new_qty = held - txn_qty
        new_invest = existing.investment_usd - txn_qty * existing.entry_price_usd
        if new_qty <= tol:
            # venta total: sin residuo flotante
            new_qty, new_invest = 0.0, 0.0
        updated = dataclasses.replace(
            existing,
            quantity=new_qty,
            investment_usd=max(0.0, new_invest),
        )

    elif kind is TxnType.ADJUST:
        updated = dataclasses.replace(
            existing,
            investment_usd=invested,
            entry_price_usd=price,
            quantity=txn_qty,
            exit_strategy_id=_strategy(txn.strategy, existing.exit_strategy_id),
        )

    else:  # pragma: no cover
        raise InvalidInput(f"unsupported transaction {kind!r}")

    item = _history(kind, price, txn_qty, invested, now)
    updated = dataclasses.replace(updated, history=(item,) + tuple(existing.history))
    log.info(
        "[ledger] %s %s qty=%.6g basis=%.2f avg=%.8g",
        kind.value, existing.token_symbol, updated.quantity,
        updated.investment_usd, updated.entry_price_usd,
    )
    return with_pnl(updated, current_price)


# ───────────────────────── colección ─────────────────────────
@dataclass(frozen=True)
class Ledger:
    """Conjunto de posiciones abiertas (más reciente primero)."""

    positions: Tuple[Position, ...] = ()

    def __len__(self) -> int:
        return len(self.positions)

    def __iter__(self):
        return iter(self.positions)

    def get(self, position_id: str) -> Optional[Position]:
        return next((p for p in self.positions if p.id == position_id), None)

    def for_token(self, token_id: str) -> Optional[Position]:
        return next((p for p in self.positions if p.token_id == token_id), None)

    def token_ids(self) -> frozenset[str]:
        return frozenset(p.token_id for p in self.positions)

    def replace(self, position: Position) -> "Ledger":
        """Sustituye la posición con el mismo id (conserva el orden)."""
        if self.get(position.id) is None:
            raise InvalidInput(f"unknown position {position.id!r}")
        return Ledger(tuple(position if p.id == position.id else p for p in self.positions))

    def open(
        self,
        token: TokenRef,
        txn: Transaction,
        *,
        current_price: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Tuple["Ledger", Position]:
        if txn.type != TxnType.OPEN:
            raise InvalidInput(f"expected OPEN, got {txn.type}")
        pos = apply_transaction(None, txn, token=token, current_price=current_price, now=now)
        return Ledger((pos,) + self.positions), pos  # type: ignore[arg-type]

    def apply(
        self,
        position_id: str,
        txn: Transaction,
        *,
        current_price: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Tuple["Ledger", Optional[Position]]:
        existing = self.get(position_id)
        if existing is None:
            raise InvalidInput(f"unknown position {position_id!r}")
        pos = apply_transaction(existing, txn, current_price=current_price, now=now)
        if pos is None:
            return self.close(position_id), None
        return self.replace(pos), pos

    def close(self, position_id: str) -> "Ledger":
        if self.get(position_id) is None:
            raise InvalidInput(f"unknown position {position_id!r}")
        log.info("[ledger] CLOSE %s", position_id)
        return Ledger(tuple(p for p in self.positions if p.id != position_id))

    def refresh_pnl(self, price_of: Callable[[str], Optional[float]]) -> "Ledger":
        return Ledger(tuple(with_pnl(p, price_of(p.token_id)) for p in self.positions))

    # —— persistencia (forma JSON) ——
    def to_list(self) -> list:
        return [p.to_dict() for p in self.positions]

    @classmethod
    def from_list(cls, raw: Iterable) -> "Ledger":
        return cls(tuple(Position.from_dict(r) for r in raw or ()))


__all__ = ["apply_transaction", "Ledger"]
