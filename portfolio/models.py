# memeradar/portfolio/models.py
"""
Entidades de la cartera simulada (dataclasses inmutables).

• Position    – posición abierta sobre un token; se sustituye entera en cada
                transacción (nunca se muta campo a campo).
• HistoryItem – registro inmutable de una transacción (OPEN/ADD/REDUCE/ADJUST).
• Transaction – petición de cambio que llega del formulario.

Notas de esquema
────────────────
• `history` se guarda **más reciente primero** (mismo orden que la vista).
• `current_price_usd` / `pnl_usd` / `pnl_pct` son caché derivada: se persisten
  como último valor conocido y se recalculan al cargar con un precio fresco.
• Las claves JSON (to_dict/from_dict) son camelCase, idénticas al dashboard.
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from utils.data_utils import safe_float
from utils.time import utc_iso


class TxnType(str, enum.Enum):
    OPEN = "OPEN"
    ADD = "ADD"
    REDUCE = "REDUCE"
    ADJUST = "ADJUST"
    CLOSE = "CLOSE"


class ExitStrategyId(str, enum.Enum):
    CONSERVATIVE = "conservative"
    STANDARD = "standard"
    MOONSHOT = "moonshot"


def new_id() -> str:
    return uuid.uuid4().hex


def _num(val: Any) -> float:
    """float finito o 0.0 (campos persistidos corruptos no tumban la carga)."""
    out = safe_float(val)
    return out if out is not None else 0.0


# ───────────────────────── HistoryItem ─────────────────────────
@dataclass(frozen=True)
class HistoryItem:
    type: TxnType
    price_usd: float
    quantity: float
    value_usd: float
    timestamp: str = field(default_factory=utc_iso)
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "dateIso": self.timestamp,
            "type": self.type.value,
            "priceUsd": self.price_usd,
            "quantity": self.quantity,
            "valueUsd": self.value_usd,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "HistoryItem":
        return cls(
            id=str(raw.get("id") or new_id()),
            timestamp=str(raw.get("dateIso") or raw.get("timestamp") or ""),
            type=TxnType(str(raw.get("type", "OPEN")).upper()),
            price_usd=_num(raw.get("priceUsd")),
            quantity=_num(raw.get("quantity")),
            value_usd=_num(raw.get("valueUsd")),
        )


# ───────────────────────── Transaction ─────────────────────────
@dataclass(frozen=True)
class Transaction:
    """
    `invested_amount` y `execution_price` se aceptan tal cual vienen del
    formulario (str o número); el ledger los valida.

    • OPEN/ADD  → USD invertidos al precio de ejecución.
    • REDUCE    → valor USD vendido al precio de ejecución.
    • ADJUST    → totales absolutos (inversión y precio medio).
    """
    type: TxnType
    invested_amount: Any = None
    execution_price: Any = None
    strategy: Optional[ExitStrategyId] = None

    @classmethod
    def open(cls, invested, price, strategy=None) -> "Transaction":
        return cls(TxnType.OPEN, invested, price, strategy)

    @classmethod
    def add(cls, invested, price) -> "Transaction":
        return cls(TxnType.ADD, invested, price)

    @classmethod
    def reduce(cls, sold_value, price) -> "Transaction":
        return cls(TxnType.REDUCE, sold_value, price)

    @classmethod
    def adjust(cls, investment, entry_price, strategy=None) -> "Transaction":
        return cls(TxnType.ADJUST, investment, entry_price, strategy)

    @classmethod
    def close(cls) -> "Transaction":
        return cls(TxnType.CLOSE)


# ───────────────────────── Position ─────────────────────────
@dataclass(frozen=True)
class Position:
    id: str
    token_id: str
    token_name: str
    token_symbol: str
    chain: str
    investment_usd: float                # coste base restante
    entry_price_usd: float               # precio medio ponderado
    quantity: float
    exit_strategy_id: ExitStrategyId = ExitStrategyId.STANDARD
    history: Tuple[HistoryItem, ...] = ()
    entry_date: str = field(default_factory=utc_iso)
    entry_type: str = "investment_and_entryPrice"

    # —— caché derivada (último valor conocido) ——
    current_price_usd: float = 0.0
    pnl_usd: float = 0.0
    pnl_pct: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tokenId": self.token_id,
            "tokenName": self.token_name,
            "tokenSymbol": self.token_symbol,
            "chain": self.chain,
            "entryType": self.entry_type,
            "investmentUsd": self.investment_usd,
            "entryPriceUsd": self.entry_price_usd,
            "quantity": self.quantity,
            "entryDateIso": self.entry_date,
            "currentPriceUsd": self.current_price_usd,
            "pnlUsd": self.pnl_usd,
            "pnlPct": self.pnl_pct,
            "exitStrategyId": self.exit_strategy_id.value,
            "history": [h.to_dict() for h in self.history],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Position":
        try:
            strategy = ExitStrategyId(str(raw.get("exitStrategyId") or "standard"))
        except ValueError:
            strategy = ExitStrategyId.STANDARD
        return cls(
            id=str(raw.get("id") or new_id()),
            token_id=str(raw["tokenId"]),
            token_name=str(raw.get("tokenName") or ""),
            token_symbol=str(raw.get("tokenSymbol") or ""),
            chain=str(raw.get("chain") or ""),
            entry_type=str(raw.get("entryType") or "investment_and_entryPrice"),
            investment_usd=max(0.0, _num(raw.get("investmentUsd"))),
            entry_price_usd=_num(raw.get("entryPriceUsd")),
            quantity=max(0.0, _num(raw.get("quantity"))),
            entry_date=str(raw.get("entryDateIso") or ""),
            current_price_usd=_num(raw.get("currentPriceUsd")),
            pnl_usd=_num(raw.get("pnlUsd")),
            pnl_pct=_num(raw.get("pnlPct")),
            exit_strategy_id=strategy,
            history=tuple(HistoryItem.from_dict(h) for h in raw.get("history") or ()),
        )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Position {self.token_symbol or self.token_id} "
            f"qty={self.quantity:.6g} basis={self.investment_usd:.2f} "
            f"avg={self.entry_price_usd:.8g}>"
        )


__all__ = [
    "TxnType",
    "ExitStrategyId",
    "HistoryItem",
    "Transaction",
    "Position",
    "new_id",
]
