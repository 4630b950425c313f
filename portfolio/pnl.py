# memeradar/portfolio/pnl.py
"""
P&L no realizado de una posición (función pura) y resumen de cartera.

    pnl_usd = quantity * current_price - investment_usd
    pnl_pct = pnl_usd / investment_usd * 100      (0 si investment_usd == 0)

Sin precio (`current_price=None`, feed caído o token sin cotización) se usa el
último precio conocido de la posición; si tampoco lo hay, se reporta 0 con
`available=False`. Nunca lanza ni devuelve NaN/inf.
"""
from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from portfolio.models import Position

PriceLookup = Callable[[str], Optional[float]]


@dataclass(frozen=True)
class PnL:
    pnl_usd: float
    pnl_pct: float
    current_price_usd: float
    available: bool = True


@dataclass(frozen=True)
class PortfolioSummary:
    total_invested: float
    total_value: float
    unrealized_pnl: float
    pnl_pct: float
    positions: int


def _usable(price: Optional[float]) -> bool:
    return price is not None and math.isfinite(price) and price >= 0


def _pct(pnl_usd: float, invested: float) -> float:
    return pnl_usd / invested * 100.0 if invested > 0 else 0.0


def compute_pnl(position: Position, current_price: Optional[float]) -> PnL:
    price = current_price if _usable(current_price) else None
    if price is None:
        last = position.current_price_usd
        if not (_usable(last) and last > 0):
            return PnL(pnl_usd=0.0, pnl_pct=0.0, current_price_usd=0.0, available=False)
        price = last

    pnl_usd = position.quantity * price - position.investment_usd
    return PnL(
        pnl_usd=pnl_usd,
        pnl_pct=_pct(pnl_usd, position.investment_usd),
        current_price_usd=price,
    )


def with_pnl(position: Position, current_price: Optional[float]) -> Position:
    """Copia de `position` con la caché derivada recalculada."""
    pnl = compute_pnl(position, current_price)
    return dataclasses.replace(
        position,
        current_price_usd=pnl.current_price_usd,
        pnl_usd=pnl.pnl_usd,
        pnl_pct=pnl.pnl_pct,
    )


def summarize(positions: Iterable[Position], price_of: PriceLookup) -> PortfolioSummary:
    """Totales de cartera (KPIs): inversión, valor actual y P&L no realizado."""
    invested = value = 0.0
    count = 0
    for pos in positions:
        pnl = compute_pnl(pos, price_of(pos.token_id))
        invested += pos.investment_usd
        value += pos.quantity * pnl.current_price_usd
        count += 1
    unrealized = value - invested
    return PortfolioSummary(
        total_invested=invested,
        total_value=value,
        unrealized_pnl=unrealized,
        pnl_pct=_pct(unrealized, invested),
        positions=count,
    )


__all__ = ["PnL", "PortfolioSummary", "compute_pnl", "with_pnl", "summarize", "PriceLookup"]
