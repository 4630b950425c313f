# config/exits.py
"""
Centraliza las **estrategias de salida** que se pueden asociar a una posición.

Cada estrategia es una etiqueta informativa: el bot NO vende de forma
automática. Sirve para mostrar al usuario su plan (hitos) junto a la posición.

Estrategias disponibles:
    • conservative → asegura pronto (1.5x / 2x) con stop-loss ajustado.
    • standard     → recupera la inversión en 2x y deja correr el resto.
    • moonshot     → aguanta hasta múltiplos altos y conserva un moonbag.

`rules` replica el formato {target_multiple, sell_pct} del dashboard; el
stop-loss se expresa en % negativo sobre el precio medio de entrada.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ExitStrategyRule:
    target_multiple: float   # múltiplo sobre el precio de entrada (2.0 = 2x)
    sell_pct: float          # % de la posición a vender en ese múltiplo


@dataclass(frozen=True)
class ExitStrategyPreset:
    label: str
    description: str
    milestones: Tuple[str, ...]
    rules: Tuple[ExitStrategyRule, ...]
    stop_loss_pct: Optional[float] = None


# ───────────── tabla fija (orden = orden de presentación) ─────────────
EXIT_STRATEGIES: dict[str, ExitStrategyPreset] = {
    "conservative": ExitStrategyPreset(
        label="Conservative",
        description="Lock in profits early and cut losers fast.",
        milestones=(
            "Sell 25% at 1.5x",
            "Sell 50% at 2x",
            "Stop-loss at -10%",
        ),
        rules=(
            ExitStrategyRule(target_multiple=1.5, sell_pct=25.0),
            ExitStrategyRule(target_multiple=2.0, sell_pct=50.0),
        ),
        stop_loss_pct=-10.0,
    ),
    "standard": ExitStrategyPreset(
        label="Standard",
        description="Recover the initial investment at 2x and let the rest ride.",
        milestones=(
            "Sell 50% at 2x (initial recovered)",
            "Sell 25% at 5x",
            "Stop-loss at -25%",
        ),
        rules=(
            ExitStrategyRule(target_multiple=2.0, sell_pct=50.0),
            ExitStrategyRule(target_multiple=5.0, sell_pct=25.0),
        ),
        stop_loss_pct=-25.0,
    ),
    "moonshot": ExitStrategyPreset(
        label="Moonshot",
        description="High conviction: hold for large multiples and keep a moonbag.",
        milestones=(
            "Sell 25% at 5x",
            "Sell 25% at 10x",
            "Hold 50% as moonbag",
        ),
        rules=(
            ExitStrategyRule(target_multiple=5.0, sell_pct=25.0),
            ExitStrategyRule(target_multiple=10.0, sell_pct=25.0),
        ),
    ),
}

# Export público
__all__ = [
    "ExitStrategyRule",
    "ExitStrategyPreset",
    "EXIT_STRATEGIES",
]
