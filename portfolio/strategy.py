# memeradar/portfolio/strategy.py
"""
Clasificador de estrategias de salida: lookup sobre la tabla fija de
`config.exits`. Puramente informativo; no ejecuta ventas.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from config.exits import EXIT_STRATEGIES, ExitStrategyRule
from portfolio.models import ExitStrategyId
from utils.errors import ConfigError


@dataclass(frozen=True)
class StrategyDescription:
    id: ExitStrategyId
    label: str
    description: str
    milestones: Tuple[str, ...]
    rules: Tuple[ExitStrategyRule, ...]
    stop_loss_pct: Optional[float] = None


def describe_strategy(strategy_id: Union[ExitStrategyId, str]) -> StrategyDescription:
    key = strategy_id.value if isinstance(strategy_id, ExitStrategyId) else str(strategy_id)
    preset = EXIT_STRATEGIES.get(key)
    if preset is None:
        raise ConfigError(f"unknown exit strategy {strategy_id!r}")
    return StrategyDescription(
        id=ExitStrategyId(key),
        label=preset.label,
        description=preset.description,
        milestones=tuple(preset.milestones),
        rules=tuple(preset.rules),
        stop_loss_pct=preset.stop_loss_pct,
    )


def list_strategies() -> List[StrategyDescription]:
    return [describe_strategy(k) for k in EXIT_STRATEGIES]


__all__ = ["StrategyDescription", "describe_strategy", "list_strategies"]
