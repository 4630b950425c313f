# config/risk.py
"""
Perfiles de riesgo del scoring (pesos tech/security/social + umbrales).

Seleccionar un perfil sobrescribe pesos y umbrales de golpe; los pesos
de cada preset suman exactamente 100.
"""

from __future__ import annotations

from typing import Dict

RISK_PRESETS: Dict[str, dict] = {
    "conservative": {
        "weights": {"tech": 20, "security": 70, "social": 10},
        "thresholds": {"min_liquidity": 100_000, "whale_buy": 10_000},
    },
    "balanced": {
        "weights": {"tech": 40, "security": 35, "social": 25},
        "thresholds": {"min_liquidity": 50_000, "whale_buy": 5_000},
    },
    "aggressive": {
        "weights": {"tech": 60, "security": 10, "social": 30},
        "thresholds": {"min_liquidity": 10_000, "whale_buy": 1_000},
    },
}

DEFAULT_RISK_PROFILE = "balanced"

# intervalos de auto-refresh admitidos → segundos
REFRESH_INTERVALS: Dict[str, int] = {"30s": 30, "1m": 60, "5m": 300}

__all__ = ["RISK_PRESETS", "DEFAULT_RISK_PROFILE", "REFRESH_INTERVALS"]
