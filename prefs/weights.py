# memeradar/prefs/weights.py
"""
Normalizador de pesos del scoring (tech / security / social).

Invariante: los tres pesos son enteros en [0, 100] y suman exactamente 100
tras cada llamada a `rebalance`.

Algoritmo al mover un slider:
    1. clamp del valor nuevo a [0, 100]
    2. remaining = 100 - nuevo
    3. si los otros dos suman 0 → reparto a partes iguales (el impar va al
       primero)
    4. si no → a' = round(a / total_otros * remaining) ; b' = remaining - a'
       (el segundo sale por resta: nunca dos redondeos independientes)
    5. clamp ≥ 0 de ambos
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from utils.data_utils import safe_float
from utils.errors import InvalidInput

WEIGHT_KEYS: Tuple[str, ...] = ("tech", "security", "social")


@dataclass(frozen=True)
class Weights:
    tech: int = 40
    security: int = 35
    social: int = 25

    @property
    def total(self) -> int:
        return self.tech + self.security + self.social

    def to_dict(self) -> dict:
        return {"tech": self.tech, "security": self.security, "social": self.social}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Weights":
        vals = {k: _clamp_int(raw.get(k, 0)) for k in WEIGHT_KEYS}
        w = cls(**vals)
        if w.total != 100:
            raise InvalidInput(f"weights must sum to 100 (got {w.total})")
        return w


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _clamp_int(value: Any) -> int:
    v = safe_float(value)
    if v is None:
        raise InvalidInput(f"weight is not a number ({value!r})")
    return max(0, min(100, _round_half_up(v)))


def rebalance(weights: Weights, changed_key: str, new_value: Any) -> Weights:
    if changed_key not in WEIGHT_KEYS:
        raise InvalidInput(f"unknown weight {changed_key!r}")

    value = _clamp_int(new_value)
    remaining = 100 - value
    first, second = (k for k in WEIGHT_KEYS if k != changed_key)
    a, b = getattr(weights, first), getattr(weights, second)
    other_total = a + b

    if other_total == 0:
        a_new = remaining - remaining // 2
    else:
        a_new = _round_half_up(a / other_total * remaining)
    b_new = remaining - a_new

    out = {changed_key: value, first: max(0, a_new), second: max(0, b_new)}
    return Weights(**out)


__all__ = ["Weights", "WEIGHT_KEYS", "rebalance"]
