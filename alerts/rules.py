# memeradar/alerts/rules.py
"""
Reglas de alerta por umbral (solo datos; este repo no las evalúa).

Campos: token (id + snapshot de nombre/símbolo/address/cadena), métrica,
operador (>, <, %), umbral numérico, frecuencia, habilitada y fecha de alta.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping

from utils.data_utils import safe_float
from utils.time import utc_iso


class AlertMetric(str, enum.Enum):
    PRICE_ACTION = "Price Action"
    VOLUME_SPIKE = "Volume Spike"
    LIQUIDITY_CHANGE = "Liquidity Change"
    WHALE_MOVEMENT = "Whale Movement"
    # nombres antiguos que siguen en datos guardados
    VOLUME_24H = "Volume (24h)"
    PRICE_MOVE = "Price Move"


class AlertFrequency(str, enum.Enum):
    REAL_TIME = "Real-time"
    FIVE_MIN = "5m"
    FIFTEEN_MIN = "15m"
    ONE_HOUR = "1h"


class AlertOperator(str, enum.Enum):
    GREATER_THAN = ">"
    LESS_THAN = "<"
    CHANGE_PCT = "%"


@dataclass(frozen=True)
class AlertRule:
    id: str
    token_id: str
    token_name: str
    token_symbol: str
    token_address: str
    chain: str
    type: AlertMetric
    operator: AlertOperator
    threshold: float
    frequency: AlertFrequency = AlertFrequency.REAL_TIME
    is_enabled: bool = True
    created_at: str = field(default_factory=utc_iso)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tokenId": self.token_id,
            "tokenName": self.token_name,
            "tokenSymbol": self.token_symbol,
            "tokenAddress": self.token_address,
            "chain": self.chain,
            "type": self.type.value,
            "operator": self.operator.value,
            "threshold": self.threshold,
            "frequency": self.frequency.value,
            "isEnabled": self.is_enabled,
            "createdAtIso": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AlertRule":
        threshold = safe_float(raw.get("threshold"))
        if threshold is None:
            raise ValueError(f"alert {raw.get('id')!r}: invalid threshold")
        return cls(
            id=str(raw["id"]),
            token_id=str(raw["tokenId"]),
            token_name=str(raw.get("tokenName") or ""),
            token_symbol=str(raw.get("tokenSymbol") or ""),
            token_address=str(raw.get("tokenAddress") or ""),
            chain=str(raw.get("chain") or ""),
            type=AlertMetric(raw.get("type")),
            operator=AlertOperator(raw.get("operator")),
            threshold=threshold,
            frequency=AlertFrequency(raw.get("frequency") or AlertFrequency.REAL_TIME.value),
            is_enabled=bool(raw.get("isEnabled", True)),
            created_at=str(raw.get("createdAtIso") or ""),
        )


__all__ = ["AlertMetric", "AlertFrequency", "AlertOperator", "AlertRule"]
