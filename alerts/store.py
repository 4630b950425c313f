# memeradar/alerts/store.py
"""
Almacén CRUD de reglas de alerta (colección inmutable, más reciente primero).

Cada operación devuelve un AlertRuleStore nuevo. Validación en create/update:
    • el token debe existir en el catálogo        → InvalidToken
    • el umbral debe ser un número finito         → InvalidThreshold
Se permiten duplicados (varias reglas sobre la misma métrica/token).
Ids desconocidos en update/toggle/remove dejan la colección igual.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

from alerts.rules import AlertFrequency, AlertMetric, AlertOperator, AlertRule
from portfolio.models import new_id
from utils.data_utils import safe_float
from utils.errors import InvalidInput, InvalidThreshold
from utils.time import utc_iso
from utils.token_catalog import TokenCatalog

log = logging.getLogger("alerts")


def _threshold(raw: Any) -> float:
    val = safe_float(raw)
    if val is None:
        raise InvalidThreshold(f"threshold is not a valid number ({raw!r})")
    return val


def _enum(cls, raw: Any):
    try:
        return cls(raw)
    except ValueError as exc:
        raise InvalidInput(f"invalid {cls.__name__}: {raw!r}") from exc


@dataclass(frozen=True)
class AlertRuleStore:
    rules: Tuple[AlertRule, ...] = ()

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def get(self, rule_id: str) -> Optional[AlertRule]:
        return next((r for r in self.rules if r.id == rule_id), None)

    def for_token(self, token_id: str) -> Tuple[AlertRule, ...]:
        return tuple(r for r in self.rules if r.token_id == token_id)

    def enabled(self) -> Tuple[AlertRule, ...]:
        return tuple(r for r in self.rules if r.is_enabled)

    # ───────────── CRUD ─────────────
    def create(
        self,
        catalog: TokenCatalog,
        token_id: str,
        *,
        metric: AlertMetric | str,
        operator: AlertOperator | str,
        threshold: Any,
        frequency: AlertFrequency | str = AlertFrequency.REAL_TIME,
        now: Optional[datetime] = None,
    ) -> "AlertRuleStore":
        tok = catalog.resolve(token_id)
        rule = AlertRule(
            id=new_id(),
            token_id=tok.id,
            token_name=tok.name,
            token_symbol=tok.symbol,
            token_address=tok.address,
            chain=tok.chain,
            type=_enum(AlertMetric, metric),
            operator=_enum(AlertOperator, operator),
            threshold=_threshold(threshold),
            frequency=_enum(AlertFrequency, frequency),
            created_at=utc_iso(now),
        )
        log.info("[alerts] nueva regla %s %s %s %s", tok.symbol, rule.type.value, rule.operator.value, rule.threshold)
        return AlertRuleStore((rule,) + self.rules)

    def update(
        self,
        catalog: TokenCatalog,
        rule_id: str,
        *,
        token_id: str,
        metric: AlertMetric | str,
        operator: AlertOperator | str,
        threshold: Any,
        frequency: AlertFrequency | str,
    ) -> "AlertRuleStore":
        tok = catalog.resolve(token_id)
        value = _threshold(threshold)
        existing = self.get(rule_id)
        if existing is None:
            return self
        updated = dataclasses.replace(
            existing,
            token_id=tok.id,
            token_name=tok.name,
            token_symbol=tok.symbol,
            token_address=tok.address,
            chain=tok.chain or existing.chain,
            type=_enum(AlertMetric, metric),
            operator=_enum(AlertOperator, operator),
            threshold=value,
            frequency=_enum(AlertFrequency, frequency),
        )
        return AlertRuleStore(tuple(updated if r.id == rule_id else r for r in self.rules))

    def toggle_enabled(self, rule_id: str) -> "AlertRuleStore":
        return AlertRuleStore(tuple(
            dataclasses.replace(r, is_enabled=not r.is_enabled) if r.id == rule_id else r
            for r in self.rules
        ))

    def remove(self, rule_id: str) -> "AlertRuleStore":
        return AlertRuleStore(tuple(r for r in self.rules if r.id != rule_id))

    # —— persistencia (forma JSON) ——
    def to_list(self) -> list:
        return [r.to_dict() for r in self.rules]

    @classmethod
    def from_list(cls, raw: Iterable) -> "AlertRuleStore":
        return cls(tuple(AlertRule.from_dict(r) for r in raw or ()))


__all__ = ["AlertRuleStore"]
