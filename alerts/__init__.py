"""
Reglas de alerta (CRUD, sin motor de evaluación).

    from alerts import AlertRuleStore, AlertMetric, AlertOperator
"""
from .rules import AlertFrequency, AlertMetric, AlertOperator, AlertRule  # noqa: F401
from .store import AlertRuleStore                                          # noqa: F401

__all__ = ["AlertFrequency", "AlertMetric", "AlertOperator", "AlertRule", "AlertRuleStore"]
