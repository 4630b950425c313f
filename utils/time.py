"""
Utilidades de tiempo.

Funciones clave
───────────────
utc_now()                 → datetime timezone-aware en UTC.
to_utc(dt)                → convierte cualquier datetime a UTC (aware).
utc_iso(dt=None)          → ISO-8601 con sufijo 'Z' (formato del historial).
age_seconds(dt, now=None) → segundos transcurridos desde `dt` (≥ 0).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


# ──────────────────────── básicos UTC ─────────────────────────
def utc_now() -> datetime:
    """Shorthand para `datetime.now(timezone.utc)` (aware)."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convierte `dt` a UTC (aware). Si `dt` es naïve, se asume hora local.
    """
    if dt.tzinfo is None:
        dt = dt.astimezone()  # interpreta naïve como local
    return dt.astimezone(timezone.utc)


def utc_iso(dt: Optional[datetime] = None) -> str:
    """ISO-8601 en UTC con milisegundos y 'Z', como `Date.toISOString()`."""
    dt = to_utc(dt) if dt is not None else utc_now()
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def age_seconds(dt: datetime, now: Optional[datetime] = None) -> float:
    """Segundos desde `dt` hasta `now` (o ahora); nunca negativo."""
    ref = now or utc_now()
    return max(0.0, (to_utc(ref) - to_utc(dt)).total_seconds())
