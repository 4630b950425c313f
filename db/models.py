# memeradar/db/models.py
"""
Declaración de tablas SQLAlchemy (async).

• KVEntry – almacén clave/valor JSON del estado de la app
            (watchlist, positions, alerts, app_settings, user_profile)

Notas
─────
• `value` es texto JSON tal cual lo produce `state.app_state`; la BD no
  conoce su forma.
• Los DateTime son timezone-aware (UTC).
"""
from __future__ import annotations

import datetime as _dt

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


# ───────────────────────── helpers ─────────────────────────
def _utcnow() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


# ───────────────────────── KVEntry ─────────────────────────
class KVEntry(Base):
    __tablename__ = "kv_entries"

    key:   Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[_dt.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<KVEntry {self.key} ({len(self.value or '')} bytes)>"
