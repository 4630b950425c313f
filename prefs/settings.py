# memeradar/prefs/settings.py
"""
Settings de la app y editor con borrador / snapshot guardado.

• AppSettings     – snapshot inmutable (pesos, umbrales, auto-refresh, perfil).
• SettingsEditor  – mantiene `draft` (lo que el usuario toca) y `saved` (lo
                    último confirmado). `is_dirty` compara ambos. `save()`
                    devuelve el snapshot a persistir; escribirlo es cosa del
                    adaptador (`state.session`).

Elegir un perfil de riesgo sobrescribe pesos + umbrales de golpe (sin pasar
por `rebalance`). Mover un slider a mano deja el perfil en "custom".
"""
from __future__ import annotations

import dataclasses
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from config import CFG
from config.risk import DEFAULT_RISK_PROFILE, REFRESH_INTERVALS, RISK_PRESETS
from prefs.weights import Weights, rebalance
from utils.data_utils import digits_only_int
from utils.errors import ConfigError, InvalidInput

log = logging.getLogger("settings")


class RiskProfile(str, enum.Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"
    CUSTOM = "custom"


# índice numérico del selector del dashboard (0/1/2)
_PROFILE_INDEX = (RiskProfile.CONSERVATIVE, RiskProfile.BALANCED, RiskProfile.AGGRESSIVE)


@dataclass(frozen=True)
class Thresholds:
    min_liquidity: int = 50_000
    whale_buy: int = 5_000

    def to_dict(self) -> dict:
        return {"minLiquidity": self.min_liquidity, "whaleBuy": self.whale_buy}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Thresholds":
        return cls(
            min_liquidity=digits_only_int(raw.get("minLiquidity", raw.get("min_liquidity", 0))),
            whale_buy=digits_only_int(raw.get("whaleBuy", raw.get("whale_buy", 0))),
        )


@dataclass(frozen=True)
class AppSettings:
    weights: Weights = field(default_factory=Weights)
    thresholds: Thresholds = field(default_factory=Thresholds)
    auto_refresh: bool = True
    refresh_interval: str = field(default_factory=lambda: CFG.REFRESH_INTERVAL_DEFAULT)
    risk_profile: RiskProfile = RiskProfile(DEFAULT_RISK_PROFILE)

    @property
    def refresh_seconds(self) -> int:
        return REFRESH_INTERVALS[self.refresh_interval]

    def to_dict(self) -> dict:
        return {
            "weights": self.weights.to_dict(),
            "thresholds": self.thresholds.to_dict(),
            "autoRefresh": self.auto_refresh,
            "refreshInterval": self.refresh_interval,
            "riskProfile": self.risk_profile.value,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AppSettings":
        profile_raw = raw.get("riskProfile", DEFAULT_RISK_PROFILE)
        if isinstance(profile_raw, int) and not isinstance(profile_raw, bool):
            profile = _PROFILE_INDEX[profile_raw] if 0 <= profile_raw < 3 else RiskProfile.CUSTOM
        else:
            profile = RiskProfile(str(profile_raw))
        interval = str(raw.get("refreshInterval") or CFG.REFRESH_INTERVAL_DEFAULT)
        if interval not in REFRESH_INTERVALS:
            raise InvalidInput(f"unknown refresh interval {interval!r}")
        return cls(
            weights=Weights.from_dict(raw.get("weights") or {}),
            thresholds=Thresholds.from_dict(raw.get("thresholds") or {}),
            auto_refresh=bool(raw.get("autoRefresh", True)),
            refresh_interval=interval,
            risk_profile=profile,
        )


def apply_preset(settings: AppSettings, profile: RiskProfile | str) -> AppSettings:
    prof = RiskProfile(profile)
    preset = RISK_PRESETS.get(prof.value)
    if preset is None:
        raise ConfigError(f"no preset for risk profile {prof.value!r}")
    return dataclasses.replace(
        settings,
        risk_profile=prof,
        weights=Weights(**preset["weights"]),
        thresholds=Thresholds(**preset["thresholds"]),
    )


class SettingsEditor:
    """Borrador editable de AppSettings con detección de cambios."""

    def __init__(self, saved: Optional[AppSettings] = None) -> None:
        self.saved: AppSettings = saved or AppSettings()
        self.draft: AppSettings = self.saved

    @property
    def is_dirty(self) -> bool:
        return self.draft != self.saved

    def set_weight(self, key: str, value: Any) -> AppSettings:
        self.draft = dataclasses.replace(
            self.draft,
            weights=rebalance(self.draft.weights, key, value),
            risk_profile=RiskProfile.CUSTOM,
        )
        return self.draft

    def choose_profile(self, profile: RiskProfile | str | int) -> AppSettings:
        if isinstance(profile, int) and not isinstance(profile, bool):
            if not 0 <= profile < len(_PROFILE_INDEX):
                raise ConfigError(f"unknown risk profile index {profile}")
            profile = _PROFILE_INDEX[profile]
        self.draft = apply_preset(self.draft, profile)
        return self.draft

    def set_threshold(self, key: str, raw: Any) -> AppSettings:
        if key not in ("min_liquidity", "whale_buy"):
            raise InvalidInput(f"unknown threshold {key!r}")
        th = dataclasses.replace(self.draft.thresholds, **{key: digits_only_int(raw)})
        self.draft = dataclasses.replace(self.draft, thresholds=th)
        return self.draft

    def toggle_auto_refresh(self) -> AppSettings:
        self.draft = dataclasses.replace(self.draft, auto_refresh=not self.draft.auto_refresh)
        return self.draft

    def set_refresh_interval(self, interval: str) -> AppSettings:
        if interval not in REFRESH_INTERVALS:
            raise InvalidInput(f"unknown refresh interval {interval!r}")
        self.draft = dataclasses.replace(self.draft, refresh_interval=interval)
        return self.draft

    def discard(self) -> AppSettings:
        self.draft = self.saved
        return self.draft

    def save(self) -> AppSettings:
        self.saved = self.draft
        log.info("[settings] guardado perfil=%s pesos=%s", self.saved.risk_profile.value, self.saved.weights.to_dict())
        return self.saved


__all__ = [
    "RiskProfile",
    "Thresholds",
    "AppSettings",
    "apply_preset",
    "SettingsEditor",
]
