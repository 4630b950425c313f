"""Perfil de usuario mostrado en la cabecera (nombre, avatar, plan)."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from utils.errors import InvalidInput


@dataclass(frozen=True)
class UserProfile:
    name: str = "Alex Trader"
    avatar: str = ""
    plan: str = "Pro Plan"

    def to_dict(self) -> dict:
        return {"name": self.name, "avatar": self.avatar, "plan": self.plan}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "UserProfile":
        return cls(
            name=str(raw.get("name") or cls.name),
            avatar=str(raw.get("avatar") or ""),
            plan=str(raw.get("plan") or cls.plan),
        )


def update_profile(profile: UserProfile, *, name: Optional[str] = None, avatar: Optional[str] = None) -> UserProfile:
    if name is not None and not name.strip():
        raise InvalidInput("display name cannot be empty")
    changes = {}
    if name is not None:
        changes["name"] = name.strip()
    if avatar is not None:
        changes["avatar"] = avatar
    return dataclasses.replace(profile, **changes)
