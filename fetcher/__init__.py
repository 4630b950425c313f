# memeradar/fetcher/__init__.py
"""
Wrappers de APIs externas:

    from fetcher import radar_api

Alias de conveniencia:

    from fetcher import fetch_tokens      # ≡ radar_api.fetch_tokens
"""

from importlib import import_module
from types import ModuleType
from typing import Dict

# ───────────────────────── módulos públicos ─────────────────────────
_modules = (
    "radar_api",
)

globals_: Dict[str, ModuleType] = globals()
for _m in _modules:
    globals_[_m] = import_module(f"{__name__}.{_m}")

from .radar_api import fetch_tokens  # noqa: E402

__all__ = list(_modules) + ["fetch_tokens"]
