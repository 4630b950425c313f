"""
Preferencias del usuario:

    from prefs import weights, settings, profile
"""

from importlib import import_module
from types import ModuleType
from typing import Dict

_modules = ("weights", "settings", "profile")

globals_: Dict[str, ModuleType] = globals()
for _m in _modules:
    globals_[_m] = import_module(f"{__name__}.{_m}")

__all__ = list(_modules)
