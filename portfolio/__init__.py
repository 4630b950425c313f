"""
Entrada única para el sub-paquete *portfolio*:

    from portfolio import ledger, pnl, strategy, reconciler
"""

from importlib import import_module
from types import ModuleType
from typing import Dict

_modules = ("models", "pnl", "ledger", "strategy", "reconciler")

globals_: Dict[str, ModuleType] = globals()
for _m in _modules:
    globals_[_m] = import_module(f"{__name__}.{_m}")

__all__ = list(_modules)
