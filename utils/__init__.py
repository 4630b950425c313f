"""
Utilidades auxiliares desacopladas del núcleo de cartera:

    from utils import price_service, token_catalog
"""

from importlib import import_module
from types import ModuleType
from typing import Dict

_modules = (
    "errors",
    "time",
    "data_utils",
    "simple_cache",
    "rate_limiter",
    "logger",
    "token_catalog",
)

globals_: Dict[str, ModuleType] = globals()
for _m in _modules:
    globals_[_m] = import_module(f"{__name__}.{_m}")

__all__ = list(_modules)
