"""
Acceso rápido a la configuración:

    from config import CFG, exits, risk, DB_URI

Re-exporta todo lo definido en config.config y los sub-módulos exits/risk.
"""
from __future__ import annotations

from importlib import import_module
from types import ModuleType

_cfg_mod: ModuleType = import_module("config.config")
globals().update(                            # expone CFG y las constantes
    {k: v for k, v in _cfg_mod.__dict__.items() if not k.startswith("__")}
)
exits: ModuleType = import_module("config.exits")  # noqa: F401
risk: ModuleType = import_module("config.risk")    # noqa: F401

# ── construye __all__ con los símbolos públicos de config.config + sub-módulos
__all__: list[str] = [
    name for name in _cfg_mod.__dict__ if not name.startswith("_")
] + ["exits", "risk"]
