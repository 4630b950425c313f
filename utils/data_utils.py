# memeradar/utils/data_utils.py
"""
Coerción de campos numéricos que llegan de formularios o del feed.

Los formularios del dashboard mandan strings ("1,000.5", "", "abc"); aquí se
convierten a float y se valida que sean finitos. Reglas:

  • None / "" / texto no numérico        → no convertible
  • NaN / ±inf                           → no convertible
  • "," solo como separador de miles    ("1,234.5" → 1234.5)
  • cualquier otra coma                  → no convertible ("0,5", "1,23")
"""

from __future__ import annotations

import re
from typing import Any, Optional

import numpy as np

from utils.errors import InvalidInput

_NON_DIGITS = re.compile(r"[^0-9]")
_THOUSANDS = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d*)?$")


def safe_float(val: Any) -> Optional[float]:
    """Convierte a float finito o devuelve None si no es convertible."""
    if val is None or isinstance(val, bool):
        return None
    try:
        if isinstance(val, str):
            val = val.strip()
            if "," in val:
                if not _THOUSANDS.match(val):
                    return None
                val = val.replace(",", "")
            if not val:
                return None
        out = float(val)
    except (TypeError, ValueError):
        return None
    return out if np.isfinite(out) else None


def require_positive(val: Any, field: str) -> float:
    """
    Devuelve `val` como float finito y > 0; si no, lanza InvalidInput
    indicando el campo.
    """
    out = safe_float(val)
    if out is None:
        raise InvalidInput(f"{field}: not a finite number ({val!r})")
    if out <= 0:
        raise InvalidInput(f"{field}: must be > 0 (got {out})")
    return out


def digits_only_int(raw: Any) -> int:
    """
    Limpia todo lo que no sea dígito y devuelve int (0 si queda vacío).
    Mismo criterio que los inputs de umbrales: "$50,000" → 50000.
    """
    cleaned = _NON_DIGITS.sub("", str(raw if raw is not None else ""))
    return int(cleaned) if cleaned else 0


__all__ = ["safe_float", "require_positive", "digits_only_int"]
