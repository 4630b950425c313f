"""
utils.errors
~~~~~~~~~~~~
Taxonomía de errores del núcleo.

Todas las operaciones del núcleo son síncronas: o devuelven un estado nuevo
y coherente, o lanzan una de estas excepciones dejando el estado intacto.
La capa de UI traduce cada tipo a un mensaje para el usuario.
"""
from __future__ import annotations


class RadarError(Exception):
    """Base de todos los errores propios."""


class InvalidInput(RadarError, ValueError):
    """Campo numérico mal formado, no finito o ≤ 0 (o transición imposible)."""


class InvalidThreshold(InvalidInput):
    """El umbral de una alerta no es un número finito."""


class InvalidToken(RadarError, LookupError):
    """La alerta/posición referencia un token que no existe en el catálogo."""


class InsufficientQuantity(RadarError):
    """REDUCE pide vender más cantidad de la que hay en cartera."""

    def __init__(self, requested: float, available: float) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"cannot sell more than you own (requested={requested:.8g}, "
            f"available={available:.8g})"
        )


class ConfigError(RadarError):
    """Identificador de estrategia (u otra tabla fija) desconocido."""


class QuoteSourceError(RadarError):
    """El feed de precios no respondió tras los reintentos."""


__all__ = [
    "RadarError",
    "InvalidInput",
    "InvalidThreshold",
    "InvalidToken",
    "InsufficientQuantity",
    "ConfigError",
    "QuoteSourceError",
]
