"""
Estado de la app + adaptador de sesión:

    from state import RadarSession, load_state
"""
from .app_state import ALL_KEYS, AppState, load_state  # noqa: F401
from .session import RadarSession                      # noqa: F401

__all__ = ["ALL_KEYS", "AppState", "load_state", "RadarSession"]
