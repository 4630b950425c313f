# memeradar/utils/logger.py
"""
utils.logger
~~~~~~~~~~~~
• Rotación horaria con run-id incremental
• Filtro anti-spam que suprime repeticiones idénticas ≤ 30 s
• Helper warn_if_no_quote()
• `log_portfolio(summary)` → imprime los KPIs de la cartera en una línea
"""
from __future__ import annotations

import datetime as dt
import logging
import pathlib
import re
import time
from typing import Optional

from config.config import CFG

# ——————————————————— formato base ———————————————————
_LOG_FORMAT = "%(asctime)s  %(levelname)-7s %(name)s: %(message)s"
_DATE_FMT   = "%H:%M:%S"

# ——————————————————— anti-spam filter ——————————————————
class DedupFilter(logging.Filter):
    """
    Suprime repetición exacta del mismo mensaje + level en ≤ `window` s.
    """

    def __init__(self, window: float = 30.0) -> None:
        super().__init__()
        self._window = window
        self._cache: dict[str, float] = {}

    def filter(self, record: logging.LogRecord) -> bool:   # noqa: D401
        key = f"{record.levelno}:{record.getMessage()}"
        now = time.time()
        last = self._cache.get(key)
        self._cache[key] = now
        return last is None or (now - last) > self._window


# ——————————————————— run-id helper ——————————————————
def _next_run_id(logs_path: pathlib.Path, today_prefix: str) -> int:
    pat = re.compile(fr"^{today_prefix}\d{{4}}-(\d+)\.txt$")
    run_ids = [
        int(m.group(1))
        for f in logs_path.iterdir()
        if (m := pat.match(f.name))
    ]
    return max(run_ids, default=0) + 1


# ——————————————————— file-handler ——————————————————
class HourlySplitFileHandler(logging.Handler):
    """
    Un fichero por hora (`yymmddHH00-<run>.txt`); el run-id no cambia
    durante el proceso.
    """
    def __init__(self, logs_path: pathlib.Path, run_id: int) -> None:
        super().__init__()
        self.logs_path = logs_path
        self.run_id = run_id
        self.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FMT))
        self._open_file()

    def _open_file(self) -> None:
        now = dt.datetime.now()
        self._period_start = now.replace(minute=0, second=0, microsecond=0)
        fname = f"{self._period_start:%y%m%d%H%M}-{self.run_id}.txt"
        self._file = open(self.logs_path / fname, "a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if dt.datetime.now() - self._period_start >= dt.timedelta(hours=1):
            self._file.close()
            self._open_file()
        self._file.write(self.format(record) + "\n")
        self._file.flush()

    def close(self) -> None:
        try:
            if not self._file.closed:
                self._file.close()
        finally:
            super().close()


# ——————————————————— observabilidad ——————————————————
def warn_if_no_quote(token_id: str, *, context: str = "") -> None:
    """Warning (deduplicado por el filtro) si un token llega sin precio válido."""
    logging.getLogger("data").warning("Sin cotización para %s (%s)", token_id, context)


def log_portfolio(summary, *, stale: Optional[int] = None) -> None:
    """
    Resumen compacto de la cartera.

    Parameters
    ----------
    summary : portfolio.pnl.PortfolioSummary
    stale : int, optional
        Nº de posiciones valoradas con un precio caducado.
    """
    tpl = (
        "Portfolio | positions={positions}  invested=${invested:,.2f}  "
        "value=${value:,.2f}  pnl=${pnl:+,.2f} ({pct:+.2f}%)"
    )
    msg = tpl.format(
        positions=summary.positions,
        invested=summary.total_invested,
        value=summary.total_value,
        pnl=summary.unrealized_pnl,
        pct=summary.pnl_pct,
    )
    if stale:
        msg += f"  stale={stale}"
    logging.getLogger("portfolio").info(msg)

# ——————————————————— init público ——————————————————
def enable_file_logging(logs_path: Optional[pathlib.Path] = None) -> int:
    logs_path = logs_path or CFG.LOG_PATH
    logs_path.mkdir(parents=True, exist_ok=True)

    today_prefix = dt.datetime.now().strftime("%y%m%d")
    run_id = _next_run_id(logs_path, today_prefix)

    root = logging.getLogger()
    handler = HourlySplitFileHandler(logs_path, run_id)
    handler.addFilter(DedupFilter())          # anti-spam
    root.addHandler(handler)
    root.setLevel(getattr(logging, CFG.LOG_LEVEL, logging.INFO))
    return run_id


__all__ = ["DedupFilter", "HourlySplitFileHandler", "enable_file_logging", "warn_if_no_quote", "log_portfolio"]
