"""
Piezas de infraestructura: filtro anti-spam, resumen de cartera en el log,
fichero horario y token-bucket del cliente HTTP.
"""
import asyncio
import logging
import pathlib
import sys
import types

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

import utils.rate_limiter as rate_limiter
from portfolio.pnl import PortfolioSummary
from utils.logger import DedupFilter, enable_file_logging, log_portfolio
from utils.rate_limiter import RateLimiter


def _record(msg):
    return logging.LogRecord("x", logging.WARNING, __file__, 1, msg, None, None)


def test_dedup_filter_suppresses_repeats():
    f = DedupFilter(window=30.0)
    assert f.filter(_record("Sin cotización para sol:wif"))
    assert not f.filter(_record("Sin cotización para sol:wif"))
    assert f.filter(_record("Sin cotización para sol:bonk"))


def test_log_portfolio_line(caplog):
    caplog.set_level(logging.INFO, logger="portfolio")
    log_portfolio(PortfolioSummary(1500.0, 1750.0, 250.0, 16.6667, 2), stale=1)
    assert "positions=2" in caplog.text
    assert "pnl=$+250.00" in caplog.text
    assert "stale=1" in caplog.text


def test_enable_file_logging_writes_hourly_file(tmp_path):
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    run_id = enable_file_logging(tmp_path)
    try:
        assert run_id == 1
        logging.getLogger("test").warning("hola radar")
        files = list(tmp_path.glob(f"*-{run_id}.txt"))
        assert len(files) == 1
        assert "hola radar" in files[0].read_text(encoding="utf-8")
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
                h.close()
        root.setLevel(level)


# ───────────────────────── RateLimiter ─────────────────────────
def test_limiter_rejects_bad_args():
    with pytest.raises(ValueError):
        RateLimiter(0)
    with pytest.raises(ValueError):
        RateLimiter(1, interval=0)


@pytest.mark.asyncio
async def test_limiter_sleeps_until_refill(monkeypatch):
    clock = {"t": 100.0}
    sleeps = []

    async def fake_sleep(sec):
        sleeps.append(sec)
        clock["t"] += sec

    monkeypatch.setattr(rate_limiter, "time", types.SimpleNamespace(monotonic=lambda: clock["t"]))
    monkeypatch.setattr(rate_limiter, "asyncio", types.SimpleNamespace(sleep=fake_sleep, Lock=asyncio.Lock))

    lim = RateLimiter(max_calls=2, interval=60.0)
    async with lim:
        pass
    await lim.acquire()
    assert lim.available == 0
    assert sleeps == []

    clock["t"] += 10
    await lim.acquire()
    assert sleeps == [pytest.approx(50.0)]
    assert lim.available == 1
