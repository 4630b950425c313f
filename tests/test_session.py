# memeradar/tests/test_session.py
"""
Adaptador de sesión: operaciones del núcleo + persistencia fire-and-forget.
"""
import asyncio
import logging
import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

import fetcher.radar_api as radar_api
from db import MemoryKVStore
from portfolio.reconciler import TrackState
from prefs.settings import RiskProfile
from state import RadarSession, load_state
from utils.errors import InsufficientQuantity, InvalidToken, QuoteSourceError
from utils.token_catalog import TokenCatalog, TokenRef

CAT = TokenCatalog([
    TokenRef(id="sol:wif", name="dogwifhat", symbol="$WIF", chain="SOL", price=2.5),
    TokenRef(id="sol:bonk", name="Bonk", symbol="$BONK", chain="SOL", price=0.00002),
])


class BrokenKV(MemoryKVStore):
    async def save(self, key, value):
        raise OSError("disk full")


class SlowKV(MemoryKVStore):
    """Cede el loop a mitad de escritura y anota solapes por clave."""

    def __init__(self):
        super().__init__()
        self.busy = set()
        self.overlaps = 0

    async def save(self, key, value):
        if key in self.busy:
            self.overlaps += 1
        self.busy.add(key)
        await asyncio.sleep(0)
        await super().save(key, value)
        self.busy.discard(key)


@pytest.mark.asyncio
async def test_full_flow_persists_and_reloads():
    kv = MemoryKVStore()
    radar = RadarSession(kv, catalog=CAT)

    assert radar.toggle_watch("sol:wif") is TrackState.WATCHED_ONLY
    pos = radar.open_position("sol:wif", 100, 2.0)
    assert radar.state.watchlist == ()
    assert pos.pnl_usd == pytest.approx(25)

    before = radar.state
    with pytest.raises(InsufficientQuantity):
        radar.reduce(pos.id, 1000, 2.0)
    assert radar.state is before

    pos = radar.add(pos.id, 100, 4.0)
    assert pos.quantity == pytest.approx(75)
    assert pos.investment_usd == pytest.approx(200)

    rule = radar.create_alert("sol:bonk", "Whale Movement", ">", "5000")
    radar.toggle_alert(rule.id)
    radar.editor.choose_profile("aggressive")
    radar.save_settings()
    radar.update_profile(name="Satoshi")

    await radar.flush()
    assert set(kv.data) == {"watchlist", "positions", "alerts", "app_settings", "user_profile"}

    loaded = await load_state(kv, radar.price_of)
    assert loaded == radar.state
    assert loaded.settings.risk_profile is RiskProfile.AGGRESSIVE
    assert loaded.alerts.get(rule.id).is_enabled is False

    radar.close_position(pos.id)
    await radar.flush()
    again = await load_state(kv)
    assert len(again.ledger) == 0
    assert again.watchlist == ("sol:wif",)


@pytest.mark.asyncio
async def test_unknown_token_is_rejected():
    radar = RadarSession(MemoryKVStore(), catalog=CAT)
    with pytest.raises(InvalidToken):
        radar.open_position("sol:nope", 100, 1)
    with pytest.raises(InvalidToken):
        radar.create_alert("sol:nope", "Price Action", ">", 1)


@pytest.mark.asyncio
async def test_write_errors_are_logged_not_raised(caplog):
    radar = RadarSession(BrokenKV(), catalog=CAT)
    radar.toggle_watch("sol:bonk")
    await radar.flush()
    assert radar.state.watchlist == ("sol:bonk",)
    assert "disk full" in caplog.text


def test_without_loop_writes_wait_for_flush():
    kv = MemoryKVStore()
    radar = RadarSession(kv, catalog=CAT)
    radar.toggle_watch("sol:wif")
    assert kv.data == {}
    asyncio.run(radar.flush())
    assert kv.data["watchlist"] == '["sol:wif"]'


@pytest.mark.asyncio
async def test_refresh_quotes_recomputes_pnl(monkeypatch):
    async def fake_fetch(session=None):
        return [{"symbol": "$WIF", "name": "dogwifhat", "chain": "SOL", "price_usd": 4.0}]

    kv = MemoryKVStore()
    radar = RadarSession(kv, catalog=CAT)
    pos = radar.open_position("sol:wif", 100, 2.0)

    monkeypatch.setattr(radar_api, "fetch_tokens", fake_fetch)
    summary = await radar.refresh_quotes()
    assert summary.unrealized_pnl == pytest.approx(100)
    assert radar.state.ledger.get(pos.id).current_price_usd == 4.0

    async def broken(session=None):
        raise QuoteSourceError("down")

    monkeypatch.setattr(radar_api, "fetch_tokens", broken)
    summary = await radar.refresh_quotes()
    assert summary.unrealized_pnl == pytest.approx(100)
    await radar.flush()


@pytest.mark.asyncio
async def test_load_recomputes_pnl_with_fresh_quotes():
    kv = MemoryKVStore()
    radar = RadarSession(kv, catalog=CAT)
    radar.open_position("sol:wif", 100, 2.0)
    await radar.flush()

    cheaper = TokenCatalog([TokenRef(id="sol:wif", name="dogwifhat", symbol="$WIF", chain="SOL", price=1.0)])
    reloaded = await RadarSession.load(kv, catalog=cheaper)
    (pos,) = reloaded.state.ledger
    assert pos.pnl_usd == pytest.approx(-50)


@pytest.mark.asyncio
async def test_runner_single_pass(monkeypatch, caplog):
    import run_radar

    async def fake_fetch(session=None):
        return [{"symbol": "$WIF", "name": "dogwifhat", "chain": "SOL", "price_usd": 3.0}]

    monkeypatch.setattr(radar_api, "fetch_tokens", fake_fetch)
    caplog.set_level(logging.INFO, logger="portfolio")
    kv = MemoryKVStore()
    radar = RadarSession(kv, catalog=CAT)
    radar.open_position("sol:wif", 100, 2.0)

    await run_radar.main_loop(radar, once=True)
    assert "positions=1" in caplog.text
    assert "positions" in kv.data


@pytest.mark.asyncio
async def test_writes_of_same_key_are_serialized_and_last_wins():
    kv = SlowKV()
    radar = RadarSession(kv, catalog=CAT)
    pos = radar.open_position("sol:wif", 100, 2.0)
    await asyncio.sleep(0)            # el escritor ya está a mitad de save()
    radar.add(pos.id, 100, 4.0)
    await asyncio.sleep(0)
    radar.reduce(pos.id, 25, 2.0)
    await radar.flush()

    assert kv.overlaps == 0
    loaded = await load_state(kv)
    assert loaded.ledger.get(pos.id).quantity == pytest.approx(62.5)
