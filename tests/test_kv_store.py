import asyncio
import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from db import KVEntry, MemoryKVStore, SqlKVStore, async_init_db, make_engine, make_sessionmaker, sqlite_uri
from prefs.settings import RiskProfile
from state import RadarSession
from state.app_state import ALL_KEYS, AppState, load_state
from utils.token_catalog import TokenCatalog, TokenRef


@pytest.mark.asyncio
async def test_sqlite_round_trip(tmp_path):
    engine = make_engine(sqlite_uri(tmp_path / "radar.db"))
    try:
        await async_init_db(engine)
        await async_init_db(engine)       # idempotente
        kv = SqlKVStore(make_sessionmaker(engine))

        assert await kv.load("watchlist") is None
        await kv.save("watchlist", ["sol:wif"])
        await kv.save("watchlist", ["sol:wif", "eth:pepe"])
        assert await kv.load("watchlist") == ["sol:wif", "eth:pepe"]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_corrupt_row_falls_back_to_default(tmp_path):
    engine = make_engine(sqlite_uri(tmp_path / "radar.db"))
    try:
        await async_init_db(engine)
        sm = make_sessionmaker(engine)
        kv = SqlKVStore(sm)
        await kv.save("user_profile", {"name": "Satoshi"})
        async with sm() as session:
            session.add(KVEntry(key="app_settings", value="{not json"))
            await session.commit()

        state = await load_state(kv)
        assert state.profile.name == "Satoshi"
        assert state.settings.risk_profile is RiskProfile.BALANCED
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_memory_store_wrong_shapes_use_defaults():
    kv = MemoryKVStore({
        "watchlist": '{"a": 1}',
        "positions": '[{"no_token_id": true}]',
        "alerts": '[{"id": "r1", "tokenId": "sol:wif", "type": "Price Action", "operator": ">", "threshold": "x"}]',
    })
    state = await load_state(kv)
    assert state == AppState()


@pytest.mark.asyncio
async def test_dump_all_then_load_is_stable():
    kv = MemoryKVStore()
    for key, value in AppState().dump_all().items():
        await kv.save(key, value)
    assert set(kv.data) == set(ALL_KEYS)
    assert await load_state(kv) == AppState()


@pytest.mark.asyncio
async def test_concurrent_saves_of_new_key_upsert(tmp_path):
    engine = make_engine(sqlite_uri(tmp_path / "radar.db"))
    try:
        await async_init_db(engine)
        kv = SqlKVStore(make_sessionmaker(engine))
        await asyncio.gather(*(kv.save("positions", [i]) for i in range(5)))
        assert await kv.load("positions") in ([i] for i in range(5))

        await kv.save("positions", ["last"])
        assert await kv.load("positions") == ["last"]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_back_to_back_ops_keep_latest_snapshot_in_sqlite(tmp_path):
    catalog = TokenCatalog([TokenRef(id="sol:wif", name="dogwifhat", symbol="$WIF", chain="SOL", price=2.5)])
    engine = make_engine(sqlite_uri(tmp_path / "radar.db"))
    try:
        await async_init_db(engine)
        kv = SqlKVStore(make_sessionmaker(engine))
        radar = RadarSession(kv, catalog=catalog)

        pos = radar.open_position("sol:wif", 100, 2.0)
        radar.add(pos.id, 100, 4.0)
        await radar.flush()

        state = await load_state(kv)
        (saved,) = state.ledger
        assert saved.investment_usd == pytest.approx(200)
        assert saved.quantity == pytest.approx(75)
        assert state.watchlist == ()
    finally:
        await engine.dispose()
