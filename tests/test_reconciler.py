import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from portfolio import reconciler
from portfolio.ledger import Ledger
from portfolio.models import Transaction
from portfolio.reconciler import TrackState
from utils.errors import InvalidInput
from utils.token_catalog import TokenCatalog, TokenRef

CAT = TokenCatalog([
    TokenRef(id="sol:wif", name="dogwifhat", symbol="$WIF", chain="SOL", price=2.5),
    TokenRef(id="sol:bonk", name="Bonk", symbol="$BONK", chain="SOL", price=0.00002),
    TokenRef(id="eth:pepe", name="Pepe", symbol="$PEPE", chain="ETH", price=0.00001),
])


def test_toggle_watch_keeps_insertion_order():
    w = reconciler.toggle_watch((), "sol:wif")
    w = reconciler.toggle_watch(w, "sol:bonk")
    assert w == ("sol:wif", "sol:bonk")
    assert reconciler.toggle_watch(w, "sol:wif") == ("sol:bonk",)


def test_promote_moves_token_out_of_favorites():
    watch = ("sol:wif", "sol:bonk")
    watch2, ledger, pos = reconciler.promote(
        watch, Ledger(), CAT.resolve("sol:wif"), Transaction.open(100, 2.0), current_price=2.5,
    )
    assert "sol:wif" not in watch2
    assert reconciler.classify("sol:wif", watch2, ledger) is TrackState.HAS_POSITION
    assert [t.id for t in reconciler.favorites_view(watch2, ledger, CAT)] == ["sol:bonk"]
    assert pos.pnl_usd == pytest.approx(25)


def test_promote_twice_is_rejected():
    tok = CAT.resolve("sol:wif")
    watch, ledger, _ = reconciler.promote((), Ledger(), tok, Transaction.open(100, 2.0))
    with pytest.raises(InvalidInput):
        reconciler.promote(watch, ledger, tok, Transaction.open(100, 2.0))


def test_demote_returns_token_to_watchlist():
    watch, ledger, pos = reconciler.promote(
        ("sol:wif",), Ledger(), CAT.resolve("sol:wif"), Transaction.open(100, 2.0),
    )
    watch2, ledger2 = reconciler.demote(watch, ledger, pos.id)
    assert len(ledger2) == 0
    assert watch2 == ("sol:wif",)
    assert reconciler.classify("sol:wif", watch2, ledger2) is TrackState.WATCHED_ONLY

    with pytest.raises(InvalidInput):
        reconciler.demote(watch2, ledger2, pos.id)


def test_views_apply_their_own_policy():
    # token vigilado Y con posición (dato heredado de una versión anterior)
    ledger, _ = Ledger().open(CAT.resolve("sol:wif"), Transaction.open(100, 2.0))
    watch = ("sol:wif", "eth:pepe", "sol:unknown")

    fav = reconciler.favorites_view(watch, ledger, CAT)
    assert [t.id for t in fav] == ["eth:pepe"]

    combined = reconciler.combined_view(watch, ledger, CAT)
    assert [(i.token_id, i.state) for i in combined] == [
        ("sol:wif", TrackState.HAS_POSITION),
        ("eth:pepe", TrackState.WATCHED_ONLY),
    ]
    assert combined[0].is_position and not combined[1].is_position

    assert reconciler.tracked_token_ids(watch, ledger) == {"sol:wif", "eth:pepe", "sol:unknown"}
    assert reconciler.classify("sol:bonk", watch, ledger) is TrackState.UNTRACKED
