# memeradar/tests/test_ledger.py
"""
Contabilidad de coste medio del ledger.

• OPEN + ADD → precio medio ponderado.
• REDUCE retira coste base al precio medio original (sin P&L realizado).
• REDUCE por encima de lo disponible se rechaza (no se recorta).
• ADJUST es idempotente salvo por el historial.
"""
import pathlib
import random
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from portfolio.ledger import Ledger, apply_transaction
from portfolio.models import ExitStrategyId, Transaction, TxnType
from utils.errors import InsufficientQuantity, InvalidInput
from utils.token_catalog import TokenRef

PEPE = TokenRef(id="sol:pepe2", name="Pepe 2.0", symbol="$PEPE2", chain="SOL", price=0.0015)


def _opened():
    pos = apply_transaction(None, Transaction.open(1000, 0.001), token=PEPE)
    return apply_transaction(pos, Transaction.add(500, 0.002))


def test_open_sets_basis_and_default_strategy():
    pos = apply_transaction(None, Transaction.open("1,000", "0.001"), token=PEPE)
    assert pos.quantity == pytest.approx(1_000_000)
    assert pos.investment_usd == pytest.approx(1000)
    assert pos.entry_price_usd == pytest.approx(0.001)
    assert pos.exit_strategy_id is ExitStrategyId.STANDARD
    assert [h.type for h in pos.history] == [TxnType.OPEN]
    assert pos.token_symbol == "$PEPE2"


def test_add_weighted_average():
    pos = _opened()
    assert pos.quantity == pytest.approx(1_250_000)
    assert pos.investment_usd == pytest.approx(1500)
    assert pos.entry_price_usd == pytest.approx(0.0012)
    # más reciente primero
    assert [h.type for h in pos.history] == [TxnType.ADD, TxnType.OPEN]
    assert pos.history[0].quantity == pytest.approx(250_000)
    assert pos.history[0].value_usd == pytest.approx(500)


def test_reduce_removes_cost_at_average_entry():
    pos = apply_transaction(_opened(), Transaction.reduce(300, 0.0015))
    assert pos.quantity == pytest.approx(1_050_000)
    assert pos.investment_usd == pytest.approx(1260)
    assert pos.entry_price_usd == pytest.approx(0.0012)
    assert pos.history[0].type is TxnType.REDUCE


def test_reduce_more_than_held_is_rejected():
    pos = _opened()
    with pytest.raises(InsufficientQuantity) as exc:
        apply_transaction(pos, Transaction.reduce(10_000, 0.001))
    assert exc.value.available == pytest.approx(1_250_000)
    # estado intacto
    assert pos.quantity == pytest.approx(1_250_000)


def test_full_sell_clamps_dust_to_zero():
    pos = apply_transaction(None, Transaction.open(0.3, 0.1), token=PEPE)
    out = apply_transaction(pos, Transaction.reduce(0.3, 0.1))
    assert out.quantity == 0.0
    assert out.investment_usd == 0.0


def test_adjust_is_idempotent_except_history():
    pos = _opened()
    once = apply_transaction(pos, Transaction.adjust(2000, 0.0025, "moonshot"))
    twice = apply_transaction(once, Transaction.adjust(2000, 0.0025, "moonshot"))
    for field in ("quantity", "investment_usd", "entry_price_usd", "exit_strategy_id", "pnl_usd"):
        assert getattr(once, field) == getattr(twice, field)
    assert len(twice.history) == len(once.history) + 1
    assert once.exit_strategy_id is ExitStrategyId.MOONSHOT


def test_adjust_keeps_strategy_when_not_given():
    pos = apply_transaction(None, Transaction.open(100, 1, "conservative"), token=PEPE)
    out = apply_transaction(pos, Transaction.adjust(50, 2))
    assert out.exit_strategy_id is ExitStrategyId.CONSERVATIVE
    assert out.quantity == pytest.approx(25)


def test_close_returns_none():
    assert apply_transaction(_opened(), Transaction.close()) is None


@pytest.mark.parametrize("invested, price", [(0, 1), (-5, 1), (10, 0), ("abc", 1), (10, "nan"), (10, "inf")])
def test_invalid_inputs_raise(invested, price):
    with pytest.raises(InvalidInput):
        apply_transaction(None, Transaction.open(invested, price), token=PEPE)


def test_transition_preconditions():
    pos = _opened()
    with pytest.raises(InvalidInput):
        apply_transaction(pos, Transaction.open(10, 1), token=PEPE)
    with pytest.raises(InvalidInput):
        apply_transaction(None, Transaction.add(10, 1))
    with pytest.raises(InvalidInput):
        apply_transaction(None, Transaction.open(10, 1))      # sin token
    with pytest.raises(InvalidInput):
        apply_transaction(pos, Transaction("SPLIT", 10, 1))


def test_pnl_recomputed_after_transaction():
    pos = apply_transaction(None, Transaction.open(1000, 0.001), token=PEPE, current_price=0.002)
    assert pos.pnl_usd == pytest.approx(1000)
    assert pos.pnl_pct == pytest.approx(100)


def test_random_sequences_never_go_negative():
    rnd = random.Random(7)
    pos = apply_transaction(None, Transaction.open(100, 1), token=PEPE)
    for _ in range(300):
        price = rnd.uniform(0.01, 5)
        kind = rnd.choice(["add", "reduce", "adjust"])
        amount = rnd.uniform(0.01, 200)
        try:
            if kind == "add":
                pos = apply_transaction(pos, Transaction.add(amount, price))
            elif kind == "reduce":
                pos = apply_transaction(pos, Transaction.reduce(amount, price))
            else:
                pos = apply_transaction(pos, Transaction.adjust(amount, price))
        except InsufficientQuantity:
            pass
        assert pos.quantity >= 0
        assert pos.investment_usd >= 0


# ───────────────────────── Ledger ─────────────────────────
def test_ledger_collection_ops():
    ledger, pos = Ledger().open(PEPE, Transaction.open(1000, 0.001))
    assert len(ledger) == 1
    assert ledger.for_token("sol:pepe2") is pos
    assert ledger.token_ids() == frozenset({"sol:pepe2"})

    ledger2, pos2 = ledger.apply(pos.id, Transaction.add(500, 0.002))
    assert pos2.id == pos.id
    assert ledger2.get(pos.id).investment_usd == pytest.approx(1500)
    # el original no cambia
    assert ledger.get(pos.id).investment_usd == pytest.approx(1000)

    ledger3, gone = ledger2.apply(pos.id, Transaction.close())
    assert gone is None and len(ledger3) == 0

    with pytest.raises(InvalidInput):
        ledger3.close(pos.id)
    with pytest.raises(InvalidInput):
        ledger.open(PEPE, Transaction.add(1, 1))


def test_ledger_refresh_pnl_uses_lookup():
    ledger, pos = Ledger().open(PEPE, Transaction.open(1000, 0.001))
    out = ledger.refresh_pnl({"sol:pepe2": 0.0005}.get)
    assert out.get(pos.id).pnl_usd == pytest.approx(-500)
    assert out.get(pos.id).pnl_pct == pytest.approx(-50)
