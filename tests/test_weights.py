"""
Normalizador de pesos: las dos ramas de redondeo y el invariante suma=100.
"""
import pathlib
import random
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from prefs.weights import WEIGHT_KEYS, Weights, rebalance
from utils.errors import InvalidInput


def test_proportional_branch():
    out = rebalance(Weights(40, 35, 25), "tech", 60)
    # remaining 40 → security = round(35/60*40) = 23, social = 17
    assert (out.tech, out.security, out.social) == (60, 23, 17)


def test_proportional_branch_half_up():
    # 50/50 de 25 → 12.5 sube a 13; el segundo sale por resta
    out = rebalance(Weights(75, 10, 15), "tech", 75)
    assert out.total == 100
    out = rebalance(Weights(0, 50, 50), "tech", 75)
    assert (out.security, out.social) == (13, 12)


def test_equal_split_when_others_are_zero():
    out = rebalance(Weights(100, 0, 0), "tech", 31)
    # remaining 69 → el impar va al primero de los otros
    assert (out.tech, out.security, out.social) == (31, 35, 34)


def test_clamps_out_of_range_values():
    assert rebalance(Weights(), "social", 150).to_dict() == {"tech": 0, "security": 0, "social": 100}
    assert rebalance(Weights(), "social", -20).social == 0


@pytest.mark.parametrize("key, value", [("risk", 10), ("tech", "abc")])
def test_rejects_bad_input(key, value):
    with pytest.raises(InvalidInput):
        rebalance(Weights(), key, value)


def test_invariant_over_random_sequences():
    rnd = random.Random(42)
    w = Weights()
    for _ in range(2000):
        w = rebalance(w, rnd.choice(WEIGHT_KEYS), rnd.randint(-10, 110))
        assert w.total == 100
        assert all(0 <= v <= 100 for v in w.to_dict().values())


def test_from_dict_validates_sum():
    assert Weights.from_dict({"tech": "20", "security": 70, "social": 10}).tech == 20
    with pytest.raises(InvalidInput):
        Weights.from_dict({"tech": 50, "security": 50, "social": 50})
