# [TESTER] v1

from __future__ import annotations

import importlib.util

import pytest

from src.state.shares import ShareLedger


def test_mint_burn_transfer() -> None:
    ledger = ShareLedger()
    ledger.mint("a", 100)
    ledger.transfer("a", "b", 40)
    ledger.burn("b", 10)

    assert ledger.total_supply == 90
    assert ledger.get_all_balances() == {"a": 60, "b": 30}


def test_zero_balances_are_dropped() -> None:
    ledger = ShareLedger()
    ledger.mint("a", 5)
    ledger.burn("a", 5)

    assert ledger.get_all_balances() == {}
    assert ledger.balance_of("a") == 0


def test_overdraw_rejected() -> None:
    ledger = ShareLedger()
    ledger.mint("a", 5)

    with pytest.raises(ValueError):
        ledger.burn("a", 6)
    with pytest.raises(ValueError):
        ledger.transfer("a", "b", 6)
    with pytest.raises(ValueError):
        ledger.mint("a", -1)
    assert ledger.total_supply == 5


def test_checkpoint_restore_is_isolated() -> None:
    ledger = ShareLedger()
    ledger.mint("a", 5)
    token = ledger.checkpoint()
    ledger.mint("b", 7)

    ledger.restore(token)

    assert ledger.get_all_balances() == {"a": 5}
    assert ledger.total_supply == 5


if importlib.util.find_spec("hypothesis") is not None:
    import hypothesis.strategies as st
    from hypothesis import given

    _ops = st.lists(
        st.tuples(st.sampled_from(("mint", "burn", "transfer")), st.sampled_from("abc"), st.sampled_from("abc"),
                  st.integers(min_value=0, max_value=1000)),
        max_size=40,
    )

    @given(ops=_ops)
    def test_supply_always_equals_sum_of_balances(ops) -> None:
        ledger = ShareLedger()
        for op, src, dst, amount in ops:
            try:
                if op == "mint":
                    ledger.mint(src, amount)
                elif op == "burn":
                    ledger.burn(src, amount)
                else:
                    ledger.transfer(src, dst, amount)
            except ValueError:
                pass
            assert sum(ledger.get_all_balances().values()) == ledger.total_supply
            assert all(v > 0 for v in ledger.get_all_balances().values())
