# [TESTER] v1

from __future__ import annotations

import pytest

from src.core.swap import quote_exact_in


def test_quote_matches_constant_product_formula() -> None:
    q = quote_exact_in(reserve_in=1_000_000, reserve_out=1_000_000, amount_in=10_000, fee_bps=30)

    assert q.fee == 30
    assert q.amount_out == (1_000_000 * 9970) // (1_000_000 + 9970)
    assert q.new_reserve_in == 1_010_000
    assert q.new_reserve_out == 1_000_000 - q.amount_out


def test_fee_rounds_up() -> None:
    q = quote_exact_in(reserve_in=1000, reserve_out=1000, amount_in=1, fee_bps=1)

    assert q.fee == 1
    assert q.amount_out == 0


def test_product_never_decreases() -> None:
    for amount_in in (1, 7, 999, 123_456):
        for fee_bps in (0, 30, 100):
            q = quote_exact_in(reserve_in=50_000, reserve_out=70_000, amount_in=amount_in, fee_bps=fee_bps)
            assert q.new_reserve_in * q.new_reserve_out >= 50_000 * 70_000


@pytest.mark.parametrize("reserves", [(0, 100), (100, 0)])
def test_empty_side_quotes_zero(reserves) -> None:
    q = quote_exact_in(reserve_in=reserves[0], reserve_out=reserves[1], amount_in=10, fee_bps=30)

    assert q.amount_out == 0
    assert (q.new_reserve_in, q.new_reserve_out) == reserves


def test_zero_input_quotes_zero() -> None:
    assert quote_exact_in(reserve_in=10, reserve_out=10, amount_in=0, fee_bps=30).amount_out == 0


def test_invalid_inputs_rejected() -> None:
    with pytest.raises(ValueError):
        quote_exact_in(reserve_in=10, reserve_out=10, amount_in=-1, fee_bps=30)
    with pytest.raises(ValueError):
        quote_exact_in(reserve_in=10, reserve_out=10, amount_in=1, fee_bps=10_001)
    with pytest.raises(TypeError):
        quote_exact_in(reserve_in=10.0, reserve_out=10, amount_in=1, fee_bps=30)  # type: ignore[arg-type]
