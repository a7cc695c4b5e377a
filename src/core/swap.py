"""
Constant-product swap quote used by the reference swap venue.

    fee     = ceil(amount_in * fee_bps / 10_000)
    net_in  = amount_in - fee
    out     = floor(reserve_out * net_in / (reserve_in + net_in))

The fee stays in the pair, so reserve_in * reserve_out never decreases.
"""

from __future__ import annotations

from dataclasses import dataclass


BPS_DENOM = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class SwapQuote:
    amount_in: int
    fee: int
    amount_out: int
    new_reserve_in: int
    new_reserve_out: int


def quote_exact_in(*, reserve_in: int, reserve_out: int, amount_in: int, fee_bps: int) -> SwapQuote:
    """
    Quote an exact-in swap against (reserve_in, reserve_out).

    A zero input, or a pair with an empty side, quotes a zero output rather
    than raising; the caller decides whether a zero output is acceptable.
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
        ("fee_bps", fee_bps),
    ):
        _require_int(name, v)
    if reserve_in < 0 or reserve_out < 0:
        raise ValueError(f"reserves must be non-negative: ({reserve_in}, {reserve_out})")
    if amount_in < 0:
        raise ValueError(f"amount_in must be non-negative: {amount_in}")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")

    if amount_in == 0 or reserve_in == 0 or reserve_out == 0:
        return SwapQuote(
            amount_in=amount_in,
            fee=0,
            amount_out=0,
            new_reserve_in=reserve_in,
            new_reserve_out=reserve_out,
        )

    fee = (amount_in * fee_bps + BPS_DENOM - 1) // BPS_DENOM
    net_in = amount_in - fee
    amount_out = (reserve_out * net_in) // (reserve_in + net_in)

    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_out - amount_out
    if new_reserve_in * new_reserve_out < reserve_in * reserve_out:
        raise AssertionError("constant product decreased")

    return SwapQuote(
        amount_in=amount_in,
        fee=fee,
        amount_out=amount_out,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
    )
