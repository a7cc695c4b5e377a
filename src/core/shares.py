"""
Share <-> deposit-asset conversion with deterministic rounding.

Both directions floor-round, so every conversion error lands in the vault's
favor:

    shares = floor(assets * total_shares / total_deposits)
    assets = floor(shares * total_deposits / total_shares)

Invariant: assets_for_shares(shares_for_assets(x)) <= x.

An empty vault (no shares) prices deposits 1:1. A vault with shares
outstanding but nothing staked, for example after a rescue, has no price:
deposits mint nothing and shares are worth nothing.
"""

from __future__ import annotations

from dataclasses import dataclass


def _require_amount(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


def shares_for_assets(asset_amount: int, total_shares: int, total_deposits: int) -> int:
    _require_amount("asset_amount", asset_amount)
    _require_amount("total_shares", total_shares)
    _require_amount("total_deposits", total_deposits)
    if total_shares == 0:
        return asset_amount
    if total_deposits == 0:
        return 0
    return (asset_amount * total_shares) // total_deposits


def assets_for_shares(share_amount: int, total_shares: int, total_deposits: int) -> int:
    _require_amount("share_amount", share_amount)
    _require_amount("total_shares", total_shares)
    _require_amount("total_deposits", total_deposits)
    if total_shares * total_deposits == 0:
        return 0
    return (share_amount * total_deposits) // total_shares


@dataclass(frozen=True)
class DepositQuote:
    received: int
    deposit_fee: int
    shares: int


def quote_deposit(
    received: int,
    *,
    deposit_fee_bips: int,
    fee_denominator: int,
    total_shares: int,
    total_deposits: int,
    staked_increase: int | None = None,
) -> DepositQuote:
    """
    Shares minted for `received` deposit tokens against the pre-deposit price.

    The pool's entry fee is taken off the received amount before pricing. If
    the measured growth of the staked position (`staked_increase`) is smaller,
    for example because the token charges a fee on the way into the pool, the
    smaller value is priced instead so existing holders are not diluted.
    """
    _require_amount("received", received)
    if fee_denominator <= 0:
        raise ValueError(f"fee_denominator must be positive: {fee_denominator}")
    if not (0 <= deposit_fee_bips <= fee_denominator):
        raise ValueError(f"deposit_fee_bips must be in [0, {fee_denominator}]: {deposit_fee_bips}")
    deposit_fee = (received * deposit_fee_bips) // fee_denominator
    credited = received - deposit_fee
    if staked_increase is not None:
        credited = max(0, min(credited, staked_increase))
    shares = shares_for_assets(credited, total_shares, total_deposits)
    return DepositQuote(received=received, deposit_fee=deposit_fee, shares=shares)


@dataclass(frozen=True)
class WithdrawQuote:
    assets: int
    withdraw_fee: int

    @property
    def payout(self) -> int:
        return self.assets - self.withdraw_fee


def quote_withdraw(
    share_amount: int,
    *,
    withdraw_fee_bips: int,
    fee_denominator: int,
    total_shares: int,
    total_deposits: int,
) -> WithdrawQuote:
    """Deposit tokens unstaked for `share_amount` and the pool's exit fee on them."""
    if fee_denominator <= 0:
        raise ValueError(f"fee_denominator must be positive: {fee_denominator}")
    if not (0 <= withdraw_fee_bips <= fee_denominator):
        raise ValueError(f"withdraw_fee_bips must be in [0, {fee_denominator}]: {withdraw_fee_bips}")
    assets = assets_for_shares(share_amount, total_shares, total_deposits)
    withdraw_fee = (assets * withdraw_fee_bips) // fee_denominator
    return WithdrawQuote(assets=assets, withdraw_fee=withdraw_fee)
