"""
Reinvest decision kernel.

The shell gathers balances and quotes from the pool and the swap venue; the
functions here turn those numbers into the reward estimate and the
compound/no-compound decisions.
"""

from __future__ import annotations

from dataclasses import dataclass

from .fees import RewardSplit


@dataclass(frozen=True)
class RewardEstimate:
    """Outstanding rewards, in pool-reward units and in reward-asset units."""

    pool_token_amount: int
    reward_token_balance: int
    estimated_total_reward: int

    def __post_init__(self) -> None:
        for name, v in (
            ("pool_token_amount", self.pool_token_amount),
            ("reward_token_balance", self.reward_token_balance),
            ("estimated_total_reward", self.estimated_total_reward),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")


@dataclass(frozen=True)
class ReinvestReport:
    """What one reinvest harvested, paid out and re-staked."""

    harvested_pool_tokens: int
    split: RewardSplit
    staked: int
    total_deposits_after: int
    total_shares_after: int

    @property
    def gross(self) -> int:
        return self.split.gross


def pool_token_amount(*, held: int, pending: int, same_as_reward: bool) -> int:
    """
    Pool reward tokens that a harvest would leave in the vault.

    When the pool pays out in the reward asset itself, the held balance is
    already part of the reward-asset balance and is not counted twice.
    """
    if held < 0 or pending < 0:
        raise ValueError(f"balances must be non-negative: held={held} pending={pending}")
    return pending if same_as_reward else held + pending


def combine_estimate(*, pool_tokens: int, converted: int, reward_token_balance: int) -> RewardEstimate:
    return RewardEstimate(
        pool_token_amount=pool_tokens,
        reward_token_balance=reward_token_balance,
        estimated_total_reward=reward_token_balance + converted,
    )


def meets_minimum(estimate: RewardEstimate, min_tokens_to_reinvest: int) -> bool:
    return estimate.estimated_total_reward >= min_tokens_to_reinvest


def should_reinvest_before_deposit(estimate: RewardEstimate, max_tokens_without_reinvest: int) -> bool:
    """A zero threshold disables deposit-triggered compounding."""
    if max_tokens_without_reinvest <= 0:
        return False
    return estimate.estimated_total_reward > max_tokens_without_reinvest
