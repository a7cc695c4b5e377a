"""
Fee schedule kernels (deterministic, integer-only).

Harvested rewards are split in a fixed order: dev fee, admin fee, then the
reinvest (caller) reward. Each cut is floor-rounded on the gross amount, so
rounding dust stays in the net remainder and is re-staked for holders.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .errors import ConfigurationError


BIPS_DIVISOR = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class FeeSchedule:
    admin_fee_bips: int = 0
    dev_fee_bips: int = 0
    reinvest_reward_bips: int = 0

    def __post_init__(self) -> None:
        for name, v in (
            ("admin_fee_bips", self.admin_fee_bips),
            ("dev_fee_bips", self.dev_fee_bips),
            ("reinvest_reward_bips", self.reinvest_reward_bips),
        ):
            _require_int(name, v)
            if not (0 <= v <= BIPS_DIVISOR):
                raise ConfigurationError(f"{name} must be in [0, {BIPS_DIVISOR}]: {v}")
        if self.total_bips > BIPS_DIVISOR:
            raise ConfigurationError(f"fee bips must sum to at most {BIPS_DIVISOR}, got {self.total_bips}")

    @property
    def total_bips(self) -> int:
        return self.admin_fee_bips + self.dev_fee_bips + self.reinvest_reward_bips

    def with_admin_fee(self, bips: int) -> "FeeSchedule":
        return replace(self, admin_fee_bips=bips)

    def with_dev_fee(self, bips: int) -> "FeeSchedule":
        return replace(self, dev_fee_bips=bips)

    def with_reinvest_reward(self, bips: int) -> "FeeSchedule":
        return replace(self, reinvest_reward_bips=bips)


@dataclass(frozen=True)
class RewardSplit:
    dev_fee: int
    admin_fee: int
    reinvest_fee: int
    net: int

    def __post_init__(self) -> None:
        for name, v in (
            ("dev_fee", self.dev_fee),
            ("admin_fee", self.admin_fee),
            ("reinvest_fee", self.reinvest_fee),
            ("net", self.net),
        ):
            _require_int(name, v)
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")

    @property
    def gross(self) -> int:
        return self.dev_fee + self.admin_fee + self.reinvest_fee + self.net


def fee_for(amount: int, bips: int, denominator: int = BIPS_DIVISOR) -> int:
    """floor(amount * bips / denominator)."""
    _require_int("amount", amount)
    _require_int("bips", bips)
    _require_int("denominator", denominator)
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    if denominator <= 0:
        raise ValueError(f"denominator must be positive: {denominator}")
    if not (0 <= bips <= denominator):
        raise ValueError(f"bips must be in [0, {denominator}]: {bips}")
    return (amount * bips) // denominator


def split_reward(amount: int, schedule: FeeSchedule) -> RewardSplit:
    """
    Split a gross reward `amount` into (dev, admin, reinvest, net).

    The three fees are computed independently on the gross amount, so the
    order only matters for disbursement, not for the values.
    """
    dev_fee = fee_for(amount, schedule.dev_fee_bips)
    admin_fee = fee_for(amount, schedule.admin_fee_bips)
    reinvest_fee = fee_for(amount, schedule.reinvest_reward_bips)
    net = amount - dev_fee - admin_fee - reinvest_fee
    if net < 0:
        raise AssertionError("reward split over-distributed")
    return RewardSplit(dev_fee=dev_fee, admin_fee=admin_fee, reinvest_fee=reinvest_fee, net=net)


def estimate_reinvest_reward(total_reward: int, schedule: FeeSchedule) -> int:
    """Caller's cut of an estimated reward, as paid by `reinvest()`."""
    return fee_for(total_reward, schedule.reinvest_reward_bips)
