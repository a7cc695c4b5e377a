"""Tests for the reinvest decision kernel and the vault invariant checkers."""

from __future__ import annotations

import pytest

from src.core.invariants import VaultSnapshot, check_all
from src.core.reinvest import (
    RewardEstimate,
    combine_estimate,
    meets_minimum,
    pool_token_amount,
    should_reinvest_before_deposit,
)


def _estimate(total: int) -> RewardEstimate:
    return RewardEstimate(pool_token_amount=0, reward_token_balance=total, estimated_total_reward=total)


class TestPoolTokenAmount:
    def test_distinct_pool_token_counts_held_and_pending(self):
        assert pool_token_amount(held=40, pending=60, same_as_reward=False) == 100

    def test_same_asset_counts_pending_only(self):
        assert pool_token_amount(held=40, pending=60, same_as_reward=True) == 60

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            pool_token_amount(held=-1, pending=0, same_as_reward=False)


def test_combine_estimate_adds_held_reward_tokens():
    est = combine_estimate(pool_tokens=100, converted=95, reward_token_balance=5)

    assert est.estimated_total_reward == 100
    assert est.pool_token_amount == 100


class TestThresholds:
    def test_minimum_is_inclusive(self):
        assert meets_minimum(_estimate(500), 500)
        assert not meets_minimum(_estimate(499), 500)

    def test_zero_minimum_always_met(self):
        assert meets_minimum(_estimate(0), 0)

    def test_deposit_trigger_is_strict(self):
        assert should_reinvest_before_deposit(_estimate(101), 100)
        assert not should_reinvest_before_deposit(_estimate(100), 100)

    def test_zero_max_disables_trigger(self):
        assert not should_reinvest_before_deposit(_estimate(10**18), 0)


def test_estimate_rejects_negative():
    with pytest.raises(ValueError):
        RewardEstimate(pool_token_amount=0, reward_token_balance=-1, estimated_total_reward=0)


class TestInvariants:
    def _snap(self, **overrides) -> VaultSnapshot:
        fields = dict(total_shares=30, share_balances={"a": 10, "b": 20}, total_deposits=45, fee_bips_total=600)
        fields.update(overrides)
        return VaultSnapshot(**fields)

    def test_consistent_state_passes(self):
        assert check_all(self._snap()) == []

    def test_share_supply_mismatch(self):
        assert check_all(self._snap(total_shares=31)) == ["shares_conserved"]

    def test_negative_balance(self):
        violations = check_all(self._snap(share_balances={"a": -10, "b": 40}))
        assert violations == ["share_balances_non_negative"]

    def test_negative_deposits(self):
        assert check_all(self._snap(total_deposits=-1)) == ["total_deposits_non_negative"]

    def test_fee_overflow(self):
        assert check_all(self._snap(fee_bips_total=10_001)) == ["fee_bips_bounded"]
