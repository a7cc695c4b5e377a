from __future__ import annotations

import pytest

from src.core.errors import InsufficientStakeError, TransferError
from src.core.types import VaultParams
from src.integration.converter import PairConverter
from src.integration.ledger import InMemoryAssetLedger
from src.integration.pools import MasterChefPool, StakingRewardsAdapter, StakingRewardsPool
from src.integration.vault import CompoundingVault
from vault_harness import ALICE, BOB, KEEPER, OWNER, DEV, PAIR_LIQUIDITY, REWARD, ROUTER, TOKEN, TREASURY, VAULT


def _chef(**pool_kwargs):
    ledger = InMemoryAssetLedger()
    chef = MasterChefPool(ledger, address="chef", reward_asset=REWARD, fee_recipient=TREASURY)
    chef.add_pool("0", TOKEN, **pool_kwargs)
    for who in (ALICE, BOB):
        ledger.mint(who, TOKEN, 10_000)
        ledger.approve(TOKEN, who, "chef", 10_000)
    return ledger, chef


class TestMasterChefPool:
    def test_deposit_fee_goes_to_recipient(self) -> None:
        ledger, chef = _chef(deposit_fee_bips=50)

        credited = chef.deposit("0", ALICE, 10_000)

        assert credited == 9950
        assert chef.user_amount("0", ALICE) == 9950
        assert ledger.balance_of(TREASURY, TOKEN) == 50

    def test_withdraw_beyond_position_raises(self) -> None:
        _ledger, chef = _chef()
        chef.deposit("0", ALICE, 100)

        with pytest.raises(InsufficientStakeError):
            chef.withdraw("0", ALICE, 101)

    def test_withdraw_from_frozen_pool_raises(self) -> None:
        _ledger, chef = _chef()
        chef.deposit("0", ALICE, 100)
        chef.pool("0").frozen = True

        with pytest.raises(InsufficientStakeError):
            chef.withdraw("0", ALICE, 1)

    def test_rewards_accrue_pro_rata_and_pay_on_harvest(self) -> None:
        ledger, chef = _chef()
        chef.deposit("0", ALICE, 3000)
        chef.deposit("0", BOB, 1000)
        ledger.mint("chef", REWARD, 1001)

        credited = chef.accrue_rewards("0", 1001)

        assert credited == 750 + 250
        assert chef.pending_reward("0", ALICE) == 750
        assert chef.harvest("0", ALICE) == 750
        assert ledger.balance_of(ALICE, REWARD) == 750
        assert chef.pending_reward("0", ALICE) == 0

    def test_accrue_with_no_stakers_credits_nothing(self) -> None:
        _ledger, chef = _chef()

        assert chef.accrue_rewards("0", 100) == 0

    def test_emergency_withdraw_forfeits_rewards(self) -> None:
        ledger, chef = _chef()
        chef.deposit("0", ALICE, 500)
        ledger.mint("chef", REWARD, 100)
        chef.accrue_rewards("0", 100)

        paid = chef.emergency_withdraw("0", ALICE)

        assert paid == 500
        assert chef.pending_reward("0", ALICE) == 0
        assert ledger.balance_of(ALICE, REWARD) == 0

    def test_deposit_without_allowance_raises(self) -> None:
        ledger, chef = _chef()
        ledger.approve(TOKEN, ALICE, "chef", 0)

        with pytest.raises(TransferError):
            chef.deposit("0", ALICE, 1)

    def test_duplicate_pool_and_bad_fee_rejected(self) -> None:
        _ledger, chef = _chef()

        with pytest.raises(ValueError):
            chef.add_pool("0", TOKEN)
        with pytest.raises(ValueError):
            chef.add_pool("1", TOKEN, withdraw_fee_bips=10_001)

    def test_checkpoint_restore(self) -> None:
        _ledger, chef = _chef()
        chef.deposit("0", ALICE, 100)
        token = chef.checkpoint()
        chef.deposit("0", ALICE, 100)

        chef.restore(token)

        assert chef.user_amount("0", ALICE) == 100


def _staking_rewards_vault():
    ledger = InMemoryAssetLedger()
    pool = StakingRewardsPool(ledger, address="farm", staking_asset=TOKEN, reward_asset=REWARD)
    converter = PairConverter(ledger, address=ROUTER, holder=VAULT)
    pair = converter.add_pair(REWARD, TOKEN)
    ledger.mint(pair, REWARD, PAIR_LIQUIDITY)
    ledger.mint(pair, TOKEN, PAIR_LIQUIDITY)
    params = VaultParams(deposit_asset=TOKEN, reward_asset=REWARD, pool_id="-", owner=OWNER, dev=DEV)
    vault = CompoundingVault(
        params,
        address=VAULT,
        asset_ledger=ledger,
        staking=StakingRewardsAdapter(pool, VAULT),
        converter=converter,
    )
    return ledger, pool, vault


def test_vault_compounds_over_staking_rewards_pool() -> None:
    ledger, pool, vault = _staking_rewards_vault()
    ledger.mint(ALICE, TOKEN, 1000)
    ledger.approve(TOKEN, ALICE, VAULT, 1000)
    vault.deposit(ALICE, 1000)
    ledger.mint("farm", REWARD, 500)
    pool.notify_reward(500)

    assert vault.check_reward() == 500

    report = vault.reinvest(KEEPER)

    assert report.gross == 500
    assert vault.total_deposits() == 1000 + report.staked
    assert pool.earned(VAULT) == 0
    assert vault.withdraw(ALICE, 1000) == 1000 + report.staked


def test_staking_rewards_rescue_returns_full_balance() -> None:
    ledger, _pool, vault = _staking_rewards_vault()
    ledger.mint(ALICE, TOKEN, 1000)
    ledger.approve(TOKEN, ALICE, VAULT, 1000)
    vault.deposit(ALICE, 1000)

    assert vault.rescue_deployed_funds(OWNER, 1000, True) == 1000
    assert vault.total_deposits() == 0
