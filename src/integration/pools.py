"""
Reference staking pools and their StakingAdapter bindings.

Two pool families are simulated in memory, both moving real balances through
the shared `InMemoryAssetLedger`:

- `MasterChefPool`: many pools keyed by pool id, per-pool deposit and withdraw
  fees, pro-rata reward accrual, explicit harvest, emergency withdraw that
  forfeits pending rewards.
- `StakingRewardsPool`: a single staking asset, no fees, `get_reward()` to
  claim.

Rewards are only paid out by a harvest (or forfeited by an emergency
withdraw); staking and unstaking never auto-claim.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict

from ..core.errors import InsufficientStakeError, TransferError
from ..core.fees import BIPS_DIVISOR, fee_for
from ..core.types import Account, AssetId, PoolId
from .ledger import InMemoryAssetLedger


def _require_positive(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValueError(f"{name} must be a positive int: {value!r}")


@dataclass
class ChefPoolInfo:
    deposit_asset: AssetId
    deposit_fee_bips: int = 0
    withdraw_fee_bips: int = 0
    # Share of the position lost on emergency withdraw (models a compromised pool).
    emergency_haircut_bips: int = 0
    frozen: bool = False
    staked: Dict[Account, int] = field(default_factory=dict)
    pending: Dict[Account, int] = field(default_factory=dict)

    @property
    def total_staked(self) -> int:
        return sum(self.staked.values())


class MasterChefPool:
    def __init__(
        self,
        ledger: InMemoryAssetLedger,
        *,
        address: Account,
        reward_asset: AssetId,
        fee_recipient: Account,
    ) -> None:
        self.ledger = ledger
        self.address = address
        self.reward_asset = reward_asset
        self.fee_recipient = fee_recipient
        self._pools: Dict[PoolId, ChefPoolInfo] = {}

    def add_pool(
        self,
        pool_id: PoolId,
        deposit_asset: AssetId,
        *,
        deposit_fee_bips: int = 0,
        withdraw_fee_bips: int = 0,
    ) -> ChefPoolInfo:
        if pool_id in self._pools:
            raise ValueError(f"pool already exists: {pool_id}")
        for name, v in (("deposit_fee_bips", deposit_fee_bips), ("withdraw_fee_bips", withdraw_fee_bips)):
            if not (0 <= v <= BIPS_DIVISOR):
                raise ValueError(f"{name} must be in [0, {BIPS_DIVISOR}]: {v}")
        info = ChefPoolInfo(
            deposit_asset=deposit_asset,
            deposit_fee_bips=deposit_fee_bips,
            withdraw_fee_bips=withdraw_fee_bips,
        )
        self._pools[pool_id] = info
        return info

    def pool(self, pool_id: PoolId) -> ChefPoolInfo:
        info = self._pools.get(pool_id)
        if info is None:
            raise KeyError(f"unknown pool: {pool_id}")
        return info

    def accrue_rewards(self, pool_id: PoolId, amount: int) -> int:
        """
        Credit `amount` reward tokens pro-rata to current stakers.

        Floor rounding leaves a remainder unallocated; returns the amount
        actually credited. The pool must hold the reward tokens for harvests
        to succeed.
        """
        _require_positive("amount", amount)
        info = self.pool(pool_id)
        total = info.total_staked
        if total == 0:
            return 0
        credited = 0
        for holder in sorted(info.staked):
            share = (amount * info.staked[holder]) // total
            info.pending[holder] = info.pending.get(holder, 0) + share
            credited += share
        return credited

    def deposit(self, pool_id: PoolId, holder: Account, amount: int) -> int:
        _require_positive("amount", amount)
        info = self.pool(pool_id)
        before = self.ledger.balance_of(self.address, info.deposit_asset)
        if not self.ledger.transfer_from(info.deposit_asset, self.address, holder, self.address, amount):
            raise TransferError(f"pool {pool_id} could not pull {amount} from {holder}")
        received = self.ledger.balance_of(self.address, info.deposit_asset) - before
        fee = fee_for(received, info.deposit_fee_bips)
        if fee > 0 and not self.ledger.transfer(info.deposit_asset, self.address, self.fee_recipient, fee):
            raise TransferError("pool deposit fee transfer failed")
        credited = received - fee
        info.staked[holder] = info.staked.get(holder, 0) + credited
        return credited

    def withdraw(self, pool_id: PoolId, holder: Account, amount: int) -> int:
        _require_positive("amount", amount)
        info = self.pool(pool_id)
        if info.frozen:
            raise InsufficientStakeError(f"pool {pool_id} is frozen")
        position = info.staked.get(holder, 0)
        if amount > position:
            raise InsufficientStakeError(f"unstake {amount} exceeds position {position}")
        info.staked[holder] = position - amount
        fee = fee_for(amount, info.withdraw_fee_bips)
        if fee > 0 and not self.ledger.transfer(info.deposit_asset, self.address, self.fee_recipient, fee):
            raise TransferError("pool withdraw fee transfer failed")
        if not self.ledger.transfer(info.deposit_asset, self.address, holder, amount - fee):
            raise TransferError(f"pool {pool_id} could not pay {holder}")
        return amount - fee

    def harvest(self, pool_id: PoolId, holder: Account) -> int:
        info = self.pool(pool_id)
        owed = info.pending.pop(holder, 0)
        if owed > 0 and not self.ledger.transfer(self.reward_asset, self.address, holder, owed):
            raise TransferError(f"pool {pool_id} could not pay rewards to {holder}")
        return owed

    def emergency_withdraw(self, pool_id: PoolId, holder: Account) -> int:
        """Return the whole position without rewards. A frozen pool returns nothing."""
        info = self.pool(pool_id)
        info.pending.pop(holder, None)
        if info.frozen:
            return 0
        position = info.staked.pop(holder, 0)
        lost = fee_for(position, info.emergency_haircut_bips)
        if lost > 0 and not self.ledger.transfer(info.deposit_asset, self.address, self.fee_recipient, lost):
            raise TransferError("pool haircut transfer failed")
        paid = position - lost
        if paid > 0 and not self.ledger.transfer(info.deposit_asset, self.address, holder, paid):
            raise TransferError(f"pool {pool_id} could not pay {holder}")
        return paid

    def slash(self, pool_id: PoolId, holder: Account, amount: int) -> None:
        """Passive penalty: shrink a position without any action from the holder."""
        info = self.pool(pool_id)
        position = info.staked.get(holder, 0)
        amount = min(amount, position)
        info.staked[holder] = position - amount
        if amount > 0 and not self.ledger.transfer(info.deposit_asset, self.address, self.fee_recipient, amount):
            raise TransferError("pool slash transfer failed")

    def pending_reward(self, pool_id: PoolId, holder: Account) -> int:
        return self.pool(pool_id).pending.get(holder, 0)

    def user_amount(self, pool_id: PoolId, holder: Account) -> int:
        return self.pool(pool_id).staked.get(holder, 0)

    def checkpoint(self) -> Dict[PoolId, ChefPoolInfo]:
        return copy.deepcopy(self._pools)

    def restore(self, token: Dict[PoolId, ChefPoolInfo]) -> None:
        self._pools = copy.deepcopy(token)


class MasterChefAdapter:
    """StakingAdapter over a `MasterChefPool`, acting for `holder`."""

    def __init__(self, chef: MasterChefPool, holder: Account) -> None:
        self._chef = chef
        self._holder = holder

    @property
    def reward_asset(self) -> AssetId:
        return self._chef.reward_asset

    @property
    def spender(self) -> Account:
        return self._chef.address

    def stake(self, pool_id: PoolId, amount: int) -> None:
        self._chef.deposit(pool_id, self._holder, amount)

    def unstake(self, pool_id: PoolId, amount: int) -> None:
        self._chef.withdraw(pool_id, self._holder, amount)

    def emergency_unstake(self, pool_id: PoolId) -> None:
        self._chef.emergency_withdraw(pool_id, self._holder)

    def harvest_rewards(self, pool_id: PoolId) -> None:
        self._chef.harvest(pool_id, self._holder)

    def pending_reward_estimate(self, pool_id: PoolId, holder: Account) -> int:
        return self._chef.pending_reward(pool_id, holder)

    def staked_balance(self, pool_id: PoolId, holder: Account) -> int:
        return self._chef.user_amount(pool_id, holder)

    def deposit_fee_bips(self, pool_id: PoolId) -> int:
        return self._chef.pool(pool_id).deposit_fee_bips

    def withdraw_fee_bips(self, pool_id: PoolId) -> int:
        return self._chef.pool(pool_id).withdraw_fee_bips

    def fee_denominator(self) -> int:
        return BIPS_DIVISOR

    def checkpoint(self) -> Dict[PoolId, ChefPoolInfo]:
        return self._chef.checkpoint()

    def restore(self, token: Dict[PoolId, ChefPoolInfo]) -> None:
        self._chef.restore(token)


class StakingRewardsPool:
    def __init__(
        self,
        ledger: InMemoryAssetLedger,
        *,
        address: Account,
        staking_asset: AssetId,
        reward_asset: AssetId,
    ) -> None:
        self.ledger = ledger
        self.address = address
        self.staking_asset = staking_asset
        self.reward_asset = reward_asset
        self._balances: Dict[Account, int] = {}
        self._earned: Dict[Account, int] = {}

    @property
    def total_staked(self) -> int:
        return sum(self._balances.values())

    def notify_reward(self, amount: int) -> int:
        """Credit `amount` pro-rata to stakers; returns the amount credited."""
        _require_positive("amount", amount)
        total = self.total_staked
        if total == 0:
            return 0
        credited = 0
        for holder in sorted(self._balances):
            share = (amount * self._balances[holder]) // total
            self._earned[holder] = self._earned.get(holder, 0) + share
            credited += share
        return credited

    def stake(self, holder: Account, amount: int) -> None:
        _require_positive("amount", amount)
        before = self.ledger.balance_of(self.address, self.staking_asset)
        if not self.ledger.transfer_from(self.staking_asset, self.address, holder, self.address, amount):
            raise TransferError(f"staking pool could not pull {amount} from {holder}")
        received = self.ledger.balance_of(self.address, self.staking_asset) - before
        self._balances[holder] = self._balances.get(holder, 0) + received

    def withdraw(self, holder: Account, amount: int) -> None:
        _require_positive("amount", amount)
        balance = self._balances.get(holder, 0)
        if amount > balance:
            raise InsufficientStakeError(f"withdraw {amount} exceeds balance {balance}")
        self._balances[holder] = balance - amount
        if not self.ledger.transfer(self.staking_asset, self.address, holder, amount):
            raise TransferError(f"staking pool could not pay {holder}")

    def get_reward(self, holder: Account) -> int:
        owed = self._earned.pop(holder, 0)
        if owed > 0 and not self.ledger.transfer(self.reward_asset, self.address, holder, owed):
            raise TransferError(f"staking pool could not pay rewards to {holder}")
        return owed

    def earned(self, holder: Account) -> int:
        return self._earned.get(holder, 0)

    def balance_of(self, holder: Account) -> int:
        return self._balances.get(holder, 0)

    def checkpoint(self):
        return dict(self._balances), dict(self._earned)

    def restore(self, token) -> None:
        balances, earned = token
        self._balances = dict(balances)
        self._earned = dict(earned)


class StakingRewardsAdapter:
    """StakingAdapter over a `StakingRewardsPool`; the pool id is ignored."""

    def __init__(self, pool: StakingRewardsPool, holder: Account) -> None:
        self._pool = pool
        self._holder = holder

    @property
    def reward_asset(self) -> AssetId:
        return self._pool.reward_asset

    @property
    def spender(self) -> Account:
        return self._pool.address

    def stake(self, pool_id: PoolId, amount: int) -> None:
        self._pool.stake(self._holder, amount)

    def unstake(self, pool_id: PoolId, amount: int) -> None:
        self._pool.withdraw(self._holder, amount)

    def emergency_unstake(self, pool_id: PoolId) -> None:
        balance = self._pool.balance_of(self._holder)
        if balance > 0:
            self._pool.withdraw(self._holder, balance)

    def harvest_rewards(self, pool_id: PoolId) -> None:
        self._pool.get_reward(self._holder)

    def pending_reward_estimate(self, pool_id: PoolId, holder: Account) -> int:
        return self._pool.earned(holder)

    def staked_balance(self, pool_id: PoolId, holder: Account) -> int:
        return self._pool.balance_of(holder)

    def deposit_fee_bips(self, pool_id: PoolId) -> int:
        return 0

    def withdraw_fee_bips(self, pool_id: PoolId) -> int:
        return 0

    def fee_denominator(self) -> int:
        return BIPS_DIVISOR

    def checkpoint(self):
        return self._pool.checkpoint()

    def restore(self, token) -> None:
        self._pool.restore(token)
