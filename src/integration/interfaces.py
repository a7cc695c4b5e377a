"""
Collaborator interfaces for the compounding vault (imperative shell).

The vault holds every collaborator by one of these capability sets, never by
concrete type. Reference in-memory implementations live in `ledger.py`,
`pools.py` and `converter.py`; production adapters for a given pool family or
swap venue implement the same methods.

Collaborators that also implement `Checkpointable` are snapshotted at the
start of each vault operation and restored if the operation fails.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from ..core.types import Account, AssetId, PoolId

# Allowance value treated as unlimited (never decremented).
MAX_ALLOWANCE = 2**256 - 1


@runtime_checkable
class Checkpointable(Protocol):
    def checkpoint(self) -> Any: ...

    def restore(self, token: Any) -> None: ...


class AssetLedger(Protocol):
    """Fungible asset balances with allowances (token contract semantics)."""

    def balance_of(self, account: Account, asset: AssetId) -> int: ...

    def allowance(self, asset: AssetId, owner: Account, spender: Account) -> int: ...

    def approve(self, asset: AssetId, owner: Account, spender: Account, amount: int) -> None: ...

    def transfer(self, asset: AssetId, src: Account, dst: Account, amount: int) -> bool:
        """Move `amount` from src; returns False on failure."""
        ...

    def transfer_from(self, asset: AssetId, spender: Account, src: Account, dst: Account, amount: int) -> bool:
        """Move `amount` from src using spender's allowance; returns False on failure."""
        ...


class ShareLedgerLike(Protocol):
    @property
    def total_supply(self) -> int: ...

    def balance_of(self, holder: Account) -> int: ...

    def mint(self, holder: Account, amount: int) -> None: ...

    def burn(self, holder: Account, amount: int) -> None: ...

    def transfer(self, src: Account, dst: Account, amount: int) -> None: ...

    def get_all_balances(self) -> Mapping[Account, int]: ...


class StakingAdapter(Protocol):
    """
    One underlying staking position family, bound to the vault as holder.

    `staked_balance` reports the position as the pool accounts it, including
    any penalty the pool has already applied; `withdraw_fee_bips` is the
    proportional exit fee charged on an actual unstake.
    """

    @property
    def reward_asset(self) -> AssetId:
        """Asset the pool pays rewards in."""
        ...

    @property
    def spender(self) -> Account:
        """Account that pulls deposit tokens on `stake()` (needs an allowance)."""
        ...

    def stake(self, pool_id: PoolId, amount: int) -> None: ...

    def unstake(self, pool_id: PoolId, amount: int) -> None:
        """Raises InsufficientStakeError if `amount` exceeds the position."""
        ...

    def emergency_unstake(self, pool_id: PoolId) -> None:
        """Best-effort full withdrawal; pending rewards may be forfeited."""
        ...

    def harvest_rewards(self, pool_id: PoolId) -> None: ...

    def pending_reward_estimate(self, pool_id: PoolId, holder: Account) -> int: ...

    def staked_balance(self, pool_id: PoolId, holder: Account) -> int: ...

    def deposit_fee_bips(self, pool_id: PoolId) -> int: ...

    def withdraw_fee_bips(self, pool_id: PoolId) -> int: ...

    def fee_denominator(self) -> int: ...


class RewardConverter(Protocol):
    """Swap venue bound to the vault as holder."""

    @property
    def spender(self) -> Account:
        """Account that pulls input tokens on `swap()` (needs an allowance)."""
        ...

    def supports(self, from_asset: AssetId, to_asset: AssetId) -> bool:
        """True if a route exists; used to validate set-up."""
        ...

    def estimate_conversion(self, amount: int, from_asset: AssetId, to_asset: AssetId) -> int:
        """Read-only quote."""
        ...

    def swap(self, amount: int, from_asset: AssetId, to_asset: AssetId) -> int:
        """Execute; returns the amount received. Raises SlippageError on an implausible result."""
        ...
