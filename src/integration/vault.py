"""
Auto-compounding staking vault (imperative shell).

`CompoundingVault` accepts a deposit asset, stakes it through a
`StakingAdapter`, and periodically harvests, sells and re-stakes the pool's
rewards net of fees. Holders own a proportional claim through shares.

Every external operation runs as one atomic section:
- re-entrant calls are rejected,
- collaborators that can checkpoint are snapshotted up front,
- any exception restores the snapshots and the vault's own settings, then
  propagates unchanged,
- invariants are checked on the post-state before events are published.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from ..core.errors import (
    BelowThresholdError,
    ConfigurationError,
    DepositsDisabledError,
    InsufficientRescueError,
    InsufficientSharesError,
    TransferError,
    VaultInvariantError,
    VaultPermissionError,
    ZeroAmountError,
)
from ..core.fees import FeeSchedule, estimate_reinvest_reward, fee_for, split_reward
from ..core.invariants import VaultSnapshot, check_all
from ..core.reinvest import (
    ReinvestReport,
    RewardEstimate,
    combine_estimate,
    meets_minimum,
    pool_token_amount,
    should_reinvest_before_deposit,
)
from ..core.shares import assets_for_shares, quote_deposit, quote_withdraw, shares_for_assets
from ..core.types import Account, AssetId, Caller, Event, PoolId, VaultEvent, VaultParams
from ..state.nonces import NonceTable
from ..state.shares import ShareLedger
from .authorization import DepositAuthorization, verify_authorization
from .converter import SameAssetConverter
from .interfaces import (
    MAX_ALLOWANCE,
    AssetLedger,
    Checkpointable,
    RewardConverter,
    ShareLedgerLike,
    StakingAdapter,
)

logger = logging.getLogger(__name__)


def _as_caller(caller: Caller | Account) -> Caller:
    if isinstance(caller, Caller):
        return caller
    if isinstance(caller, str) and caller:
        return Caller(address=caller)
    raise TypeError("caller must be a Caller or a non-empty account str")


def _require_amount(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


class CompoundingVault:
    def __init__(
        self,
        params: VaultParams,
        *,
        address: Account,
        asset_ledger: AssetLedger,
        staking: StakingAdapter,
        converter: Optional[RewardConverter] = None,
        share_ledger: Optional[ShareLedgerLike] = None,
        nonces: Optional[NonceTable] = None,
        chain_id: str = "vault-local",
    ) -> None:
        self.params = params
        self.address = address
        self.chain_id = chain_id
        self._ledger = asset_ledger
        self._staking = staking
        self._converter: RewardConverter = converter if converter is not None else SameAssetConverter()
        self._shares: ShareLedgerLike = share_ledger if share_ledger is not None else ShareLedger()
        self._nonces = nonces if nonces is not None else NonceTable()

        self._fees: FeeSchedule = params.fees
        self._min_tokens_to_reinvest = params.min_tokens_to_reinvest
        self._max_tokens_to_deposit_without_reinvest = params.max_tokens_to_deposit_without_reinvest
        self._deposits_enabled = params.deposits_enabled
        self._owner = params.owner
        self._dev = params.dev
        self._rescued = 0

        self.events: list[VaultEvent] = []
        self._pending_events: Optional[list[VaultEvent]] = None
        self._in_call = False

        pool_reward = staking.reward_asset
        if not self._converter.supports(pool_reward, params.reward_asset):
            raise ConfigurationError(f"no conversion route {pool_reward} -> {params.reward_asset}")
        if not self._converter.supports(params.reward_asset, params.deposit_asset):
            raise ConfigurationError(f"no conversion route {params.reward_asset} -> {params.deposit_asset}")

        self._approve_collaborators()
        self._emit(Event.REINVEST, total_deposits=0, total_shares=0)
        logger.info(
            "vault %s created: deposit=%s reward=%s pool=%s",
            address, params.deposit_asset, params.reward_asset, params.pool_id,
        )

    # -- immutable configuration ---------------------------------------------

    @property
    def deposit_asset(self) -> AssetId:
        return self.params.deposit_asset

    @property
    def reward_asset(self) -> AssetId:
        return self.params.reward_asset

    @property
    def pool_id(self) -> PoolId:
        return self.params.pool_id

    # -- mutable settings (read-only views) ----------------------------------

    @property
    def fees(self) -> FeeSchedule:
        return self._fees

    @property
    def min_tokens_to_reinvest(self) -> int:
        return self._min_tokens_to_reinvest

    @property
    def max_tokens_to_deposit_without_reinvest(self) -> int:
        return self._max_tokens_to_deposit_without_reinvest

    @property
    def deposits_enabled(self) -> bool:
        return self._deposits_enabled

    @property
    def owner(self) -> Account:
        return self._owner

    @property
    def dev(self) -> Account:
        return self._dev

    @property
    def rescued_balance(self) -> int:
        """Rescued deposit tokens held by the vault, kept out of reinvests."""
        return self._rescued

    # -- atomic sections -----------------------------------------------------

    def _collaborators(self) -> list[Any]:
        seen: dict[int, Any] = {}
        for c in (self._ledger, self._shares, self._staking, self._converter, self._nonces):
            seen.setdefault(id(c), c)
        return list(seen.values())

    def _settings(self) -> tuple:
        return (
            self._fees,
            self._min_tokens_to_reinvest,
            self._max_tokens_to_deposit_without_reinvest,
            self._deposits_enabled,
            self._owner,
            self._dev,
            self._rescued,
        )

    def _restore_settings(self, saved: tuple) -> None:
        (
            self._fees,
            self._min_tokens_to_reinvest,
            self._max_tokens_to_deposit_without_reinvest,
            self._deposits_enabled,
            self._owner,
            self._dev,
            self._rescued,
        ) = saved

    def snapshot(self) -> VaultSnapshot:
        return VaultSnapshot(
            total_shares=self._shares.total_supply,
            share_balances=self._shares.get_all_balances(),
            total_deposits=self.total_deposits(),
            fee_bips_total=self._fees.total_bips,
        )

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        if self._in_call:
            raise VaultPermissionError(f"reentrant call to {name}")
        checkpoints = [(c, c.checkpoint()) for c in self._collaborators() if isinstance(c, Checkpointable)]
        settings = self._settings()
        self._in_call = True
        self._pending_events = []
        try:
            yield
            violations = check_all(self.snapshot())
            if violations:
                raise VaultInvariantError(violations)
        except Exception:
            for collaborator, token in reversed(checkpoints):
                collaborator.restore(token)
            self._restore_settings(settings)
            logger.warning("%s rolled back", name)
            raise
        else:
            self.events.extend(self._pending_events)
        finally:
            self._pending_events = None
            self._in_call = False

    def _emit(self, event: Event, **fields: Any) -> None:
        record = VaultEvent(event=event, fields=fields)
        if self._pending_events is None:
            self.events.append(record)
        else:
            self._pending_events.append(record)

    def _require_owner(self, caller: Caller) -> None:
        if caller.address != self._owner:
            raise VaultPermissionError(f"{caller.address} is not the owner")

    def _pay(self, asset: AssetId, to: Account, amount: int) -> None:
        if amount > 0 and not self._ledger.transfer(asset, self.address, to, amount):
            raise TransferError(f"transfer of {amount} {asset} to {to} failed")

    # -- reads -----------------------------------------------------------------

    def total_deposits(self) -> int:
        """Deposit tokens the pool holds for the vault."""
        return self._staking.staked_balance(self.pool_id, self.address)

    def total_shares(self) -> int:
        return self._shares.total_supply

    def balance_of(self, account: Account) -> int:
        return self._shares.balance_of(account)

    def _unreserved_balance(self, asset: AssetId) -> int:
        held = self._ledger.balance_of(self.address, asset)
        if asset == self.deposit_asset:
            held = max(0, held - self._rescued)
        return held

    def estimate_deployed_balance(self) -> int:
        """Staked position net of the pool's exit fee."""
        deposit_balance = self.total_deposits()
        withdraw_fee = fee_for(
            deposit_balance,
            self._staking.withdraw_fee_bips(self.pool_id),
            self._staking.fee_denominator(),
        )
        return deposit_balance - withdraw_fee

    def get_shares_for_deposit_tokens(self, amount: int) -> int:
        return shares_for_assets(amount, self._shares.total_supply, self.total_deposits())

    def get_deposit_tokens_for_shares(self, shares: int) -> int:
        return assets_for_shares(shares, self._shares.total_supply, self.total_deposits())

    def estimate_reward(self) -> RewardEstimate:
        pool_reward = self._staking.reward_asset
        same = pool_reward == self.reward_asset
        pool_tokens = pool_token_amount(
            held=self._unreserved_balance(pool_reward),
            pending=self._staking.pending_reward_estimate(self.pool_id, self.address),
            same_as_reward=same,
        )
        converted = 0
        if pool_tokens > 0:
            converted = self._converter.estimate_conversion(pool_tokens, pool_reward, self.reward_asset)
        return combine_estimate(
            pool_tokens=pool_tokens,
            converted=converted,
            reward_token_balance=self._unreserved_balance(self.reward_asset),
        )

    def check_reward(self) -> int:
        """Estimated reward-asset value a reinvest would compound right now."""
        return self.estimate_reward().estimated_total_reward

    def estimate_reinvest_reward(self) -> int:
        return estimate_reinvest_reward(self.check_reward(), self._fees)

    # -- reinvest --------------------------------------------------------------

    def _reinvest(self, beneficiary: Account) -> ReinvestReport:
        pool_reward = self._staking.reward_asset
        held_before = self._ledger.balance_of(self.address, pool_reward)
        self._staking.harvest_rewards(self.pool_id)
        harvested = self._ledger.balance_of(self.address, pool_reward) - held_before

        if pool_reward != self.reward_asset:
            pool_tokens = self._unreserved_balance(pool_reward)
            if pool_tokens > 0:
                self._converter.swap(pool_tokens, pool_reward, self.reward_asset)

        amount = self._unreserved_balance(self.reward_asset)
        split = split_reward(amount, self._fees)
        self._pay(self.reward_asset, self._dev, split.dev_fee)
        self._pay(self.reward_asset, self._owner, split.admin_fee)
        self._pay(self.reward_asset, beneficiary, split.reinvest_fee)

        to_stake = split.net
        if split.net > 0 and self.reward_asset != self.deposit_asset:
            to_stake = self._converter.swap(split.net, self.reward_asset, self.deposit_asset)
        if to_stake > 0:
            self._staking.stake(self.pool_id, to_stake)

        report = ReinvestReport(
            harvested_pool_tokens=harvested,
            split=split,
            staked=to_stake,
            total_deposits_after=self.total_deposits(),
            total_shares_after=self._shares.total_supply,
        )
        self._emit(
            Event.REINVEST,
            total_deposits=report.total_deposits_after,
            total_shares=report.total_shares_after,
        )
        return report

    def reinvest(self, caller: Caller | Account) -> ReinvestReport:
        """
        Compound outstanding rewards. Direct callers only; the caller earns
        the reinvest reward.

        Raises:
            VaultPermissionError: call arrived through an intermediary contract.
            BelowThresholdError: estimated reward under `min_tokens_to_reinvest`.
        """
        caller = _as_caller(caller)
        with self._operation("reinvest"):
            if caller.via_contract:
                raise VaultPermissionError("reinvest must be called directly by an external account")
            estimate = self.estimate_reward()
            if not meets_minimum(estimate, self._min_tokens_to_reinvest):
                raise BelowThresholdError(
                    f"reward {estimate.estimated_total_reward} < minimum {self._min_tokens_to_reinvest}"
                )
            report = self._reinvest(caller.address)
        logger.info(
            "reinvest by %s: gross=%d staked=%d total_deposits=%d total_shares=%d",
            caller.address, report.gross, report.staked,
            report.total_deposits_after, report.total_shares_after,
        )
        return report

    # -- deposits and withdrawals ---------------------------------------------

    def _deposit(self, *, payer: Account, account: Account, amount: int, beneficiary: Account) -> int:
        if not self._deposits_enabled:
            raise DepositsDisabledError()
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError("amount must be an int")
        if amount <= 0:
            raise ZeroAmountError(f"deposit amount must be positive: {amount}")

        if should_reinvest_before_deposit(self.estimate_reward(), self._max_tokens_to_deposit_without_reinvest):
            self._reinvest(beneficiary)

        total_deposits = self.total_deposits()
        total_shares = self._shares.total_supply
        if total_shares > 0 and total_deposits == 0:
            raise ZeroAmountError(f"{total_shares} shares outstanding with nothing staked; deposit cannot be priced")
        deposit_fee_bips = self._staking.deposit_fee_bips(self.pool_id)
        fee_denominator = self._staking.fee_denominator()

        before = self._ledger.balance_of(self.address, self.deposit_asset)
        if not self._ledger.transfer_from(self.deposit_asset, self.address, payer, self.address, amount):
            raise TransferError(f"could not pull {amount} {self.deposit_asset} from {payer}")
        received = self._ledger.balance_of(self.address, self.deposit_asset) - before

        if received <= 0:
            raise ZeroAmountError(f"deposit of {amount} delivered nothing")
        self._staking.stake(self.pool_id, received)

        quote = quote_deposit(
            received,
            deposit_fee_bips=deposit_fee_bips,
            fee_denominator=fee_denominator,
            total_shares=total_shares,
            total_deposits=total_deposits,
            staked_increase=self.total_deposits() - total_deposits,
        )
        if quote.shares == 0:
            raise ZeroAmountError(f"deposit of {amount} mints no shares")
        self._shares.mint(account, quote.shares)
        self._emit(Event.DEPOSIT, account=account, amount=amount)
        logger.debug("deposit %d by %s for %s: %d shares", amount, payer, account, quote.shares)
        return quote.shares

    def deposit(self, caller: Caller | Account, amount: int) -> int:
        """Deposit `amount` for the caller; returns shares minted."""
        caller = _as_caller(caller)
        with self._operation("deposit"):
            shares = self._deposit(payer=caller.address, account=caller.address, amount=amount, beneficiary=caller.address)
        return shares

    def deposit_for(self, caller: Caller | Account, account: Account, amount: int) -> int:
        """Deposit the caller's tokens, minting shares to `account`."""
        caller = _as_caller(caller)
        with self._operation("deposit_for"):
            shares = self._deposit(payer=caller.address, account=account, amount=amount, beneficiary=caller.address)
        return shares

    def deposit_with_authorization(
        self,
        caller: Caller | Account,
        authorization: DepositAuthorization,
        signature: str,
        *,
        now: int,
    ) -> int:
        """Deposit on behalf of a signed `DepositAuthorization` owner."""
        caller = _as_caller(caller)
        with self._operation("deposit_with_authorization"):
            verify_authorization(
                authorization,
                signature,
                chain_id=self.chain_id,
                now=now,
                expected_spender=self.address,
                expected_asset=self.deposit_asset,
                nonces=self._nonces,
            )
            self._ledger.approve(self.deposit_asset, authorization.owner, self.address, authorization.amount)
            shares = self._deposit(
                payer=authorization.owner,
                account=authorization.owner,
                amount=authorization.amount,
                beneficiary=caller.address,
            )
        return shares

    def withdraw(self, caller: Caller | Account, share_amount: int) -> int:
        """
        Burn `share_amount` shares for deposit tokens; returns tokens paid out.

        A share amount worth zero deposit tokens is a no-op (nothing burned,
        nothing transferred). Never triggers a reinvest.
        """
        caller = _as_caller(caller)
        _require_amount("share_amount", share_amount)
        with self._operation("withdraw"):
            held = self._shares.balance_of(caller.address)
            if share_amount > held:
                raise InsufficientSharesError(f"{caller.address} holds {held} shares, asked {share_amount}")
            quote = quote_withdraw(
                share_amount,
                withdraw_fee_bips=self._staking.withdraw_fee_bips(self.pool_id),
                fee_denominator=self._staking.fee_denominator(),
                total_shares=self._shares.total_supply,
                total_deposits=self.total_deposits(),
            )
            if quote.assets == 0:
                logger.debug("withdraw of %d shares by %s resolves to zero; skipped", share_amount, caller.address)
                return 0
            before = self._ledger.balance_of(self.address, self.deposit_asset)
            self._staking.unstake(self.pool_id, quote.assets)
            # What actually arrived; equals quote.payout unless the token charges on transfer.
            paid = min(quote.payout, self._ledger.balance_of(self.address, self.deposit_asset) - before)
            self._pay(self.deposit_asset, caller.address, paid)
            self._shares.burn(caller.address, share_amount)
            self._emit(Event.WITHDRAW, account=caller.address, amount=quote.assets)
        logger.debug("withdraw %d shares by %s: paid %d", share_amount, caller.address, paid)
        return paid

    # -- configuration ---------------------------------------------------------

    def update_min_tokens_to_reinvest(self, caller: Caller | Account, amount: int) -> None:
        caller = _as_caller(caller)
        with self._operation("update_min_tokens_to_reinvest"):
            self._require_owner(caller)
            _require_amount("amount", amount)
            old, self._min_tokens_to_reinvest = self._min_tokens_to_reinvest, amount
            self._emit(Event.UPDATE_MIN_TOKENS_TO_REINVEST, old=old, new=amount)
        logger.info("min_tokens_to_reinvest %d -> %d", old, amount)

    def update_max_tokens_to_deposit_without_reinvest(self, caller: Caller | Account, amount: int) -> None:
        caller = _as_caller(caller)
        with self._operation("update_max_tokens_to_deposit_without_reinvest"):
            self._require_owner(caller)
            _require_amount("amount", amount)
            old, self._max_tokens_to_deposit_without_reinvest = self._max_tokens_to_deposit_without_reinvest, amount
            self._emit(Event.UPDATE_MAX_TOKENS_TO_DEPOSIT_WITHOUT_REINVEST, old=old, new=amount)
        logger.info("max_tokens_to_deposit_without_reinvest %d -> %d", old, amount)

    def _update_fee(self, caller: Caller | Account, name: str, event: Event, bips: int) -> None:
        caller = _as_caller(caller)
        with self._operation(f"update_{name}"):
            self._require_owner(caller)
            old = getattr(self._fees, name)
            self._fees = getattr(self._fees, f"with_{name.removesuffix('_bips')}")(bips)
            self._emit(event, old=old, new=bips)
        logger.info("%s %d -> %d", name, old, bips)

    def update_admin_fee(self, caller: Caller | Account, bips: int) -> None:
        self._update_fee(caller, "admin_fee_bips", Event.UPDATE_ADMIN_FEE, bips)

    def update_dev_fee(self, caller: Caller | Account, bips: int) -> None:
        self._update_fee(caller, "dev_fee_bips", Event.UPDATE_DEV_FEE, bips)

    def update_reinvest_reward(self, caller: Caller | Account, bips: int) -> None:
        self._update_fee(caller, "reinvest_reward_bips", Event.UPDATE_REINVEST_REWARD, bips)

    def _set_deposits_enabled(self, enabled: bool) -> None:
        if self._deposits_enabled == enabled:
            return
        self._deposits_enabled = enabled
        self._emit(Event.DEPOSITS_ENABLED, enabled=enabled)

    def update_deposits_enabled(self, caller: Caller | Account, enabled: bool) -> None:
        caller = _as_caller(caller)
        with self._operation("update_deposits_enabled"):
            self._require_owner(caller)
            if not isinstance(enabled, bool):
                raise TypeError("enabled must be a bool")
            self._set_deposits_enabled(enabled)
        logger.info("deposits_enabled=%s", enabled)

    def update_dev_address(self, caller: Caller | Account, new_dev: Account) -> None:
        """Only the current dev may hand over the dev fee recipient."""
        caller = _as_caller(caller)
        with self._operation("update_dev_address"):
            if caller.address != self._dev:
                raise VaultPermissionError(f"{caller.address} is not the dev")
            if not isinstance(new_dev, str) or not new_dev:
                raise ConfigurationError("dev address must be a non-empty str")
            old, self._dev = self._dev, new_dev
            self._emit(Event.UPDATE_DEV_ADDRESS, old=old, new=new_dev)
        logger.info("dev address %s -> %s", old, new_dev)

    # -- admin / recovery --------------------------------------------------------

    def _approve_collaborators(self) -> None:
        self._ledger.approve(self.deposit_asset, self.address, self._staking.spender, MAX_ALLOWANCE)
        spender = self._converter.spender
        if spender:
            for asset in {self._staking.reward_asset, self.reward_asset}:
                self._ledger.approve(asset, self.address, spender, MAX_ALLOWANCE)

    def set_allowances(self, caller: Caller | Account) -> None:
        """(Re-)grant unlimited allowances to the staking pool and the swap venue."""
        caller = _as_caller(caller)
        with self._operation("set_allowances"):
            self._require_owner(caller)
            self._approve_collaborators()

    def revoke_allowance(self, caller: Caller | Account, asset: AssetId, spender: Account) -> None:
        caller = _as_caller(caller)
        with self._operation("revoke_allowance"):
            self._require_owner(caller)
            self._ledger.approve(asset, self.address, spender, 0)
            self._emit(Event.ALLOWANCE_REVOKED, asset=asset, spender=spender)
        logger.info("allowance for %s on %s revoked", spender, asset)

    def recover_asset(self, caller: Caller | Account, asset: AssetId, amount: int) -> None:
        """Send stray holdings of `asset` to the owner, releasing rescued principal first."""
        caller = _as_caller(caller)
        with self._operation("recover_asset"):
            self._require_owner(caller)
            if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
                raise ZeroAmountError(f"recover amount must be positive: {amount}")
            self._pay(asset, self._owner, amount)
            if asset == self.deposit_asset:
                self._rescued -= min(amount, self._rescued)
            self._emit(Event.RECOVERED, asset=asset, amount=amount)
        logger.info("recovered %d %s to %s", amount, asset, self._owner)

    def rescue_deployed_funds(
        self,
        caller: Caller | Account,
        min_acceptable: int,
        disable_deposits: bool,
    ) -> int:
        """
        Emergency-unstake the whole position back into the vault. The recovered
        tokens are reserved from reinvests until `recover_asset` hands them out.

        Raises:
            InsufficientRescueError: fewer than `min_acceptable` tokens came back.
        """
        caller = _as_caller(caller)
        with self._operation("rescue_deployed_funds"):
            self._require_owner(caller)
            _require_amount("min_acceptable", min_acceptable)
            before = self._ledger.balance_of(self.address, self.deposit_asset)
            self._staking.emergency_unstake(self.pool_id)
            recovered = self._ledger.balance_of(self.address, self.deposit_asset) - before
            if recovered < min_acceptable:
                raise InsufficientRescueError(f"recovered {recovered} < accepted minimum {min_acceptable}")
            self._rescued += recovered
            self._emit(Event.REINVEST, total_deposits=self.total_deposits(), total_shares=self._shares.total_supply)
            if disable_deposits:
                self._set_deposits_enabled(False)
        logger.warning("rescued %d %s from pool %s (deposits_enabled=%s)",
                       recovered, self.deposit_asset, self.pool_id, self._deposits_enabled)
        return recovered
