"""Data types for the compounding vault.

All types are frozen dataclasses (immutable).

Units/conventions:
- amounts are integer token units of the asset they are named after,
- `*_bips` rates are basis points (1/10_000),
- accounts and assets are opaque strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Mapping

from .errors import ConfigurationError
from .fees import FeeSchedule

Account = str
AssetId = str
PoolId = str


@unique
class Event(Enum):
    """One member per log record the vault emits."""
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"
    REINVEST = "Reinvest"
    DEPOSITS_ENABLED = "DepositsEnabled"
    UPDATE_ADMIN_FEE = "UpdateAdminFee"
    UPDATE_DEV_FEE = "UpdateDevFee"
    UPDATE_REINVEST_REWARD = "UpdateReinvestReward"
    UPDATE_MIN_TOKENS_TO_REINVEST = "UpdateMinTokensToReinvest"
    UPDATE_MAX_TOKENS_TO_DEPOSIT_WITHOUT_REINVEST = "UpdateMaxTokensToDepositWithoutReinvest"
    UPDATE_DEV_ADDRESS = "UpdateDevAddress"
    RECOVERED = "Recovered"
    ALLOWANCE_REVOKED = "AllowanceRevoked"


@dataclass(frozen=True)
class VaultEvent:
    event: Event
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]


@dataclass(frozen=True)
class Caller:
    """
    The account invoking an operation.

    `via_contract` is True when the call arrives through an intermediary
    execution context rather than directly from an externally owned account.
    """

    address: Account
    via_contract: bool = False


@dataclass(frozen=True)
class VaultParams:
    """Construction snapshot of a vault."""

    deposit_asset: AssetId
    reward_asset: AssetId
    pool_id: PoolId
    owner: Account
    dev: Account
    fees: FeeSchedule = FeeSchedule()
    min_tokens_to_reinvest: int = 0
    max_tokens_to_deposit_without_reinvest: int = 0
    deposits_enabled: bool = True

    def __post_init__(self) -> None:
        for name in ("deposit_asset", "reward_asset", "pool_id", "owner", "dev"):
            v = getattr(self, name)
            if not isinstance(v, str) or not v:
                raise ConfigurationError(f"{name} must be a non-empty str")
        if not isinstance(self.fees, FeeSchedule):
            raise ConfigurationError("fees must be a FeeSchedule")
        for name in ("min_tokens_to_reinvest", "max_tokens_to_deposit_without_reinvest"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise ConfigurationError(f"{name} must be a non-negative int")
        if not isinstance(self.deposits_enabled, bool):
            raise ConfigurationError("deposits_enabled must be a bool")
