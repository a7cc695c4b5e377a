"""
Core vault algorithms (pure, integer-only)
"""

from .errors import (
    AuthorizationError,
    BelowThresholdError,
    ConfigurationError,
    DepositsDisabledError,
    InsufficientRescueError,
    InsufficientSharesError,
    InsufficientStakeError,
    SlippageError,
    TransferError,
    VaultError,
    VaultInvariantError,
    VaultPermissionError,
    ZeroAmountError,
)
from .fees import BIPS_DIVISOR, FeeSchedule, RewardSplit, estimate_reinvest_reward, fee_for, split_reward
from .invariants import VaultSnapshot, check_all
from .reinvest import ReinvestReport, RewardEstimate, should_reinvest_before_deposit
from .shares import assets_for_shares, quote_deposit, quote_withdraw, shares_for_assets
from .swap import SwapQuote, quote_exact_in
from .types import Caller, Event, VaultEvent, VaultParams

__all__ = [
    "AuthorizationError",
    "BelowThresholdError",
    "ConfigurationError",
    "DepositsDisabledError",
    "InsufficientRescueError",
    "InsufficientSharesError",
    "InsufficientStakeError",
    "SlippageError",
    "TransferError",
    "VaultError",
    "VaultInvariantError",
    "VaultPermissionError",
    "ZeroAmountError",
    "BIPS_DIVISOR",
    "FeeSchedule",
    "RewardSplit",
    "estimate_reinvest_reward",
    "fee_for",
    "split_reward",
    "VaultSnapshot",
    "check_all",
    "ReinvestReport",
    "RewardEstimate",
    "should_reinvest_before_deposit",
    "assets_for_shares",
    "quote_deposit",
    "quote_withdraw",
    "shares_for_assets",
    "SwapQuote",
    "quote_exact_in",
    "Caller",
    "Event",
    "VaultEvent",
    "VaultParams",
]
