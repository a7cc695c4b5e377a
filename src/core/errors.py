"""Exception types for the compounding vault.

Every failure raised by a vault operation derives from ``VaultError`` and
carries a stable ``code`` string, so callers can branch on the reason without
parsing messages. Operations are single-attempt: the vault never catches these
internally, it rolls back and re-raises.
"""

from __future__ import annotations


class VaultError(Exception):
    """Base class for vault failures."""

    code = "vault_error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.code
        super().__init__(f"{self.code}: {self.message}")


class ConfigurationError(VaultError):
    """Invalid fee schedule, threshold, or swap-route assignment."""

    code = "configuration"


class DepositsDisabledError(VaultError):
    code = "deposits_disabled"


class TransferError(VaultError):
    """An asset transfer reported failure."""

    code = "transfer_failed"


class InsufficientStakeError(VaultError):
    """Unstake requested more than the pool holds for the vault."""

    code = "insufficient_stake"


class InsufficientRescueError(VaultError):
    """Emergency unstake returned less than the accepted minimum."""

    code = "insufficient_rescue"


class BelowThresholdError(VaultError):
    code = "below_threshold"


class SlippageError(VaultError):
    """A conversion produced an implausible amount."""

    code = "slippage"


class ZeroAmountError(VaultError):
    code = "zero_amount"


class InsufficientSharesError(VaultError):
    code = "insufficient_shares"


class AuthorizationError(VaultError):
    """A signed deposit authorization was rejected."""

    code = "authorization"


class VaultPermissionError(VaultError, PermissionError):
    """Caller is not allowed to run the operation."""

    code = "permission"


class VaultInvariantError(VaultError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(", ".join(violations))
