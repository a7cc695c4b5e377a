"""Invariant checkers for the compounding vault.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant ids (empty = all pass). The vault runs
`check_all()` on its post-state before an operation commits.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

from .fees import BIPS_DIVISOR


@dataclass(frozen=True)
class VaultSnapshot:
    """Observable vault state at a point in time."""

    total_shares: int
    share_balances: Mapping[str, int]
    total_deposits: int
    fee_bips_total: int


def inv_shares_conserved(s: VaultSnapshot) -> bool:
    return sum(s.share_balances.values()) == s.total_shares


def inv_share_balances_non_negative(s: VaultSnapshot) -> bool:
    return all(v >= 0 for v in s.share_balances.values())


def inv_total_deposits_non_negative(s: VaultSnapshot) -> bool:
    return s.total_deposits >= 0


def inv_fee_bips_bounded(s: VaultSnapshot) -> bool:
    return 0 <= s.fee_bips_total <= BIPS_DIVISOR


_ALL: tuple[tuple[str, Callable[[VaultSnapshot], bool]], ...] = (
    ("shares_conserved", inv_shares_conserved),
    ("share_balances_non_negative", inv_share_balances_non_negative),
    ("total_deposits_non_negative", inv_total_deposits_non_negative),
    ("fee_bips_bounded", inv_fee_bips_bounded),
)


def check_all(s: VaultSnapshot) -> list[str]:
    return [name for name, check in _ALL if not check(s)]
