"""
Vault share ledger.

Shares are a fungible claim on the vault's staked position. The ledger keeps
per-holder balances and the total supply side by side; every mutation moves
both, so `sum(balances) == total_supply` holds after each call.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .balances import Account, Amount


class ShareLedger:
    """
    Mapping holder -> share amount, plus the total supply.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[Account, Amount] = {}
        self._total_supply: Amount = 0

    @property
    def total_supply(self) -> Amount:
        return self._total_supply

    def balance_of(self, holder: Account) -> Amount:
        """Share balance of `holder`. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def _set(self, holder: Account, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Share balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def mint(self, holder: Account, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        self._set(holder, self.balance_of(holder) + amount)
        self._total_supply += amount

    def burn(self, holder: Account, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Burn amount must be non-negative: {amount}")
        current = self.balance_of(holder)
        if amount > current:
            raise ValueError(f"Insufficient shares: {current} < {amount}")
        self._set(holder, current - amount)
        self._total_supply -= amount

    def transfer(self, src: Account, dst: Account, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        current = self.balance_of(src)
        if amount > current:
            raise ValueError(f"Insufficient shares: {current} < {amount}")
        self._set(src, current - amount)
        self._set(dst, self.balance_of(dst) + amount)

    def get_all_balances(self) -> Dict[Account, Amount]:
        return dict(self._balances)

    def checkpoint(self) -> Tuple[Dict[Account, Amount], Amount]:
        return dict(self._balances), self._total_supply

    def restore(self, token: Tuple[Dict[Account, Amount], Amount]) -> None:
        balances, total = token
        self._balances = dict(balances)
        self._total_supply = total

    def __repr__(self) -> str:
        return f"ShareLedger({len(self._balances)} holders, supply={self._total_supply})"
