"""
Multi-asset balance tracking for the in-memory asset ledger.

Implements BalanceTable[Account, AssetId] -> Amount
"""

from typing import Dict, Tuple


# Type aliases
Account = str
AssetId = str
Amount = int  # Non-negative integer (arbitrary precision)


class BalanceTable:
    """
    Balance table mapping (account, asset) -> amount.

    Zero balances are dropped to keep the table sparse. `checkpoint()` and
    `restore()` let an atomic section roll the table back wholesale.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Account, AssetId], Amount] = {}

    def get(self, account: Account, asset: AssetId) -> Amount:
        """Get balance for (account, asset). Returns 0 if not found."""
        return self._balances.get((account, asset), 0)

    def set(self, account: Account, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (account, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((account, asset), None)
        else:
            self._balances[(account, asset)] = amount

    def add(self, account: Account, asset: AssetId, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(account, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(account, asset, new_balance)

    def move(self, asset: AssetId, src: Account, dst: Account, amount: Amount) -> None:
        """Move `amount` of `asset` from src to dst, all-or-nothing."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative: {amount}")
        self.add(src, asset, -amount)
        self.add(dst, asset, amount)

    def total_supply(self, asset: AssetId) -> Amount:
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def checkpoint(self) -> Dict[Tuple[Account, AssetId], Amount]:
        return dict(self._balances)

    def restore(self, token: Dict[Tuple[Account, AssetId], Amount]) -> None:
        self._balances = dict(token)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
