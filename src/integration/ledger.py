"""
In-memory asset ledger (token contract semantics over a BalanceTable).

Transfers report failure by returning False, the way token contracts do; the
vault turns a False into `TransferError`. Assets may be configured with a
transfer fee to model fee-on-transfer tokens: the fee is burned and the
recipient receives the remainder.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..core.fees import BIPS_DIVISOR, fee_for
from ..state.balances import Account, AssetId, BalanceTable
from .interfaces import MAX_ALLOWANCE


class InMemoryAssetLedger:
    def __init__(self) -> None:
        self.balances = BalanceTable()
        self._allowances: Dict[Tuple[AssetId, Account, Account], int] = {}
        self._transfer_fee_bips: Dict[AssetId, int] = {}

    def set_transfer_fee(self, asset: AssetId, bips: int) -> None:
        if not (0 <= bips <= BIPS_DIVISOR):
            raise ValueError(f"transfer fee must be in [0, {BIPS_DIVISOR}]: {bips}")
        self._transfer_fee_bips[asset] = bips

    def mint(self, account: Account, asset: AssetId, amount: int) -> None:
        self.balances.add(account, asset, amount)

    def balance_of(self, account: Account, asset: AssetId) -> int:
        return self.balances.get(account, asset)

    def total_supply(self, asset: AssetId) -> int:
        return self.balances.total_supply(asset)

    def allowance(self, asset: AssetId, owner: Account, spender: Account) -> int:
        return self._allowances.get((asset, owner, spender), 0)

    def approve(self, asset: AssetId, owner: Account, spender: Account, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"allowance must be non-negative: {amount}")
        if amount == 0:
            self._allowances.pop((asset, owner, spender), None)
        else:
            self._allowances[(asset, owner, spender)] = amount

    def transfer(self, asset: AssetId, src: Account, dst: Account, amount: int) -> bool:
        if amount < 0 or self.balances.get(src, asset) < amount:
            return False
        fee = fee_for(amount, self._transfer_fee_bips.get(asset, 0))
        self.balances.move(asset, src, dst, amount - fee)
        if fee:
            self.balances.add(src, asset, -fee)
        return True

    def transfer_from(self, asset: AssetId, spender: Account, src: Account, dst: Account, amount: int) -> bool:
        allowed = self.allowance(asset, src, spender)
        if amount < 0 or allowed < amount:
            return False
        if not self.transfer(asset, src, dst, amount):
            return False
        if allowed != MAX_ALLOWANCE:
            self.approve(asset, src, spender, allowed - amount)
        return True

    def checkpoint(self):
        return self.balances.checkpoint(), dict(self._allowances)

    def restore(self, token) -> None:
        balances, allowances = token
        self.balances.restore(balances)
        self._allowances = dict(allowances)
