"""
Reward converters: the swap venue the vault sells rewards through.

`PairConverter` keeps one constant-product pair per unordered asset pair. Pair
reserves are ledger balances held by the pair's own account, so liquidity is
seeded by minting to `pair_address(a, b)`.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet

from ..core.errors import ConfigurationError, SlippageError, TransferError
from ..core.fees import BIPS_DIVISOR
from ..core.swap import quote_exact_in
from ..core.types import Account, AssetId
from .ledger import InMemoryAssetLedger

logger = logging.getLogger(__name__)


class SameAssetConverter:
    """Converter for vaults whose pool reward, reward and deposit assets coincide."""

    spender: Account = ""

    def supports(self, from_asset: AssetId, to_asset: AssetId) -> bool:
        return from_asset == to_asset

    def estimate_conversion(self, amount: int, from_asset: AssetId, to_asset: AssetId) -> int:
        if from_asset != to_asset:
            return 0
        return amount

    def swap(self, amount: int, from_asset: AssetId, to_asset: AssetId) -> int:
        if from_asset != to_asset:
            raise ConfigurationError(f"no route {from_asset} -> {to_asset}")
        return amount


class PairConverter:
    """Constant-product router acting for `holder`."""

    def __init__(
        self,
        ledger: InMemoryAssetLedger,
        *,
        address: Account,
        holder: Account,
        max_slippage_bips: int = 500,
    ) -> None:
        if not (0 <= max_slippage_bips <= BIPS_DIVISOR):
            raise ConfigurationError(f"max_slippage_bips must be in [0, {BIPS_DIVISOR}]: {max_slippage_bips}")
        self.ledger = ledger
        self.address = address
        self.holder = holder
        self.max_slippage_bips = max_slippage_bips
        self._pairs: Dict[FrozenSet[AssetId], int] = {}

    @property
    def spender(self) -> Account:
        return self.address

    def add_pair(self, asset_a: AssetId, asset_b: AssetId, *, fee_bps: int = 30) -> Account:
        if asset_a == asset_b:
            raise ConfigurationError("pair assets must differ")
        if not (0 <= fee_bps <= BIPS_DIVISOR):
            raise ConfigurationError(f"fee_bps must be in [0, {BIPS_DIVISOR}]: {fee_bps}")
        self._pairs[frozenset((asset_a, asset_b))] = fee_bps
        return self.pair_address(asset_a, asset_b)

    def pair_address(self, asset_a: AssetId, asset_b: AssetId) -> Account:
        lo, hi = sorted((asset_a, asset_b))
        return f"{self.address}/pair/{lo}/{hi}"

    def supports(self, from_asset: AssetId, to_asset: AssetId) -> bool:
        return from_asset == to_asset or frozenset((from_asset, to_asset)) in self._pairs

    def reserves(self, from_asset: AssetId, to_asset: AssetId) -> tuple[int, int]:
        pair = self.pair_address(from_asset, to_asset)
        return self.ledger.balance_of(pair, from_asset), self.ledger.balance_of(pair, to_asset)

    def estimate_conversion(self, amount: int, from_asset: AssetId, to_asset: AssetId) -> int:
        if from_asset == to_asset:
            return amount
        fee_bps = self._pairs.get(frozenset((from_asset, to_asset)))
        if fee_bps is None or amount <= 0:
            return 0
        reserve_in, reserve_out = self.reserves(from_asset, to_asset)
        return quote_exact_in(
            reserve_in=reserve_in, reserve_out=reserve_out, amount_in=amount, fee_bps=fee_bps
        ).amount_out

    def swap(self, amount: int, from_asset: AssetId, to_asset: AssetId) -> int:
        if from_asset == to_asset or amount == 0:
            return amount
        fee_bps = self._pairs.get(frozenset((from_asset, to_asset)))
        if fee_bps is None:
            raise ConfigurationError(f"no pair for {from_asset} -> {to_asset}")

        pair = self.pair_address(from_asset, to_asset)
        reserve_in, reserve_out = self.reserves(from_asset, to_asset)
        if not self.ledger.transfer_from(from_asset, self.address, self.holder, pair, amount):
            raise TransferError(f"router could not pull {amount} {from_asset} from {self.holder}")
        # Price on what the pair actually received (fee-on-transfer inputs).
        actual_in = self.ledger.balance_of(pair, from_asset) - reserve_in
        expected = quote_exact_in(
            reserve_in=reserve_in, reserve_out=reserve_out, amount_in=amount, fee_bps=fee_bps
        ).amount_out
        quote = quote_exact_in(
            reserve_in=reserve_in, reserve_out=reserve_out, amount_in=actual_in, fee_bps=fee_bps
        )
        if quote.amount_out == 0:
            raise SlippageError(f"swap of {amount} {from_asset} yields nothing")

        before = self.ledger.balance_of(self.holder, to_asset)
        if not self.ledger.transfer(to_asset, pair, self.holder, quote.amount_out):
            raise TransferError(f"pair could not pay {quote.amount_out} {to_asset}")
        received = self.ledger.balance_of(self.holder, to_asset) - before

        floor = (expected * (BIPS_DIVISOR - self.max_slippage_bips)) // BIPS_DIVISOR
        if received < floor:
            raise SlippageError(f"received {received} {to_asset}, expected at least {floor}")
        logger.debug("swapped %d %s -> %d %s", amount, from_asset, received, to_asset)
        return received

    def checkpoint(self) -> Dict[FrozenSet[AssetId], int]:
        return dict(self._pairs)

    def restore(self, token: Dict[FrozenSet[AssetId], int]) -> None:
        self._pairs = dict(token)
