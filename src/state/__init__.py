"""
State tables for the compounding vault
"""

from .balances import BalanceTable
from .nonces import NonceTable
from .shares import ShareLedger

__all__ = [
    "BalanceTable",
    "NonceTable",
    "ShareLedger",
]
