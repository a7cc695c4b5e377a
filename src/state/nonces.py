"""
Nonce table for signed deposit authorizations.

We track, per owner pubkey, the last consumed authorization nonce. Policy is
strict sequential nonces: the next accepted authorization must carry
`last + 1`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .canonical import canonical_hex_fixed_allow_0x

PUBKEY_BYTES = 48


@dataclass
class NonceTable:
    """Mutable mapping: owner_pubkey -> last_used_nonce."""

    _last: Dict[str, int] = field(default_factory=dict)

    def get_last(self, pubkey: str) -> int:
        pk = canonical_hex_fixed_allow_0x(pubkey, nbytes=PUBKEY_BYTES, name="pubkey")
        return self._last.get(pk, 0)

    def consume(self, pubkey: str, nonce: int) -> None:
        """Record `nonce` as used. Raises ValueError unless it is exactly last + 1."""
        if not isinstance(nonce, int) or isinstance(nonce, bool) or nonce <= 0:
            raise ValueError("nonce must be a positive int")
        pk = canonical_hex_fixed_allow_0x(pubkey, nbytes=PUBKEY_BYTES, name="pubkey")
        expected = self._last.get(pk, 0) + 1
        if nonce != expected:
            raise ValueError(f"nonce out of sequence: expected {expected}, got {nonce}")
        self._last[pk] = nonce

    def get_all(self) -> Mapping[str, int]:
        return dict(self._last)

    def checkpoint(self) -> Dict[str, int]:
        return dict(self._last)

    def restore(self, token: Dict[str, int]) -> None:
        self._last = dict(token)
