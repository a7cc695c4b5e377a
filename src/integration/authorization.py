"""
Signed deposit authorizations (delegated approval).

An owner signs a `DepositAuthorization` off-line; anyone may submit it with the
deposit. Signing format:

    sign( SHA256( domain_sep("vault_deposit_auth:{chain_id}", v1) || canonical_json(authorization) ) )

with BLS12-381 `G2Basic` (48-byte pubkeys, 96-byte signatures).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from py_ecc.bls import G2Basic

from ..core.errors import AuthorizationError
from ..state.canonical import canonical_hex_fixed_allow_0x, hex_to_bytes_fixed, signing_digest
from ..state.nonces import PUBKEY_BYTES, NonceTable

SIGNATURE_BYTES = 96


@dataclass(frozen=True)
class DepositAuthorization:
    owner: str
    spender: str
    asset: str
    amount: int
    nonce: int
    deadline: int

    def signing_dict(self) -> Dict[str, Any]:
        return {
            "owner": canonical_hex_fixed_allow_0x(self.owner, nbytes=PUBKEY_BYTES, name="owner"),
            "spender": self.spender,
            "asset": self.asset,
            "amount": self.amount,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


def authorization_digest(auth: DepositAuthorization, *, chain_id: str) -> bytes:
    return signing_digest(f"vault_deposit_auth:{chain_id}", auth.signing_dict())


def sign_authorization(secret_key: int, auth: DepositAuthorization, *, chain_id: str) -> str:
    """Return the 0x-hex BLS signature over `auth`."""
    return "0x" + G2Basic.Sign(secret_key, authorization_digest(auth, chain_id=chain_id)).hex()


def verify_authorization(
    auth: DepositAuthorization,
    signature_hex: str,
    *,
    chain_id: str,
    now: int,
    expected_spender: str,
    expected_asset: str,
    nonces: NonceTable,
) -> None:
    """
    Check an authorization and consume its nonce.

    Raises:
        AuthorizationError: expired, wrong spender/asset, bad amount,
            out-of-sequence nonce, or invalid signature.
    """
    if not isinstance(auth.amount, int) or isinstance(auth.amount, bool) or auth.amount <= 0:
        raise AuthorizationError("amount must be a positive int")
    if now > auth.deadline:
        raise AuthorizationError(f"authorization expired at {auth.deadline} (now {now})")
    if auth.spender != expected_spender:
        raise AuthorizationError(f"authorization is for spender {auth.spender!r}")
    if auth.asset != expected_asset:
        raise AuthorizationError(f"authorization is for asset {auth.asset!r}")

    try:
        pubkey = hex_to_bytes_fixed(auth.owner, nbytes=PUBKEY_BYTES, name="owner")
        signature = hex_to_bytes_fixed(signature_hex, nbytes=SIGNATURE_BYTES, name="signature")
    except (TypeError, ValueError) as exc:
        raise AuthorizationError(str(exc)) from exc

    expected_nonce = nonces.get_last(auth.owner) + 1
    if auth.nonce != expected_nonce:
        raise AuthorizationError(f"nonce out of sequence: expected {expected_nonce}, got {auth.nonce}")

    if not G2Basic.Verify(pubkey, authorization_digest(auth, chain_id=chain_id), signature):
        raise AuthorizationError("invalid signature")

    nonces.consume(auth.owner, auth.nonce)
