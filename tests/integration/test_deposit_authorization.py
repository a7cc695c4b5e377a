# [TESTER] v1

from __future__ import annotations

import pytest
from py_ecc.bls import G2Basic

from src.core.errors import AuthorizationError
from src.core.types import Event
from src.integration.authorization import DepositAuthorization, authorization_digest, sign_authorization
from vault_harness import KEEPER, TOKEN, VAULT, build_harness

CHAIN_ID = "vault-local"


def _keypair(seed: bytes = b"\x01" * 32):
    sk = G2Basic.KeyGen(seed)
    return sk, "0x" + G2Basic.SkToPk(sk).hex()


def _auth(owner: str, **overrides) -> DepositAuthorization:
    fields = dict(owner=owner, spender=VAULT, asset=TOKEN, amount=1000, nonce=1, deadline=500)
    fields.update(overrides)
    return DepositAuthorization(**fields)


def _funded():
    h = build_harness()
    sk, owner = _keypair()
    h.ledger.mint(owner, TOKEN, 5000)
    return h, sk, owner


def test_signed_deposit_credits_owner_without_prior_approval() -> None:
    h, sk, owner = _funded()
    auth = _auth(owner)
    sig = sign_authorization(sk, auth, chain_id=CHAIN_ID)

    shares = h.vault.deposit_with_authorization(KEEPER, auth, sig, now=100)

    assert shares == 1000
    assert h.vault.balance_of(owner) == 1000
    assert h.vault.balance_of(KEEPER) == 0
    assert h.ledger.balance_of(owner, TOKEN) == 4000
    assert h.ledger.allowance(TOKEN, owner, VAULT) == 0
    assert h.vault.events[-1].event is Event.DEPOSIT


def test_replayed_authorization_rejected() -> None:
    h, sk, owner = _funded()
    auth = _auth(owner)
    sig = sign_authorization(sk, auth, chain_id=CHAIN_ID)
    h.vault.deposit_with_authorization(KEEPER, auth, sig, now=100)

    with pytest.raises(AuthorizationError):
        h.vault.deposit_with_authorization(KEEPER, auth, sig, now=100)

    assert h.vault.balance_of(owner) == 1000


def test_sequential_nonces_accepted() -> None:
    h, sk, owner = _funded()
    for nonce in (1, 2, 3):
        auth = _auth(owner, nonce=nonce, amount=100)
        h.vault.deposit_with_authorization(KEEPER, auth, sign_authorization(sk, auth, chain_id=CHAIN_ID), now=1)

    assert h.vault.balance_of(owner) == 300


def test_skipped_nonce_rejected() -> None:
    h, sk, owner = _funded()
    auth = _auth(owner, nonce=2)

    with pytest.raises(AuthorizationError):
        h.vault.deposit_with_authorization(KEEPER, auth, sign_authorization(sk, auth, chain_id=CHAIN_ID), now=1)


def test_expired_authorization_rejected() -> None:
    h, sk, owner = _funded()
    auth = _auth(owner, deadline=50)

    with pytest.raises(AuthorizationError):
        h.vault.deposit_with_authorization(KEEPER, auth, sign_authorization(sk, auth, chain_id=CHAIN_ID), now=51)


@pytest.mark.parametrize("overrides", [{"spender": "other-vault"}, {"asset": "OTHER"}, {"amount": 0}])
def test_mismatched_authorization_rejected(overrides) -> None:
    h, sk, owner = _funded()
    auth = _auth(owner, **overrides)

    with pytest.raises(AuthorizationError):
        h.vault.deposit_with_authorization(KEEPER, auth, sign_authorization(sk, auth, chain_id=CHAIN_ID), now=1)


def test_signature_bound_to_chain_and_fields() -> None:
    h, sk, owner = _funded()
    auth = _auth(owner)
    other_chain = sign_authorization(sk, auth, chain_id="other-chain")

    with pytest.raises(AuthorizationError):
        h.vault.deposit_with_authorization(KEEPER, auth, other_chain, now=1)

    sig = sign_authorization(sk, auth, chain_id=CHAIN_ID)
    with pytest.raises(AuthorizationError):
        h.vault.deposit_with_authorization(KEEPER, _auth(owner, amount=2000), sig, now=1)

    # Failed attempts leave the nonce unused.
    h.vault.deposit_with_authorization(KEEPER, auth, sig, now=1)
    assert h.vault.balance_of(owner) == 1000


def test_signature_from_other_key_rejected() -> None:
    h, _sk, owner = _funded()
    other_sk, _ = _keypair(b"\x02" * 32)
    auth = _auth(owner)

    with pytest.raises(AuthorizationError):
        h.vault.deposit_with_authorization(KEEPER, auth, sign_authorization(other_sk, auth, chain_id=CHAIN_ID), now=1)


def test_malformed_signature_hex_rejected() -> None:
    h, _sk, owner = _funded()

    with pytest.raises(AuthorizationError):
        h.vault.deposit_with_authorization(KEEPER, _auth(owner), "0x1234", now=1)


def test_digest_ignores_owner_hex_prefix_and_case() -> None:
    _sk, owner = _keypair()
    bare = owner[2:]

    assert authorization_digest(_auth(owner), chain_id=CHAIN_ID) == authorization_digest(
        _auth(bare.upper()), chain_id=CHAIN_ID
    )
