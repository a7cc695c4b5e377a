from __future__ import annotations

import pytest

from src.integration.interfaces import MAX_ALLOWANCE, AssetLedger, Checkpointable
from src.integration.ledger import InMemoryAssetLedger


def test_transfer_reports_failure_instead_of_raising() -> None:
    ledger = InMemoryAssetLedger()
    ledger.mint("a", "X", 10)

    assert ledger.transfer("a", "b", "X", 11) is False
    assert ledger.transfer("X", "a", "b", 11) is False
    assert ledger.transfer("X", "a", "b", 10) is True
    assert ledger.balance_of("b", "X") == 10


def test_transfer_from_spends_allowance() -> None:
    ledger = InMemoryAssetLedger()
    ledger.mint("a", "X", 10)
    ledger.approve("X", "a", "s", 6)

    assert ledger.transfer_from("X", "s", "a", "b", 7) is False
    assert ledger.transfer_from("X", "s", "a", "b", 4) is True
    assert ledger.allowance("X", "a", "s") == 2


def test_unlimited_allowance_is_not_spent() -> None:
    ledger = InMemoryAssetLedger()
    ledger.mint("a", "X", 10)
    ledger.approve("X", "a", "s", MAX_ALLOWANCE)

    ledger.transfer_from("X", "s", "a", "b", 10)

    assert ledger.allowance("X", "a", "s") == MAX_ALLOWANCE


def test_transfer_fee_is_burned() -> None:
    ledger = InMemoryAssetLedger()
    ledger.set_transfer_fee("X", 250)
    ledger.mint("a", "X", 1000)

    ledger.transfer("X", "a", "b", 1000)

    assert ledger.balance_of("b", "X") == 975
    assert ledger.total_supply("X") == 975
    with pytest.raises(ValueError):
        ledger.set_transfer_fee("X", 10_001)


def test_checkpoint_restores_balances_and_allowances() -> None:
    ledger = InMemoryAssetLedger()
    ledger.mint("a", "X", 10)
    token = ledger.checkpoint()
    ledger.approve("X", "a", "s", 5)
    ledger.transfer("X", "a", "b", 3)

    ledger.restore(token)

    assert ledger.balance_of("a", "X") == 10
    assert ledger.allowance("X", "a", "s") == 0


def test_satisfies_collaborator_protocols() -> None:
    ledger: AssetLedger = InMemoryAssetLedger()

    assert isinstance(ledger, Checkpointable)
