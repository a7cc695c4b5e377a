from __future__ import annotations

import pytest

from src.core.errors import ConfigurationError
from src.core.fees import FeeSchedule
from src.integration.config import load_vault_params, vault_params_from_mapping

_DOC = """\
deposit_asset: LP-AVAX-USDC
reward_asset: WAVAX
pool_id: 7
owner: admin
dev: dev
fees:
  admin_fee_bips: 200
  dev_fee_bips: 300
  reinvest_reward_bips: 100
min_tokens_to_reinvest: 1000
max_tokens_to_deposit_without_reinvest: 50000
"""


def test_load_from_yaml(tmp_path) -> None:
    path = tmp_path / "vault.yaml"
    path.write_text(_DOC, encoding="utf-8")

    params = load_vault_params(path)

    assert params.deposit_asset == "LP-AVAX-USDC"
    assert params.reward_asset == "WAVAX"
    assert params.pool_id == "7"
    assert params.fees == FeeSchedule(admin_fee_bips=200, dev_fee_bips=300, reinvest_reward_bips=100)
    assert params.min_tokens_to_reinvest == 1000
    assert params.max_tokens_to_deposit_without_reinvest == 50000
    assert params.deposits_enabled is True


def test_minimal_mapping_uses_defaults() -> None:
    params = vault_params_from_mapping(
        {"deposit_asset": "A", "reward_asset": "A", "pool_id": "0", "owner": "o", "dev": "d"}
    )

    assert params.fees == FeeSchedule()
    assert params.min_tokens_to_reinvest == 0


@pytest.mark.parametrize(
    "patch",
    [
        {"surprise": 1},
        {"fees": {"admin_fee_bips": 6000, "dev_fee_bips": 5000}},
        {"fees": {"treasury_fee_bips": 1}},
        {"fees": [100]},
        {"min_tokens_to_reinvest": -1},
        {"deposits_enabled": "yes"},
        {"owner": ""},
    ],
)
def test_invalid_mappings_rejected(patch) -> None:
    data = {"deposit_asset": "A", "reward_asset": "A", "pool_id": "0", "owner": "o", "dev": "d"}
    data.update(patch)

    with pytest.raises(ConfigurationError):
        vault_params_from_mapping(data)


def test_missing_key_rejected() -> None:
    with pytest.raises(ConfigurationError):
        vault_params_from_mapping({"deposit_asset": "A", "reward_asset": "A", "pool_id": "0", "owner": "o"})


def test_non_mapping_document_rejected(tmp_path) -> None:
    path = tmp_path / "vault.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_vault_params(path)


def test_malformed_yaml_rejected(tmp_path) -> None:
    path = tmp_path / "vault.yaml"
    path.write_text("deposit_asset: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_vault_params(path)
