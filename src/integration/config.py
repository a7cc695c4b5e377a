"""
Vault configuration loading (YAML).

Example document:

    deposit_asset: LP-AVAX-USDC
    reward_asset: WAVAX
    pool_id: "7"
    owner: admin
    dev: dev
    fees:
      admin_fee_bips: 200
      dev_fee_bips: 300
      reinvest_reward_bips: 100
    min_tokens_to_reinvest: 1000
    max_tokens_to_deposit_without_reinvest: 0
    deposits_enabled: true
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from ..core.errors import ConfigurationError
from ..core.fees import FeeSchedule
from ..core.types import VaultParams

_TOP_LEVEL_KEYS = frozenset(
    {
        "deposit_asset",
        "reward_asset",
        "pool_id",
        "owner",
        "dev",
        "fees",
        "min_tokens_to_reinvest",
        "max_tokens_to_deposit_without_reinvest",
        "deposits_enabled",
    }
)
_FEE_KEYS = frozenset({"admin_fee_bips", "dev_fee_bips", "reinvest_reward_bips"})
_REQUIRED = ("deposit_asset", "reward_asset", "pool_id", "owner", "dev")


def vault_params_from_mapping(data: Mapping[str, Any]) -> VaultParams:
    if not isinstance(data, Mapping):
        raise ConfigurationError("vault config must be a mapping")
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigurationError(f"unknown config keys: {sorted(unknown)}")
    missing = [k for k in _REQUIRED if k not in data]
    if missing:
        raise ConfigurationError(f"missing config keys: {missing}")

    fees_raw = data.get("fees") or {}
    if not isinstance(fees_raw, Mapping):
        raise ConfigurationError("fees must be a mapping")
    unknown_fees = set(fees_raw) - _FEE_KEYS
    if unknown_fees:
        raise ConfigurationError(f"unknown fee keys: {sorted(unknown_fees)}")
    try:
        fees = FeeSchedule(**fees_raw)
    except TypeError as exc:
        raise ConfigurationError(str(exc)) from exc

    kwargs: dict[str, Any] = {k: data[k] for k in _TOP_LEVEL_KEYS - {"fees"} if k in data}
    # YAML reads bare numeric ids as ints.
    if isinstance(kwargs.get("pool_id"), int) and not isinstance(kwargs["pool_id"], bool):
        kwargs["pool_id"] = str(kwargs["pool_id"])
    return VaultParams(fees=fees, **kwargs)


def load_vault_params(path: str | Path) -> VaultParams:
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML in {path}: {exc}") from exc
    return vault_params_from_mapping(data)
