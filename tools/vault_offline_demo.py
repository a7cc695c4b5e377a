#!/usr/bin/env python3
"""
Offline walk-through of one compounding vault over the in-memory reference pool.

Loads vault parameters from YAML, wires a MasterChef-style pool and a
constant-product router around them, then runs: deposit -> accrue rewards ->
reinvest -> withdraw, printing balances after each step.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.core.errors import VaultError
from src.integration.config import load_vault_params
from src.integration.converter import PairConverter
from src.integration.ledger import InMemoryAssetLedger
from src.integration.pools import MasterChefAdapter, MasterChefPool
from src.integration.vault import CompoundingVault

VAULT = "vault"
CHEF = "chef"
ROUTER = "router"
DEPOSITOR = "alice"
KEEPER = "keeper"


def _build(config: Path, *, pool_reward: str, liquidity: int) -> tuple[InMemoryAssetLedger, MasterChefPool, CompoundingVault]:
    params = load_vault_params(config)
    ledger = InMemoryAssetLedger()
    chef = MasterChefPool(ledger, address=CHEF, reward_asset=pool_reward, fee_recipient="treasury")
    chef.add_pool(params.pool_id, params.deposit_asset)

    router = PairConverter(ledger, address=ROUTER, holder=VAULT)
    for a, b in ((pool_reward, params.reward_asset), (params.reward_asset, params.deposit_asset)):
        if a == b:
            continue
        pair = router.add_pair(a, b)
        ledger.mint(pair, a, liquidity)
        ledger.mint(pair, b, liquidity)

    vault = CompoundingVault(
        params,
        address=VAULT,
        asset_ledger=ledger,
        staking=MasterChefAdapter(chef, VAULT),
        converter=router,
    )
    return ledger, chef, vault


def _state(vault: CompoundingVault, ledger: InMemoryAssetLedger) -> dict:
    return {
        "total_deposits": vault.total_deposits(),
        "total_shares": vault.total_shares(),
        "depositor_shares": vault.balance_of(DEPOSITOR),
        "depositor_tokens": ledger.balance_of(DEPOSITOR, vault.deposit_asset),
        "pending_reward": vault.check_reward(),
    }


def main() -> int:
    ap = argparse.ArgumentParser(description="Run an offline deposit/reinvest/withdraw cycle against a vault config.")
    ap.add_argument("--config", default=str(Path(__file__).with_name("vault_example.yaml")), help="Vault YAML config.")
    ap.add_argument("--pool-reward", default="JOE", help="Asset the simulated pool pays rewards in.")
    ap.add_argument("--deposit", type=int, default=100_000, help="Deposit amount (default: 100000).")
    ap.add_argument("--rewards", type=int, default=5_000, help="Pool rewards accrued before reinvest.")
    ap.add_argument("--liquidity", type=int, default=10_000_000, help="Per-side reserves of each seeded pair.")
    ap.add_argument("--json", action="store_true", help="Emit machine-readable JSON.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log vault activity to stderr.")
    args = ap.parse_args()

    config = Path(args.config).expanduser().resolve()
    if not config.is_file():
        raise SystemExit(f"config not found: {config}")
    if args.deposit <= 0 or args.rewards <= 0:
        raise SystemExit("--deposit and --rewards must be > 0")
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(name)s: %(message)s")

    steps: list[dict] = []
    try:
        ledger, chef, vault = _build(config, pool_reward=args.pool_reward, liquidity=args.liquidity)

        ledger.mint(DEPOSITOR, vault.deposit_asset, args.deposit)
        ledger.approve(vault.deposit_asset, DEPOSITOR, VAULT, args.deposit)
        shares = vault.deposit(DEPOSITOR, args.deposit)
        steps.append({"step": "deposit", "shares": shares, **_state(vault, ledger)})

        ledger.mint(CHEF, args.pool_reward, args.rewards)
        chef.accrue_rewards(vault.pool_id, args.rewards)
        steps.append({"step": "accrue", **_state(vault, ledger)})

        report = vault.reinvest(KEEPER)
        steps.append({
            "step": "reinvest",
            "gross": report.gross,
            "dev_fee": report.split.dev_fee,
            "admin_fee": report.split.admin_fee,
            "caller_reward": report.split.reinvest_fee,
            "staked": report.staked,
            **_state(vault, ledger),
        })

        paid = vault.withdraw(DEPOSITOR, vault.balance_of(DEPOSITOR))
        steps.append({"step": "withdraw", "paid": paid, **_state(vault, ledger)})
    except VaultError as exc:
        print(f"[vault-demo] FAIL: {exc}")
        return 1

    if args.json:
        print(json.dumps(steps, indent=2, sort_keys=True))
        return 0
    for step in steps:
        name = step.pop("step")
        detail = " ".join(f"{k}={v}" for k, v in step.items())
        print(f"[vault-demo] {name}: {detail}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
