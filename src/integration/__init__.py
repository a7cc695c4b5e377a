"""
Imperative shell: collaborators, configuration and the vault aggregate
"""

from .config import load_vault_params, vault_params_from_mapping
from .converter import PairConverter, SameAssetConverter
from .ledger import InMemoryAssetLedger
from .pools import MasterChefAdapter, MasterChefPool, StakingRewardsAdapter, StakingRewardsPool
from .vault import CompoundingVault

__all__ = [
    "load_vault_params",
    "vault_params_from_mapping",
    "PairConverter",
    "SameAssetConverter",
    "InMemoryAssetLedger",
    "MasterChefAdapter",
    "MasterChefPool",
    "StakingRewardsAdapter",
    "StakingRewardsPool",
    "CompoundingVault",
]
