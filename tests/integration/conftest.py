from __future__ import annotations

from typing import Callable

import pytest

from vault_harness import VaultHarness, build_harness


@pytest.fixture
def make_harness() -> Callable[..., VaultHarness]:
    return build_harness


@pytest.fixture
def harness() -> VaultHarness:
    return build_harness()
