"""Shared test fixtures: the two reference pools."""

import pytest

from src.pm_common.enums import PoolKind, Side
from src.pm_pool.domain.accounts import StaticPoolAccountProvider
from src.pm_pool.domain.models import CategoricalEvent, ThresholdEvent
from src.pm_pool.engine.engine import PoolEngine


@pytest.fixture
def accounts() -> StaticPoolAccountProvider:
    return StaticPoolAccountProvider(pool="POOL_ACC", manager="POOL_MGR")


@pytest.fixture
def categorical_pool(accounts: StaticPoolAccountProvider) -> PoolEngine:
    """default: 500 + 2500, no_default: 10000 + 5000 (ids 0-3)."""
    pool = PoolEngine(PoolKind.CATEGORICAL, accounts, fee_rate=0.03)
    pool.stake(CategoricalEvent("default"), 500, "barney")
    pool.stake(CategoricalEvent("default"), 2500, "barney")
    pool.stake(CategoricalEvent("no_default"), 10000, "arnold")
    pool.stake(CategoricalEvent("no_default"), 5000, "arnold")
    return pool


@pytest.fixture
def threshold_pool(accounts: StaticPoolAccountProvider) -> PoolEngine:
    """Longs @50/55/60 (ids 0-2), Shorts @60/55/50/40 (ids 3-6)."""
    pool = PoolEngine(PoolKind.THRESHOLD, accounts, fee_rate=0.03)
    pool.stake(ThresholdEvent(Side.LONG, 50), 500, "barney")
    pool.stake(ThresholdEvent(Side.LONG, 55), 250, "barney")
    pool.stake(ThresholdEvent(Side.LONG, 60), 1000, "barney")
    pool.stake(ThresholdEvent(Side.SHORT, 60), 700, "arnold")
    pool.stake(ThresholdEvent(Side.SHORT, 55), 900, "arnold")
    pool.stake(ThresholdEvent(Side.SHORT, 50), 1000, "arnold")
    pool.stake(ThresholdEvent(Side.SHORT, 40), 1500, "arnold")
    return pool
