"""Tests for PoolApplicationService and the pm_pool schemas."""

import pytest

from src.pm_common.enums import PoolKind, Side
from src.pm_common.errors import InvalidSideError, PoolKindMismatchError, PoolNotFoundError
from src.pm_pool.application.schemas import (
    CreatePoolRequest,
    EventIn,
    PayoffCurveRequest,
    ProFormaRequest,
    SettleRequest,
    StakeRequest,
)
from src.pm_pool.application.service import PoolApplicationService
from src.pm_pool.domain.accounts import StaticPoolAccountProvider
from src.pm_pool.domain.models import CategoricalEvent, ThresholdEvent


def _service_with_pool(kind: PoolKind) -> tuple[PoolApplicationService, str]:
    svc = PoolApplicationService(StaticPoolAccountProvider(pool="P", manager="M"))
    summary = svc.create_pool(CreatePoolRequest(kind=kind))
    return svc, summary.pool_id


def _stake(svc: PoolApplicationService, pool_id: str, amount: float, **event: object) -> int:
    req = StakeRequest(event=EventIn(**event), amount=amount, owner="u1")
    return svc.stake(pool_id, req).position_id


class TestEventIn:
    def test_categorical(self) -> None:
        assert EventIn(category="default").to_domain(PoolKind.CATEGORICAL) == CategoricalEvent(
            "default"
        )

    def test_threshold(self) -> None:
        ev = EventIn(side=Side.SHORT, level=40).to_domain(PoolKind.THRESHOLD)
        assert ev == ThresholdEvent(Side.SHORT, 40)

    def test_threshold_shape_in_categorical_pool(self) -> None:
        with pytest.raises(PoolKindMismatchError):
            EventIn(side=Side.LONG, level=50).to_domain(PoolKind.CATEGORICAL)

    def test_category_in_threshold_pool(self) -> None:
        with pytest.raises(PoolKindMismatchError):
            EventIn(category="default").to_domain(PoolKind.THRESHOLD)

    def test_missing_side(self) -> None:
        with pytest.raises(InvalidSideError):
            EventIn(level=50).to_domain(PoolKind.THRESHOLD)

    def test_boolean_level_kept_as_bool(self) -> None:
        ev = EventIn.model_validate_json('{"side": "LONG", "level": true}')
        assert ev.level is True

    def test_boolean_outcome_kept_as_bool(self) -> None:
        assert SettleRequest.model_validate_json('{"outcome": true}').outcome is True
        assert SettleRequest.model_validate_json('{"outcome": 56}').outcome == 56
        assert SettleRequest.model_validate_json('{"outcome": "56"}').outcome == "56"


class TestCreatePool:
    def test_summary(self) -> None:
        svc, pool_id = _service_with_pool(PoolKind.THRESHOLD)
        summary = svc.get_summary(pool_id)
        assert pool_id.startswith("pool_")
        assert summary.kind == PoolKind.THRESHOLD
        assert summary.fee_rate == 0.03
        assert summary.pool_account == "P"
        assert summary.pool_manager_account == "M"
        assert summary.position_count == 0
        assert summary.outcome_levels == []

    def test_unknown_pool(self) -> None:
        svc = PoolApplicationService()
        with pytest.raises(PoolNotFoundError):
            svc.get_summary("pool_missing")

    def test_pools_are_independent(self) -> None:
        svc = PoolApplicationService()
        a = svc.create_pool(CreatePoolRequest(kind=PoolKind.CATEGORICAL)).pool_id
        b = svc.create_pool(CreatePoolRequest(kind=PoolKind.CATEGORICAL)).pool_id
        _stake(svc, a, 100, category="x")
        assert svc.get_summary(a).position_count == 1
        assert svc.get_summary(b).position_count == 0


class TestCategoricalFlow:
    def test_stake_settle(self) -> None:
        svc, pool_id = _service_with_pool(PoolKind.CATEGORICAL)
        _stake(svc, pool_id, 500, category="default")
        _stake(svc, pool_id, 2500, category="default")
        _stake(svc, pool_id, 10000, category="no_default")
        _stake(svc, pool_id, 5000, category="no_default")

        summary = svc.get_summary(pool_id)
        assert summary.total_pool == pytest.approx(18000)
        assert summary.category_breakdown == {"default": 3000, "no_default": 15000}

        out = svc.settle(pool_id, SettleRequest(outcome="default"))
        assert [r.position.id for r in out.records] == [0, 1]
        assert out.records[0].position.payout == pytest.approx(2910)
        assert out.payoff_multiple == pytest.approx(5.82)

    def test_degenerate_settlement_has_null_multiple(self) -> None:
        svc, pool_id = _service_with_pool(PoolKind.CATEGORICAL)
        _stake(svc, pool_id, 500, category="default")
        out = svc.settle(pool_id, SettleRequest(outcome="other"))
        assert out.records == []
        assert out.payoff_multiple is None


class TestThresholdFlow:
    def test_pro_forma_and_curve(self) -> None:
        svc, pool_id = _service_with_pool(PoolKind.THRESHOLD)
        _stake(svc, pool_id, 500, side=Side.LONG, level=50)
        _stake(svc, pool_id, 700, side=Side.SHORT, level=60)

        rec = svc.pro_forma(
            pool_id,
            ProFormaRequest(event=EventIn(side=Side.LONG, level=50), amount=1000, outcome=55),
        )
        assert rec.position.owner_account == "Hypothetical"
        assert rec.payoff_multiple > 0

        curve = svc.payoff_curve(
            pool_id, PayoffCurveRequest(event=EventIn(side=Side.LONG, level=50), amount=500)
        )
        assert [p.level for p in curve.points] == [49, 50, 60, 61]
        assert curve.points[0].payoff_multiple == 0.0
        assert svc.get_summary(pool_id).next_id == 2

    def test_list_positions(self) -> None:
        svc, pool_id = _service_with_pool(PoolKind.THRESHOLD)
        _stake(svc, pool_id, 500, side=Side.LONG, level=50)
        positions = svc.list_positions(pool_id)
        assert positions[0].category == "Long"
        assert positions[0].level == 50
        assert positions[0].fee_account == "P"
