"""Pydantic schemas for pm_pool API requests and responses.

Event descriptors arrive as a flat object and are turned into the domain
variant for the pool kind:
  CATEGORICAL: {"category": "default"}
  THRESHOLD:   {"side": "LONG", "level": 50}

Float fields are NaN-free on output: an undefined winnings share is
rendered as null.
"""

import math

from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr

from src.pm_common.enums import PoolKind, Side
from src.pm_common.errors import InvalidSideError, PoolKindMismatchError
from src.pm_pool.domain.models import (
    CategoricalEvent,
    Event,
    Position,
    Settlement,
    SettlementRecord,
    ThresholdEvent,
)

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

# JSON booleans pass through unconverted so the engine rejects them as levels
LevelIn = StrictStr | StrictInt | StrictBool


class EventIn(BaseModel):
    category: str | None = None
    side: Side | None = None
    level: StrictInt | StrictBool | None = None

    def to_domain(self, kind: PoolKind) -> Event:
        if kind == PoolKind.CATEGORICAL:
            if self.category is None:
                raise PoolKindMismatchError(kind.value, PoolKind.THRESHOLD.value)
            return CategoricalEvent(category=self.category)
        if self.side is None or self.level is None:
            if self.category is not None:
                raise PoolKindMismatchError(kind.value, PoolKind.CATEGORICAL.value)
            raise InvalidSideError(self.side)
        return ThresholdEvent(side=self.side, level=self.level)


class CreatePoolRequest(BaseModel):
    kind: PoolKind
    fee_rate: float | None = Field(default=None, ge=0.0, lt=1.0)
    tick_size: int | None = Field(default=None, gt=0)
    pro_forma_apply_fees: bool | None = None


class StakeRequest(BaseModel):
    event: EventIn
    amount: float = Field(gt=0)
    owner: str = Field(min_length=1)


class SettleRequest(BaseModel):
    outcome: LevelIn


class ProFormaRequest(BaseModel):
    event: EventIn
    amount: float = Field(gt=0)
    outcome: LevelIn


class PayoffCurveRequest(BaseModel):
    event: EventIn
    amount: float = Field(gt=0)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _finite(value: float | None) -> float | None:
    if value is None or math.isnan(value):
        return None
    return value


class PositionOut(BaseModel):
    id: int
    amount: float
    owner_account: str
    fee_account: str
    payout: float
    category: str
    level: str | int

    @classmethod
    def from_event(cls, event: Event) -> "PositionOut":
        position: Position = event.position  # type: ignore[assignment]
        return cls(
            id=position.id,
            amount=position.amount,
            owner_account=position.owner_account,
            fee_account=position.fee_account,
            payout=position.payout,
            category=event.category_key(),
            level=event.level,
        )


class SettlementRecordOut(BaseModel):
    position: PositionOut
    pool_share: float
    winnings_share: float | None
    payoff_multiple: float
    prima_facie_payoff: float | None = None
    prima_facie_payout: float | None = None
    raw_inverse_distance: float | None = None
    normalized_inverse_distance: float | None = None
    redistributed_amount: float | None = None

    @classmethod
    def from_domain(cls, record: SettlementRecord) -> "SettlementRecordOut":
        return cls(
            position=PositionOut.from_event(record.event),
            pool_share=record.pool_share,
            winnings_share=_finite(record.winnings_share),
            payoff_multiple=record.payoff_multiple,
            prima_facie_payoff=record.prima_facie_payoff,
            prima_facie_payout=record.prima_facie_payout,
            raw_inverse_distance=record.raw_inverse_distance,
            normalized_inverse_distance=record.normalized_inverse_distance,
            redistributed_amount=record.redistributed_amount,
        )


class SettlementOut(BaseModel):
    kind: PoolKind
    outcome: str | int
    total_pool: float
    fees: float
    distributable: float
    winning_stake: float
    total_payout: float
    total_prima_facie_payout: float
    payoff_multiple: float | None
    records: list[SettlementRecordOut]

    @classmethod
    def from_domain(cls, settlement: Settlement) -> "SettlementOut":
        return cls(
            kind=settlement.kind,
            outcome=settlement.outcome,
            total_pool=settlement.total_pool,
            fees=settlement.fees,
            distributable=settlement.distributable,
            winning_stake=settlement.winning_stake,
            total_payout=settlement.total_payout,
            total_prima_facie_payout=settlement.total_prima_facie_payout,
            payoff_multiple=_finite(settlement.payoff_multiple),
            records=[SettlementRecordOut.from_domain(r) for r in settlement.records.values()],
        )


class PoolSummaryOut(BaseModel):
    pool_id: str
    kind: PoolKind
    fee_rate: float
    pool_account: str
    pool_manager_account: str
    position_count: int
    next_id: int
    total_pool: float
    fees: float
    distributable: float
    category_breakdown: dict[str, float]
    outcome_levels: list[str | int]


class StakeOut(BaseModel):
    pool_id: str
    position_id: int


class PayoffPointOut(BaseModel):
    level: str | int
    payoff_multiple: float


class PayoffCurveOut(BaseModel):
    pool_id: str
    amount: float
    points: list[PayoffPointOut]
