"""Pool application service: registry of independent in-memory pools.

Each pool id maps to its own PoolEngine; no state is shared across pools.
Persistence is a collaborator concern, so the registry lives as long as
the process.
"""

import logging
import uuid

from src.pm_common.errors import PoolNotFoundError
from src.pm_pool.application.schemas import (
    CreatePoolRequest,
    PayoffCurveOut,
    PayoffCurveRequest,
    PayoffPointOut,
    PoolSummaryOut,
    PositionOut,
    ProFormaRequest,
    SettlementOut,
    SettlementRecordOut,
    SettleRequest,
    StakeOut,
    StakeRequest,
)
from src.pm_pool.domain.accounts import PoolAccountProvider
from src.pm_pool.engine.engine import PoolEngine

logger = logging.getLogger(__name__)


class PoolApplicationService:
    def __init__(self, accounts: PoolAccountProvider | None = None) -> None:
        self._accounts = accounts
        self._pools: dict[str, PoolEngine] = {}

    def _get_engine(self, pool_id: str) -> PoolEngine:
        engine = self._pools.get(pool_id)
        if engine is None:
            raise PoolNotFoundError(pool_id)
        return engine

    def create_pool(self, req: CreatePoolRequest) -> PoolSummaryOut:
        pool_id = f"pool_{uuid.uuid4().hex[:12]}"
        self._pools[pool_id] = PoolEngine(
            req.kind,
            self._accounts,
            fee_rate=req.fee_rate,
            tick_size=req.tick_size,
            pro_forma_apply_fees=req.pro_forma_apply_fees,
        )
        logger.info("Pool created: id=%s, kind=%s", pool_id, req.kind.value)
        return self.get_summary(pool_id)

    def get_summary(self, pool_id: str) -> PoolSummaryOut:
        engine = self._get_engine(pool_id)
        return PoolSummaryOut(
            pool_id=pool_id,
            kind=engine.kind,
            fee_rate=engine.fee_rate,
            pool_account=engine.pool_account,
            pool_manager_account=engine.pool_manager_account,
            position_count=len(engine),
            next_id=engine.next_id,
            total_pool=engine.total_pool(),
            fees=engine.fees(),
            distributable=engine.distributable(),
            category_breakdown=engine.category_breakdown(),
            outcome_levels=engine.enumerate_outcome_levels(),
        )

    def list_positions(self, pool_id: str) -> list[PositionOut]:
        engine = self._get_engine(pool_id)
        return [PositionOut.from_event(event) for event in engine.ledger()]

    def stake(self, pool_id: str, req: StakeRequest) -> StakeOut:
        engine = self._get_engine(pool_id)
        position_id = engine.stake(req.event.to_domain(engine.kind), req.amount, req.owner)
        return StakeOut(pool_id=pool_id, position_id=position_id)

    def settle(self, pool_id: str, req: SettleRequest) -> SettlementOut:
        engine = self._get_engine(pool_id)
        return SettlementOut.from_domain(engine.settle(req.outcome))

    def pro_forma(self, pool_id: str, req: ProFormaRequest) -> SettlementRecordOut:
        engine = self._get_engine(pool_id)
        record = engine.pro_forma_return(
            req.event.to_domain(engine.kind), req.amount, req.outcome
        )
        return SettlementRecordOut.from_domain(record)

    def payoff_curve(self, pool_id: str, req: PayoffCurveRequest) -> PayoffCurveOut:
        engine = self._get_engine(pool_id)
        curve = engine.payoff_curve(req.event.to_domain(engine.kind), req.amount)
        return PayoffCurveOut(
            pool_id=pool_id,
            amount=req.amount,
            points=[PayoffPointOut(level=lv, payoff_multiple=m) for lv, m in curve.items()],
        )
