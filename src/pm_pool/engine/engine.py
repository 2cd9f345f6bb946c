"""PoolEngine: in-memory ledger and settlement for a single pool."""
import logging
import math
from collections import defaultdict
from collections.abc import Callable
from typing import TypeVar

from config.settings import settings
from src.pm_common.amounts import validate_amount
from src.pm_common.enums import PoolKind, Side
from src.pm_common.errors import (
    InvalidOutcomeError,
    InvalidPoolConfigError,
    InvalidSideError,
    PoolKindMismatchError,
)
from src.pm_pool.domain.accounts import PoolAccountProvider, StaticPoolAccountProvider
from src.pm_pool.domain.invariants import verify_settlement
from src.pm_pool.domain.models import (
    Event,
    Level,
    Position,
    Settlement,
    SettlementRecord,
    ThresholdEvent,
)
from src.pm_pool.domain.settlement import SETTLEMENT_ALGORITHMS

logger = logging.getLogger(__name__)

T = TypeVar("T")

HYPOTHETICAL_OWNER = "Hypothetical"


class PoolEngine:
    """Ledger of staked positions for one pool kind.

    Positions get monotonically increasing ids starting at 0. The ledger is
    only mutated by `stake`; settlement and pro-forma simulation read it and
    return new records.
    """

    def __init__(
        self,
        kind: PoolKind,
        accounts: PoolAccountProvider | None = None,
        *,
        fee_rate: float | None = None,
        tolerance: float | None = None,
        tick_size: int | None = None,
        strict_invariants: bool | None = None,
        check_conservation: bool | None = None,
        pro_forma_apply_fees: bool | None = None,
    ) -> None:
        self._kind = PoolKind(kind)
        self._accounts = accounts if accounts is not None else StaticPoolAccountProvider()
        self._fee_rate = settings.POOL_FEE_RATE if fee_rate is None else fee_rate
        self._tolerance = settings.CONSERVATION_TOLERANCE if tolerance is None else tolerance
        self._tick_size = settings.LEVEL_TICK_SIZE if tick_size is None else tick_size
        self._strict = settings.STRICT_INVARIANTS if strict_invariants is None else strict_invariants
        self._check_conservation = (
            settings.CHECK_CONSERVATION if check_conservation is None else check_conservation
        )
        self._pro_forma_apply_fees = (
            settings.PRO_FORMA_APPLY_FEES if pro_forma_apply_fees is None else pro_forma_apply_fees
        )
        self._validate_config()

        self._next_id = 0
        self._ledger: dict[int, Event] = {}

    def _validate_config(self) -> None:
        if not (0.0 <= self._fee_rate < 1.0):
            raise InvalidPoolConfigError(f"fee_rate must be in [0, 1), got {self._fee_rate}")
        if not self._tolerance > 0:
            raise InvalidPoolConfigError(f"tolerance must be > 0, got {self._tolerance}")
        if not self._tick_size > 0:
            raise InvalidPoolConfigError(f"tick_size must be > 0, got {self._tick_size}")

    # --- configuration ---

    @property
    def kind(self) -> PoolKind:
        return self._kind

    @property
    def fee_rate(self) -> float:
        return self._fee_rate

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @property
    def tick_size(self) -> int:
        return self._tick_size

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def pool_account(self) -> str:
        return self._accounts.pool_account()

    @property
    def pool_manager_account(self) -> str:
        return self._accounts.pool_manager_account()

    # --- ledger ---

    def stake(self, event: Event, amount: float, owner: str) -> int:
        """Record a stake and return its position id. Rejects before mutating."""
        validate_amount(amount)
        self._check_event(event)

        position_id = self._next_id
        position = Position(
            id=position_id,
            amount=float(amount),
            owner_account=owner,
            fee_account=self.pool_account,
        )
        self._ledger[position_id] = event.attach(position)
        self._next_id += 1
        logger.info(
            "Stake accepted: pool=%s, id=%d, %s @ %s, amount=%.2f, owner=%s",
            self._kind.value, position_id, event.category_key(), event.level, amount, owner,
        )
        return position_id

    def _check_event(self, event: Event) -> None:
        if event.kind != self._kind:
            raise PoolKindMismatchError(self._kind.value, event.kind.value)
        if isinstance(event, ThresholdEvent):
            if event.side not in (Side.LONG, Side.SHORT):
                raise InvalidSideError(event.side)
            if isinstance(event.level, bool) or not isinstance(event.level, int):
                raise InvalidOutcomeError(self._kind.value, event.level)

    def _check_outcome(self, outcome: Level) -> None:
        if self._kind == PoolKind.THRESHOLD:
            valid = isinstance(outcome, int) and not isinstance(outcome, bool)
        else:
            valid = isinstance(outcome, str)
        if not valid:
            raise InvalidOutcomeError(self._kind.value, outcome)

    def ledger(self) -> list[Event]:
        """Snapshot of every staked event, ascending position id."""
        return [self._ledger[i] for i in sorted(self._ledger)]

    def positions(self) -> list[Position]:
        return [event.position for event in self.ledger()]

    def get(self, position_id: int) -> Event | None:
        return self._ledger.get(position_id)

    def __len__(self) -> int:
        return len(self._ledger)

    # --- aggregates ---

    def total_pool(self) -> float:
        return math.fsum(event.position.amount for event in self.ledger())

    def total_winning_amount(self, outcome: Level) -> float:
        """Sum of stakes that win at the given outcome."""
        return math.fsum(event.winning_amount(outcome) for event in self.ledger())

    def count_winning_positions(self, outcome: Level) -> int:
        return sum(1 for event in self.ledger() if event.is_winner(outcome))

    def pool_winning_amount(self) -> float:
        """Winning stake summed over every enumerated outcome level."""
        return math.fsum(self.for_each_level(self.total_winning_amount).values())

    def fees(self) -> float:
        return self.total_pool() * self._fee_rate

    def distributable(self) -> float:
        return self.total_pool() * (1.0 - self._fee_rate)

    def category_breakdown(self) -> dict[str, float]:
        totals: dict[str, float] = defaultdict(float)
        for event in self.ledger():
            totals[event.category_key()] += event.position.amount
        return dict(sorted(totals.items()))

    def enumerate_outcome_levels(self) -> list[Level]:
        """Distinct staked levels, ascending.

        Numeric pools also get one tick under the lowest and one tick over
        the highest level so a payoff sweep crosses every regime change.
        """
        levels = {event.level for event in self._ledger.values()}
        if not levels:
            return []
        if self._kind == PoolKind.THRESHOLD:
            levels.add(min(levels) - self._tick_size)
            levels.add(max(levels) + self._tick_size)
        return sorted(levels)

    def for_each_level(self, fn: Callable[[Level], T]) -> dict[Level, T]:
        return {level: fn(level) for level in self.enumerate_outcome_levels()}

    # --- settlement ---

    def settle(self, outcome: Level) -> Settlement:
        """Compute every winner's payout at `outcome`. The ledger is unchanged."""
        self._check_outcome(outcome)
        algorithm = SETTLEMENT_ALGORITHMS[self._kind]
        settlement = algorithm(self.ledger(), outcome, self._fee_rate, self._strict)
        if self._check_conservation:
            verify_settlement(settlement, self._tolerance)
        return settlement

    # --- pro-forma ---

    def _scratch_copy(self) -> "PoolEngine":
        fee_rate = self._fee_rate if self._pro_forma_apply_fees else 0.0
        scratch = PoolEngine(
            self._kind,
            self._accounts,
            fee_rate=fee_rate,
            tolerance=self._tolerance,
            tick_size=self._tick_size,
            strict_invariants=self._strict,
            check_conservation=self._check_conservation,
            pro_forma_apply_fees=self._pro_forma_apply_fees,
        )
        # Events are immutable, a shallow copy of the mapping isolates the ledger
        scratch._ledger = dict(self._ledger)
        scratch._next_id = self._next_id
        return scratch

    def pro_forma_return(self, event: Event, amount: float, outcome: Level) -> SettlementRecord:
        """What `amount` staked on `event` now would return at `outcome`.

        Runs on a private copy; the live ledger and id counter are untouched.
        A losing stake yields a zero-valued record.
        """
        scratch = self._scratch_copy()
        position_id = scratch.stake(event, amount, HYPOTHETICAL_OWNER)
        settlement = scratch.settle(outcome)
        record = settlement.get(position_id)
        if record is None:
            record = SettlementRecord.zero(scratch._ledger[position_id])
        logger.debug(
            "Pro-forma: %s @ %s amount=%.2f outcome=%s -> payoff=%.4f",
            event.category_key(), event.level, amount, outcome, record.payoff_multiple,
        )
        return record

    def payoff_curve(self, event: Event, amount: float) -> dict[Level, float]:
        """Pro-forma payoff multiple at every enumerated level of the live ledger."""
        return self.for_each_level(
            lambda level: self.pro_forma_return(event, amount, level).payoff_multiple
        )
