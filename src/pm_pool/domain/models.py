"""Domain models for pm_pool: immutable dataclasses, no I/O.

An event describes what a stake is betting on. Once staked, the engine
attaches the Position that funds it, so every ledger entry is one event
owning exactly one position.
"""

import math
from dataclasses import dataclass, field, replace

from src.pm_common.amounts import safe_ratio
from src.pm_common.enums import PoolKind, Side
from src.pm_common.errors import ZeroDistanceWinnerError


@dataclass(frozen=True)
class Position:
    id: int
    amount: float
    owner_account: str
    fee_account: str    # pool's own account, receives the fee
    payout: float = 0.0  # only ever set on settled copies

    def with_payout(self, payout: float) -> "Position":
        return replace(self, payout=payout)


def _staked_amount(position: Position | None) -> float:
    if position is None:
        raise ValueError("event has no position attached")
    return position.amount


@dataclass(frozen=True)
class CategoricalEvent:
    """Bet on one of an open set of named categories."""

    category: str
    position: Position | None = None

    @property
    def kind(self) -> PoolKind:
        return PoolKind.CATEGORICAL

    @property
    def level(self) -> str:
        return self.category

    def attach(self, position: Position) -> "CategoricalEvent":
        return replace(self, position=position)

    def is_winner(self, outcome: str) -> bool:
        return self.category == outcome

    def winning_amount(self, outcome: str) -> float:
        if self.is_winner(outcome):
            return _staked_amount(self.position)
        return 0.0

    def category_key(self) -> str:
        return self.category

    def inverse_distance_weight(self, outcome: str) -> float:
        # Categorical redistribution is pure pro-rata
        return 1.0


@dataclass(frozen=True)
class ThresholdEvent:
    """Bet on the outcome level closing above (LONG) or below (SHORT) a level."""

    side: Side = Side.NEITHER
    level: int = 0
    position: Position | None = None

    @property
    def kind(self) -> PoolKind:
        return PoolKind.THRESHOLD

    def attach(self, position: Position) -> "ThresholdEvent":
        return replace(self, position=position)

    def is_winner(self, outcome: int) -> bool:
        # Equality loses on both sides, there is no push
        if self.side == Side.LONG:
            return outcome > self.level
        if self.side == Side.SHORT:
            return outcome < self.level
        return False

    def winning_amount(self, outcome: int) -> float:
        if self.is_winner(outcome):
            return _staked_amount(self.position)
        return 0.0

    def category_key(self) -> str:
        if self.side == Side.LONG:
            return "Long"
        if self.side == Side.SHORT:
            return "Short"
        return "Error"

    def inverse_distance_weight(self, outcome: int) -> float:
        """1 / |outcome - level| for a winner, 1.0 for anything else."""
        if not self.is_winner(outcome):
            return 1.0
        distance = abs(outcome - self.level)
        if distance == 0:
            position_id = self.position.id if self.position is not None else None
            raise ZeroDistanceWinnerError(position_id, self.level)
        return 1.0 / distance


Event = CategoricalEvent | ThresholdEvent
Level = str | int


@dataclass(frozen=True)
class SettlementRecord:
    """Result attached to one winning position.

    `event.position.payout` carries the payout; the stored ledger entry is
    never touched. Threshold-only fields stay None for categorical pools.
    """

    event: Event
    pool_share: float
    winnings_share: float
    payoff_multiple: float
    prima_facie_payoff: float | None = None
    prima_facie_payout: float | None = None
    raw_inverse_distance: float | None = None
    normalized_inverse_distance: float | None = None
    redistributed_amount: float | None = None

    @classmethod
    def zero(cls, event: Event) -> "SettlementRecord":
        """Record for a position that did not win."""
        position = event.position
        if position is not None:
            event = event.attach(position.with_payout(0.0))
        return cls(event=event, pool_share=0.0, winnings_share=0.0, payoff_multiple=0.0)

    @property
    def position(self) -> Position:
        assert self.event.position is not None
        return self.event.position

    @property
    def position_id(self) -> int:
        return self.position.id

    @property
    def amount(self) -> float:
        return self.position.amount

    @property
    def payout(self) -> float:
        return self.position.payout

    @property
    def category(self) -> str:
        return self.event.category_key()


@dataclass(frozen=True)
class Settlement:
    """Outcome of settling a whole pool at one outcome level."""

    kind: PoolKind
    outcome: Level
    total_pool: float
    fees: float
    distributable: float
    winning_stake: float
    records: dict[int, SettlementRecord] = field(default_factory=dict)  # ascending id

    @property
    def is_degenerate(self) -> bool:
        return not self.records

    @property
    def winner_ids(self) -> list[int]:
        return list(self.records)

    @property
    def payoff_multiple(self) -> float:
        """Flat pro-rata multiple, NaN when nobody won."""
        return safe_ratio(self.distributable, self.winning_stake)

    @property
    def total_payout(self) -> float:
        return math.fsum(r.payout for r in self.records.values())

    @property
    def total_prima_facie_payout(self) -> float:
        """Pre-redistribution payout; equals total_payout for categorical pools."""
        return math.fsum(
            r.prima_facie_payout if r.prima_facie_payout is not None else r.payout
            for r in self.records.values()
        )

    def get(self, position_id: int) -> SettlementRecord | None:
        return self.records.get(position_id)
