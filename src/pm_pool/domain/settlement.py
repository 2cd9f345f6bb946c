"""Pool settlement: compute every winner's payout at a resolved outcome.

Both algorithms are pure: they read the ledger entries and return new
SettlementRecords carrying settled position copies. Nothing is written
back to the ledger.

Categorical (pro-rata):
    distributable = total_pool * (1 - fee_rate)
    payoff_multiple = distributable / winning_stake, same for every winner

Threshold (inverse-distance weighted, two passes):
    pass 1: prima facie payoff as above, raw weight 1 / |outcome - level|
    pass 2: redistribute the winning stake by normalized weight, then
            payout = redistributed_amount * prima_facie_payoff
"""

import logging
import math
from collections.abc import Callable, Iterable

from src.pm_common.amounts import safe_ratio
from src.pm_common.enums import PoolKind
from src.pm_common.errors import ZeroDistanceWinnerError
from src.pm_pool.domain.models import Event, Level, Settlement, SettlementRecord

logger = logging.getLogger(__name__)


def _pool_totals(events: list[Event], fee_rate: float) -> tuple[float, float, float]:
    """Return (total_pool, fees, distributable)."""
    total_pool = math.fsum(e.position.amount for e in events if e.position is not None)
    fees = total_pool * fee_rate
    distributable = total_pool * (1.0 - fee_rate)
    return total_pool, fees, distributable


def settle_categorical(
    events: Iterable[Event],
    outcome: Level,
    fee_rate: float,
    strict: bool = True,
) -> Settlement:
    """Pro-rata settlement. `strict` is accepted for a uniform signature only."""
    events = list(events)
    total_pool, fees, distributable = _pool_totals(events, fee_rate)
    winning_stake = math.fsum(e.winning_amount(outcome) for e in events)

    records: dict[int, SettlementRecord] = {}
    for event in events:
        if not event.is_winner(outcome):
            continue
        position = event.position
        assert position is not None
        payoff = distributable / winning_stake
        records[position.id] = SettlementRecord(
            event=event.attach(position.with_payout(position.amount * payoff)),
            pool_share=position.amount / distributable,
            winnings_share=safe_ratio(position.amount, winning_stake),
            payoff_multiple=payoff,
        )

    logger.info(
        "Categorical settlement: outcome=%s, winners=%d, pool=%.2f, fees=%.2f",
        outcome, len(records), total_pool, fees,
    )
    return Settlement(
        kind=PoolKind.CATEGORICAL,
        outcome=outcome,
        total_pool=total_pool,
        fees=fees,
        distributable=distributable,
        winning_stake=winning_stake,
        records=records,
    )


def settle_threshold(
    events: Iterable[Event],
    outcome: Level,
    fee_rate: float,
    strict: bool = True,
) -> Settlement:
    """Distance-weighted settlement.

    Redistribution only moves value among winners: the redistributed
    amounts sum to the winning stake, so total payout equals the prima
    facie total. A winner at zero distance raises when `strict`, otherwise
    it is logged and left out of the winner set.
    """
    events = list(events)
    total_pool, fees, distributable = _pool_totals(events, fee_rate)

    winners: list[tuple[Event, float]] = []
    for event in events:
        if not event.is_winner(outcome):
            continue
        try:
            weight = event.inverse_distance_weight(outcome)
        except ZeroDistanceWinnerError as exc:
            if strict:
                raise
            logger.error("Skipping winner: %s", exc.message)
            continue
        winners.append((event, weight))

    winning_stake = math.fsum(e.winning_amount(outcome) for e, _ in winners)
    total_inverse_distance = math.fsum(w for _, w in winners)

    # Pass 1: prima facie payoffs, identical to the categorical rule
    first_pass: list[tuple[Event, float, float, float]] = []
    for event, weight in winners:
        amount = event.position.amount
        prima_facie_payoff = distributable / winning_stake
        first_pass.append((event, prima_facie_payoff, amount * prima_facie_payoff, weight))

    # Pass 2: reweight the winnings pool by normalized inverse distance
    records: dict[int, SettlementRecord] = {}
    for event, prima_facie_payoff, prima_facie_payout, weight in first_pass:
        position = event.position
        normalized = weight / total_inverse_distance
        redistributed = normalized * winning_stake
        payout = redistributed * prima_facie_payoff
        records[position.id] = SettlementRecord(
            event=event.attach(position.with_payout(payout)),
            pool_share=position.amount / distributable,
            winnings_share=safe_ratio(position.amount, winning_stake),
            payoff_multiple=payout / position.amount,
            prima_facie_payoff=prima_facie_payoff,
            prima_facie_payout=prima_facie_payout,
            raw_inverse_distance=weight,
            normalized_inverse_distance=normalized,
            redistributed_amount=redistributed,
        )

    logger.info(
        "Threshold settlement: closing level=%s, winners=%d, pool=%.2f, fees=%.2f",
        outcome, len(records), total_pool, fees,
    )
    return Settlement(
        kind=PoolKind.THRESHOLD,
        outcome=outcome,
        total_pool=total_pool,
        fees=fees,
        distributable=distributable,
        winning_stake=winning_stake,
        records=records,
    )


SettlementAlgorithm = Callable[[Iterable[Event], Level, float, bool], Settlement]

SETTLEMENT_ALGORITHMS: dict[PoolKind, SettlementAlgorithm] = {
    PoolKind.CATEGORICAL: settle_categorical,
    PoolKind.THRESHOLD: settle_threshold,
}
