"""Pool conservation invariants, verified after each settlement.

INV-1 (categorical): sum(payout) + fees == total_pool
INV-2 (threshold):   sum(prima_facie_payout) + fees == total_pool
INV-3 (threshold):   sum(payout) == sum(prima_facie_payout)
INV-4 (per record):  payout == amount * payoff_multiple, payoff_multiple >= 0

All comparisons hold within the configured tolerance. A degenerate
settlement (no winners) is skipped: nothing is paid out, so there is no
balance to check.
"""

import logging

from src.pm_common.amounts import is_close
from src.pm_common.enums import PoolKind
from src.pm_common.errors import ConservationViolationError
from src.pm_pool.domain.models import Settlement, SettlementRecord

logger = logging.getLogger(__name__)


def _violation(msg: str) -> ConservationViolationError:
    logger.error(msg)
    return ConservationViolationError(msg)


def verify_record_invariants(record: SettlementRecord, tolerance: float) -> None:
    if record.payoff_multiple < 0:
        raise _violation(
            f"INV-4 violated: position={record.position_id} "
            f"payoff_multiple={record.payoff_multiple} < 0"
        )
    expected = record.amount * record.payoff_multiple
    if not is_close(record.payout, expected, tolerance):
        raise _violation(
            f"INV-4 violated: position={record.position_id} payout={record.payout} "
            f"!= amount * payoff_multiple = {expected}"
        )


def verify_categorical_conservation(settlement: Settlement, tolerance: float) -> None:
    if settlement.is_degenerate:
        logger.debug("No winners at %s, conservation check skipped", settlement.outcome)
        return
    for record in settlement.records.values():
        verify_record_invariants(record, tolerance)

    paid = settlement.total_payout
    if not is_close(paid + settlement.fees, settlement.total_pool, tolerance):
        raise _violation(
            f"INV-1 violated: payout({paid}) + fees({settlement.fees}) = "
            f"{paid + settlement.fees} != total_pool={settlement.total_pool}"
        )
    logger.debug(
        "Invariants OK: outcome=%s, pool=%.2f, payout=%.2f",
        settlement.outcome, settlement.total_pool, paid,
    )


def verify_threshold_conservation(settlement: Settlement, tolerance: float) -> None:
    if settlement.is_degenerate:
        logger.debug("No winners at %s, conservation check skipped", settlement.outcome)
        return
    for record in settlement.records.values():
        verify_record_invariants(record, tolerance)

    prima_facie = settlement.total_prima_facie_payout
    paid = settlement.total_payout
    if not is_close(prima_facie + settlement.fees, settlement.total_pool, tolerance):
        raise _violation(
            f"INV-2 violated: prima_facie_payout({prima_facie}) + fees({settlement.fees}) = "
            f"{prima_facie + settlement.fees} != total_pool={settlement.total_pool}"
        )
    if not is_close(paid, prima_facie, tolerance):
        raise _violation(
            f"INV-3 violated: payout({paid}) != prima_facie_payout({prima_facie})"
        )
    logger.debug(
        "Invariants OK: closing level=%s, pool=%.2f, payout=%.2f",
        settlement.outcome, settlement.total_pool, paid,
    )


def verify_settlement(settlement: Settlement, tolerance: float) -> None:
    """Raise ConservationViolationError if the settlement leaks value."""
    if settlement.kind == PoolKind.THRESHOLD:
        verify_threshold_conservation(settlement, tolerance)
    else:
        verify_categorical_conservation(settlement, tolerance)
