"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Stake
  2xxx: Outcome
  3xxx: Pool
  9xxx: System / invariant defects
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Stake ---

class InvalidStakeError(AppError):
    def __init__(self, amount: object) -> None:
        super().__init__(1001, f"Stake amount must be a positive number, got {amount!r}", 422)


class InvalidSideError(AppError):
    def __init__(self, side: object) -> None:
        super().__init__(1002, f"Threshold stake must be LONG or SHORT, got {side!r}", 422)


class PoolKindMismatchError(AppError):
    def __init__(self, pool_kind: str, event_kind: str) -> None:
        super().__init__(
            1003,
            f"Cannot stake a {event_kind} event in a {pool_kind} pool",
            422,
        )


# --- 2xxx: Outcome ---

class InvalidOutcomeError(AppError):
    def __init__(self, pool_kind: str, outcome: object) -> None:
        super().__init__(2001, f"Invalid outcome for {pool_kind} pool: {outcome!r}", 422)


# --- 3xxx: Pool ---

class PoolNotFoundError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(3001, f"Pool not found: {pool_id}", 404)


class InvalidPoolConfigError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"Invalid pool configuration: {detail}", 422)


# --- 9xxx: System ---

class ZeroDistanceWinnerError(AppError, AssertionError):
    """A threshold winner sits exactly on the outcome level.

    Equality is a loss on both sides, so reaching this means the winner
    predicate is broken.
    """

    def __init__(self, position_id: int | None, level: int) -> None:
        super().__init__(
            9101,
            f"Winner at zero distance from outcome: position={position_id}, level={level}",
            500,
        )


class ConservationViolationError(AppError, AssertionError):
    def __init__(self, detail: str) -> None:
        super().__init__(9102, detail, 500)
