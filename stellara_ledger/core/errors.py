"""Exception taxonomy for the ledger engines.

Every failure an entry point can raise is a ``LedgerError`` subclass with a
stable snake_case ``code``. Categories group the concrete errors by the kind of
rule that was violated; callers may catch either level.

Raising any of these inside ``Host.atomic()`` discards the whole operation.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all ledger failures."""

    code: str = "ledger_error"


# -- Categories ---------------------------------------------------------------

class AuthorizationError(LedgerError):
    """Wrong or missing identity for a gated call."""

    code = "authorization"


class StateError(LedgerError):
    """The record is in a state that does not permit the operation."""

    code = "state"


class ValidationError(LedgerError):
    """An argument is outside its allowed domain."""

    code = "validation"


class TemporalError(LedgerError):
    """The operation is valid but not yet allowed at the current time."""

    code = "temporal"


class ResourceError(LedgerError):
    """Not enough balance, stake or allowance to cover the operation."""

    code = "resource"


class LedgerArithmeticError(LedgerError, ArithmeticError):
    """Checked arithmetic left its integer domain."""

    code = "arithmetic"


# -- Authorization -------------------------------------------------------------

class Unauthorized(AuthorizationError):
    code = "unauthorized"


# -- State ---------------------------------------------------------------------

class AlreadyClaimed(StateError):
    code = "already_claimed"


class Revoked(StateError):
    code = "revoked"


class AlreadyInitialized(StateError):
    code = "already_initialized"


class NotInitialized(StateError):
    code = "not_initialized"


class GrantNotFound(StateError):
    code = "grant_not_found"


class ContractPaused(StateError):
    code = "contract_paused"


class AlreadyConsumed(StateError):
    """An idempotency marker was consumed a second time."""

    code = "already_consumed"


# -- Validation ----------------------------------------------------------------

class InvalidSchedule(ValidationError):
    code = "invalid_schedule"


class InvalidAmount(ValidationError):
    code = "invalid_amount"


class InvalidTimelock(ValidationError):
    code = "invalid_timelock"


class InvalidTokenPair(ValidationError):
    """Staking and reward token are the same asset."""

    code = "invalid_token_pair"


# -- Temporal ------------------------------------------------------------------

class NotVested(TemporalError):
    code = "not_vested"


class NotEnoughTimeForRevoke(TemporalError):
    code = "not_enough_time_for_revoke"


# -- Resource ------------------------------------------------------------------

class InsufficientBalance(ResourceError):
    code = "insufficient_balance"


class InsufficientStake(ResourceError):
    code = "insufficient_stake"


class InsufficientAllowance(ResourceError):
    code = "insufficient_allowance"


# -- Arithmetic ----------------------------------------------------------------

class ArithmeticOverflow(LedgerArithmeticError):
    code = "overflow"


# -- Invariants ----------------------------------------------------------------

class LedgerInvariantError(LedgerError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
