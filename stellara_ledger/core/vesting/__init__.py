"""`vesting`: pure cliff-and-linear vesting transitions.

- deterministic, integer-only math,
- immutable records (frozen dataclasses),
- typed guard failures in a fixed check order.

Public API:
- `create_grant(...) -> Grant`
- `vested_amount(grant, now) -> int`
- `apply_claim(grant, caller, now) -> ClaimOutcome`
- `apply_revoke(grant, now, timelock) -> Grant`
"""

from .guards import MIN_REVOKE_TIMELOCK
from .invariants import check_all, check_transition
from .schedule import validate_schedule, vested_amount
from .state import grant_from_dict, grant_to_dict
from .types import ClaimOutcome, Event, Grant, GrantStatus
from .updates import apply_claim, apply_revoke, create_grant

__all__ = [
    "MIN_REVOKE_TIMELOCK",
    "check_all",
    "check_transition",
    "validate_schedule",
    "vested_amount",
    "grant_from_dict",
    "grant_to_dict",
    "ClaimOutcome",
    "Event",
    "Grant",
    "GrantStatus",
    "apply_claim",
    "apply_revoke",
    "create_grant",
]
