"""State transition functions for the vesting core.

Each function evaluates its guard against the PRE-state and returns a new
``Grant`` via ``dataclasses.replace()``; the input is never modified.
"""

from __future__ import annotations

from dataclasses import replace

from .guards import MIN_REVOKE_TIMELOCK, guard_claim, guard_revoke
from .schedule import validate_schedule
from .types import ClaimOutcome, Grant


def create_grant(
    grant_id: int,
    beneficiary: str,
    amount: int,
    start_time: int,
    cliff: int,
    duration: int,
) -> Grant:
    validate_schedule(amount, start_time, cliff, duration)
    return Grant(
        grant_id=grant_id,
        beneficiary=beneficiary,
        amount=amount,
        start_time=start_time,
        cliff=cliff,
        duration=duration,
    )


def apply_claim(grant: Grant, caller: str, now: int) -> ClaimOutcome:
    amount = guard_claim(grant, caller, now)
    return ClaimOutcome(grant=replace(grant, claimed=True), amount=amount)


def apply_revoke(
    grant: Grant,
    now: int,
    timelock: int,
    *,
    min_timelock: int = MIN_REVOKE_TIMELOCK,
) -> Grant:
    guard_revoke(grant, now, timelock, min_timelock=min_timelock)
    return replace(grant, revoked=True, revoke_time=now)
