"""Guard functions for the vesting core.

One function per transition. Each raises the typed error for the first rule
the PRE-state violates and returns ``None`` when the transition is allowed.
The check order is part of the contract: callers observe the first failure.
"""

from __future__ import annotations

from ..errors import (
    AlreadyClaimed,
    InvalidTimelock,
    NotEnoughTimeForRevoke,
    NotVested,
    Revoked,
    Unauthorized,
)
from ..fixed_point import U64_MAX
from .schedule import vested_amount
from .types import Grant

MIN_REVOKE_TIMELOCK: int = 3600


def require_terminal_free(grant: Grant) -> None:
    if grant.claimed:
        raise AlreadyClaimed(f"grant {grant.grant_id} already claimed")
    if grant.revoked:
        raise Revoked(f"grant {grant.grant_id} revoked")


def guard_claim(grant: Grant, caller: str, now: int) -> int:
    """Check a claim and return the amount it would pay."""
    if caller != grant.beneficiary:
        raise Unauthorized(f"{caller} is not the beneficiary of grant {grant.grant_id}")
    require_terminal_free(grant)
    amount = vested_amount(grant, now)
    if amount == 0:
        raise NotVested(f"grant {grant.grant_id} has nothing vested at {now}")
    return amount


def guard_revoke(
    grant: Grant,
    now: int,
    timelock: int,
    *,
    min_timelock: int = MIN_REVOKE_TIMELOCK,
) -> None:
    require_terminal_free(grant)
    floor = max(min_timelock, MIN_REVOKE_TIMELOCK)
    if timelock < floor:
        raise InvalidTimelock(f"timelock {timelock} below minimum {floor}")
    if timelock > U64_MAX:
        raise InvalidTimelock("timelock must fit in u64")
    # start_time + timelock may exceed u64; Python compares exactly and such a
    # revoke is simply never due.
    if now < grant.start_time + timelock:
        raise NotEnoughTimeForRevoke(
            f"revoke allowed from {grant.start_time + timelock}, now {now}"
        )
