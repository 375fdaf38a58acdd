"""Cliff-and-linear vesting math.

``vested_amount`` is a pure function of the stored schedule and a timestamp.
The linear ramp covers the post-cliff window only: nothing unlocks before
``start + cliff`` and the ramp begins strictly after that boundary, so the
value at ``start + cliff`` itself is 0 unless the ramp has zero length.
"""

from __future__ import annotations

from ..errors import InvalidSchedule
from ..fixed_point import I128_MAX, U64_MAX, mul_div
from .types import Grant


def validate_schedule(amount: int, start_time: int, cliff: int, duration: int) -> None:
    """Raise ``InvalidSchedule`` unless the parameters describe a valid grant."""
    if amount <= 0:
        raise InvalidSchedule("amount must be positive")
    if amount > I128_MAX:
        raise InvalidSchedule("amount exceeds i128")
    if cliff > duration:
        raise InvalidSchedule("cliff exceeds duration")
    for name, val in (("start_time", start_time), ("cliff", cliff), ("duration", duration)):
        if not 0 <= val <= U64_MAX:
            raise InvalidSchedule(f"{name} must fit in u64")
    if start_time + duration > U64_MAX:
        raise InvalidSchedule("start_time + duration overflows u64")


def vested_amount(grant: Grant, now: int) -> int:
    """Amount unlocked by ``now``; always within ``[0, grant.amount]``."""
    if now < grant.start_time:
        return 0
    if now < grant.cliff_end:
        return 0
    if now >= grant.end_time:
        return grant.amount

    ramp = grant.duration - grant.cliff
    if ramp == 0:
        return grant.amount

    elapsed = now - grant.cliff_end
    return mul_div(grant.amount, elapsed, ramp, hi=grant.amount)
