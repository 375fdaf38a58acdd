"""Invariant checkers for the vesting core.

Record invariants take one ``Grant``; transition invariants take the
(pre, post) pair of a single mutation. ``check_all`` / ``check_transition``
return the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import Callable

from .types import Grant, GrantStatus


def inv_amount_positive(g: Grant) -> bool:
    return g.amount > 0


def inv_cliff_within_duration(g: Grant) -> bool:
    return g.cliff <= g.duration


def inv_terminal_exclusive(g: Grant) -> bool:
    return not (g.claimed and g.revoked)


def inv_revoke_time_zeroed(g: Grant) -> bool:
    if g.revoked:
        return True
    return g.revoke_time == 0


def inv_revoke_after_start(g: Grant) -> bool:
    if not g.revoked:
        return True
    return g.revoke_time >= g.start_time


_SCHEDULE_FIELDS = ("grant_id", "beneficiary", "amount", "start_time", "cliff", "duration")


def tinv_schedule_immutable(pre: Grant, post: Grant) -> bool:
    return all(getattr(pre, name) == getattr(post, name) for name in _SCHEDULE_FIELDS)


def tinv_terminal_frozen(pre: Grant, post: Grant) -> bool:
    if pre.status is GrantStatus.ACTIVE:
        return True
    return pre == post


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[Grant], bool]] = {
    "inv_amount_positive": inv_amount_positive,
    "inv_cliff_within_duration": inv_cliff_within_duration,
    "inv_terminal_exclusive": inv_terminal_exclusive,
    "inv_revoke_time_zeroed": inv_revoke_time_zeroed,
    "inv_revoke_after_start": inv_revoke_after_start,
}

TRANSITION_REGISTRY: dict[str, Callable[[Grant, Grant], bool]] = {
    "tinv_schedule_immutable": tinv_schedule_immutable,
    "tinv_terminal_frozen": tinv_terminal_frozen,
}


def check_all(grant: Grant) -> list[str]:
    return [inv_id for inv_id, check_fn in INVARIANT_REGISTRY.items() if not check_fn(grant)]


def check_transition(pre: Grant, post: Grant) -> list[str]:
    return [inv_id for inv_id, check_fn in TRANSITION_REGISTRY.items() if not check_fn(pre, post)]
