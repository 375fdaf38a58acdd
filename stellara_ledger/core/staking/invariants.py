"""Invariant checkers for the staking core.

Pool invariants take the (pre, post) pool pair of one mutating call and encode
the monotonicity obligation on the accumulator and the accrual clock. Position
invariants take a freshly touched position and the accumulator it was settled
against.
"""

from __future__ import annotations

from typing import Callable

from ..errors import LedgerInvariantError
from ..fixed_point import PRECISION
from .accrual import pending_reward
from .types import PoolState, Position


def inv_acc_monotone(pre: PoolState, post: PoolState) -> bool:
    return post.acc_reward_per_share >= pre.acc_reward_per_share


def inv_accrual_time_monotone(pre: PoolState, post: PoolState) -> bool:
    return post.last_accrual_time >= pre.last_accrual_time


def inv_reward_rate_fixed(pre: PoolState, post: PoolState) -> bool:
    return post.reward_rate == pre.reward_rate


POOL_REGISTRY: dict[str, Callable[[PoolState, PoolState], bool]] = {
    "inv_acc_monotone": inv_acc_monotone,
    "inv_accrual_time_monotone": inv_accrual_time_monotone,
    "inv_reward_rate_fixed": inv_reward_rate_fixed,
}


def check_pool_transition(pre: PoolState, post: PoolState) -> list[str]:
    return [inv_id for inv_id, check_fn in POOL_REGISTRY.items() if not check_fn(pre, post)]


def check_position_settled(
    position: Position,
    acc_reward_per_share: int,
    *,
    precision: int = PRECISION,
) -> list[str]:
    if pending_reward(position, acc_reward_per_share, precision=precision) != 0:
        return ["inv_position_settled"]
    return []


def require_valid_touch(
    pre: PoolState,
    post: PoolState,
    position: Position,
    *,
    precision: int = PRECISION,
) -> None:
    violations = check_pool_transition(pre, post)
    violations += check_position_settled(position, post.acc_reward_per_share, precision=precision)
    if violations:
        raise LedgerInvariantError(violations)
