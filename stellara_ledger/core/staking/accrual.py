"""Lazy reward accrual for the staking core.

The pool never accrues in the background. Every call that touches it first
runs ``accrue(pool, now)``, which folds the whole interval since
``last_accrual_time`` into ``acc_reward_per_share`` at once:

    acc += floor((now - last) * reward_rate * P / total_staked)

Both ``acc_reward_per_share`` and ``last_accrual_time`` only ever move up:
``accrue`` returns the pool unchanged when ``now <= last_accrual_time`` and
otherwise adds a non-negative increment and sets ``last`` to a larger ``now``.
A read-only view replaying ``accrue`` on the same stored pool therefore sees
exactly what the next mutating call will pay.
"""

from __future__ import annotations

from dataclasses import replace

from ..fixed_point import I128_MAX, PRECISION, checked_add, checked_mul, mul_div
from .types import PoolState, Position


def accrue(pool: PoolState, now: int, *, precision: int = PRECISION) -> PoolState:
    if now <= pool.last_accrual_time:
        return pool
    if pool.total_staked == 0:
        # Rewards for a zero-stake interval are forgone, not banked.
        return replace(pool, last_accrual_time=now)

    elapsed = now - pool.last_accrual_time
    reward = checked_mul(elapsed, pool.reward_rate, lo=0)
    increment = mul_div(reward, precision, pool.total_staked)
    return replace(
        pool,
        acc_reward_per_share=checked_add(pool.acc_reward_per_share, increment, lo=0),
        last_accrual_time=now,
    )


def reward_debt_for(amount: int, acc_reward_per_share: int, *, precision: int = PRECISION) -> int:
    """Debt snapshot that zeroes a position's pending reward at ``acc``."""
    return mul_div(amount, acc_reward_per_share, precision, hi=I128_MAX)


def pending_reward(position: Position, acc_reward_per_share: int, *, precision: int = PRECISION) -> int:
    return reward_debt_for(position.amount, acc_reward_per_share, precision=precision) - position.reward_debt
