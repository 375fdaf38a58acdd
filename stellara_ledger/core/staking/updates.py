"""State transition functions for the staking core.

Semantics shared by every transition:
- accrue the pool to ``now`` first,
- compute the position's pending reward under its OLD stake weight,
- only then change ``position.amount`` / ``pool.total_staked`` and re-snapshot
  ``reward_debt`` against the accrued accumulator.

The caller owns the value transfers: it must pay ``reward_paid`` and move the
stake tokens inside the same transaction that persists the returned records.
"""

from __future__ import annotations

from dataclasses import replace

from ..errors import InsufficientStake, InvalidAmount
from ..fixed_point import PRECISION, checked_add, checked_sub
from .accrual import accrue, pending_reward, reward_debt_for
from .types import PoolState, Position, StakeOutcome


def _rebalance(
    pool: PoolState,
    position: Position,
    new_amount: int,
    new_total: int,
    *,
    precision: int,
) -> StakeOutcome:
    reward = pending_reward(position, pool.acc_reward_per_share, precision=precision)
    new_position = Position(
        amount=new_amount,
        reward_debt=reward_debt_for(new_amount, pool.acc_reward_per_share, precision=precision),
    )
    return StakeOutcome(
        pool=replace(pool, total_staked=new_total),
        position=new_position,
        reward_paid=reward,
    )


def apply_deposit(
    pool: PoolState,
    position: Position,
    amount: int,
    now: int,
    *,
    precision: int = PRECISION,
) -> StakeOutcome:
    if amount <= 0:
        raise InvalidAmount(f"deposit amount must be positive, got {amount}")
    accrued = accrue(pool, now, precision=precision)
    return _rebalance(
        accrued,
        position,
        checked_add(position.amount, amount, lo=0),
        checked_add(accrued.total_staked, amount, lo=0),
        precision=precision,
    )


def apply_withdraw(
    pool: PoolState,
    position: Position,
    amount: int,
    now: int,
    *,
    precision: int = PRECISION,
) -> StakeOutcome:
    if amount <= 0:
        raise InvalidAmount(f"withdraw amount must be positive, got {amount}")
    accrued = accrue(pool, now, precision=precision)
    if position.amount < amount:
        raise InsufficientStake(f"staked {position.amount}, requested {amount}")
    return _rebalance(
        accrued,
        position,
        checked_sub(position.amount, amount, lo=0),
        checked_sub(accrued.total_staked, amount, lo=0),
        precision=precision,
    )


def apply_harvest(
    pool: PoolState,
    position: Position,
    now: int,
    *,
    precision: int = PRECISION,
) -> StakeOutcome:
    accrued = accrue(pool, now, precision=precision)
    return _rebalance(accrued, position, position.amount, accrued.total_staked, precision=precision)
