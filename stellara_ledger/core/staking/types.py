"""Data types for the staking core.

Units/conventions:
- `acc_reward_per_share` is scaled by the pool's precision (default 1e12),
- `reward_rate` is reward units per second,
- `reward_debt` is in unscaled reward units (already divided by precision).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique


@unique
class Event(Enum):
    """Topics published by the staking pool."""
    DEPOSITED = "deposit"
    WITHDRAWN = "withdraw"
    HARVESTED = "harvest"
    FUNDED = "fund"
    PAUSED = "pause"


@dataclass(frozen=True)
class PoolState:
    """Pool-wide accumulator state."""

    total_staked: int = 0
    acc_reward_per_share: int = 0
    last_accrual_time: int = 0
    reward_rate: int = 0

    def __post_init__(self) -> None:
        if self.total_staked < 0:
            raise ValueError("total_staked must be non-negative")
        if self.acc_reward_per_share < 0:
            raise ValueError("acc_reward_per_share must be non-negative")
        if self.last_accrual_time < 0:
            raise ValueError("last_accrual_time must be non-negative")
        if self.reward_rate < 0:
            raise ValueError("reward_rate must be non-negative")


@dataclass(frozen=True)
class Position:
    """One depositor's stake."""

    amount: int = 0
    reward_debt: int = 0

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("amount must be non-negative")
        if self.reward_debt < 0:
            raise ValueError("reward_debt must be non-negative")

    @property
    def is_empty(self) -> bool:
        return self.amount == 0 and self.reward_debt == 0


@dataclass(frozen=True)
class StakeOutcome:
    """Post-state of one deposit / withdraw / harvest plus the reward owed."""

    pool: PoolState
    position: Position
    reward_paid: int
