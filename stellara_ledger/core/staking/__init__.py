"""`staking`: accumulator-based pro-rata reward distribution.

Public API:
- `accrue(pool, now) -> PoolState`
- `apply_deposit / apply_withdraw / apply_harvest -> StakeOutcome`
- `pending_reward(position, acc) -> int`
"""

from .accrual import accrue, pending_reward, reward_debt_for
from .invariants import check_pool_transition, check_position_settled, require_valid_touch
from .state import pool_from_dict, pool_to_dict, position_from_dict, position_to_dict
from .types import Event, PoolState, Position, StakeOutcome
from .updates import apply_deposit, apply_harvest, apply_withdraw

__all__ = [
    "accrue",
    "pending_reward",
    "reward_debt_for",
    "check_pool_transition",
    "check_position_settled",
    "require_valid_touch",
    "pool_from_dict",
    "pool_to_dict",
    "position_from_dict",
    "position_to_dict",
    "Event",
    "PoolState",
    "Position",
    "StakeOutcome",
    "apply_deposit",
    "apply_harvest",
    "apply_withdraw",
]
