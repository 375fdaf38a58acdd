"""
Functional core: checked fixed-point math, vesting and staking transitions
"""

from .errors import (
    AlreadyClaimed,
    AlreadyConsumed,
    AlreadyInitialized,
    ArithmeticOverflow,
    AuthorizationError,
    ContractPaused,
    GrantNotFound,
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientStake,
    InvalidAmount,
    InvalidSchedule,
    InvalidTimelock,
    InvalidTokenPair,
    LedgerArithmeticError,
    LedgerError,
    LedgerInvariantError,
    NotEnoughTimeForRevoke,
    NotInitialized,
    NotVested,
    ResourceError,
    Revoked,
    StateError,
    TemporalError,
    Unauthorized,
    ValidationError,
)
from .fixed_point import PRECISION, mul_div

__all__ = [
    "AlreadyClaimed",
    "AlreadyConsumed",
    "AlreadyInitialized",
    "ArithmeticOverflow",
    "AuthorizationError",
    "ContractPaused",
    "GrantNotFound",
    "InsufficientAllowance",
    "InsufficientBalance",
    "InsufficientStake",
    "InvalidAmount",
    "InvalidSchedule",
    "InvalidTimelock",
    "InvalidTokenPair",
    "LedgerArithmeticError",
    "LedgerError",
    "LedgerInvariantError",
    "NotEnoughTimeForRevoke",
    "NotInitialized",
    "NotVested",
    "ResourceError",
    "Revoked",
    "StateError",
    "TemporalError",
    "Unauthorized",
    "ValidationError",
    "PRECISION",
    "mul_div",
]
