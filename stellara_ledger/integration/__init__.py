"""
Imperative shell: host, collaborators and the two ledger engines
"""

from .collaborators import (
    AllowAll,
    Authorizer,
    EventLog,
    EventSink,
    HookPolicy,
    SignerSet,
    StoreToken,
    TokenLedger,
    TransferHook,
)
from .host import Clock, Host, ManualClock
from .staking_pool import PoolConfig, StakeReceipt, StakingPool
from .vesting_ledger import VestingInfo, VestingLedger

__all__ = [
    "AllowAll",
    "Authorizer",
    "EventLog",
    "EventSink",
    "HookPolicy",
    "SignerSet",
    "StoreToken",
    "TokenLedger",
    "TransferHook",
    "Clock",
    "Host",
    "ManualClock",
    "PoolConfig",
    "StakeReceipt",
    "StakingPool",
    "VestingInfo",
    "VestingLedger",
]
