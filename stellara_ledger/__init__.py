"""
Stellara ledger: vesting grants and pro-rata staking rewards over a
transactional key-value store.
"""

from .config import ConfigError, LedgerConfig, config_from_mapping, load_config
from .integration import (
    AllowAll,
    EventLog,
    HookPolicy,
    Host,
    ManualClock,
    SignerSet,
    StakeReceipt,
    StakingPool,
    StoreToken,
    VestingLedger,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "LedgerConfig",
    "config_from_mapping",
    "load_config",
    "AllowAll",
    "EventLog",
    "HookPolicy",
    "Host",
    "ManualClock",
    "SignerSet",
    "StakeReceipt",
    "StakingPool",
    "StoreToken",
    "VestingLedger",
]
