"""Data types for the vesting core.

All types are frozen dataclasses (immutable).

Units/conventions:
- times (`start_time`, `cliff`, `duration`, `revoke_time`) are u64 seconds,
- `amount` is an i128 token amount and strictly positive,
- identities are opaque strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from ..fixed_point import I128_MAX, U64_MAX


@unique
class GrantStatus(Enum):
    ACTIVE = "active"
    CLAIMED = "claimed"
    REVOKED = "revoked"


@unique
class Event(Enum):
    """Topics published by the vesting ledger."""
    GRANTED = "grant"
    CLAIMED = "claim"
    REVOKED = "revoke"


@dataclass(frozen=True)
class Grant:
    """One vesting award."""

    grant_id: int
    beneficiary: str
    amount: int
    start_time: int
    cliff: int
    duration: int
    claimed: bool = False
    revoked: bool = False
    revoke_time: int = 0

    def __post_init__(self) -> None:
        if self.grant_id <= 0:
            raise ValueError("grant_id must be positive")
        if not self.beneficiary:
            raise ValueError("beneficiary must be non-empty")
        if not 0 < self.amount <= I128_MAX:
            raise ValueError("amount must be in (0, I128_MAX]")
        for name in ("start_time", "cliff", "duration", "revoke_time"):
            val = getattr(self, name)
            if not 0 <= val <= U64_MAX:
                raise ValueError(f"{name} must fit in u64")
        if self.cliff > self.duration:
            raise ValueError("cliff must be <= duration")
        if self.claimed and self.revoked:
            raise ValueError("claimed and revoked are mutually exclusive")
        if not self.revoked and self.revoke_time != 0:
            raise ValueError("revoke_time must be 0 unless revoked")

    @property
    def status(self) -> GrantStatus:
        if self.claimed:
            return GrantStatus.CLAIMED
        if self.revoked:
            return GrantStatus.REVOKED
        return GrantStatus.ACTIVE

    @property
    def cliff_end(self) -> int:
        return self.start_time + self.cliff

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration


@dataclass(frozen=True)
class ClaimOutcome:
    """Result of a successful claim transition."""

    grant: Grant
    amount: int
