"""Tests for stellara_ledger/core/vesting/schedule.py: cliff + linear unlock."""

from __future__ import annotations

import pytest

from stellara_ledger.core.errors import InvalidSchedule
from stellara_ledger.core.fixed_point import I128_MAX, U64_MAX
from stellara_ledger.core.vesting import Grant, create_grant, validate_schedule, vested_amount


def _grant(amount=1000, start_time=0, cliff=100, duration=1000, **kwargs) -> Grant:
    return Grant(
        grant_id=1,
        beneficiary="alice",
        amount=amount,
        start_time=start_time,
        cliff=cliff,
        duration=duration,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# vested_amount
# ---------------------------------------------------------------------------

class TestVestedAmount:
    @pytest.mark.parametrize(
        "now,expected",
        [(50, 0), (100, 0), (550, 500), (1500, 1000)],
    )
    def test_reference_schedule(self, now, expected):
        assert vested_amount(_grant(), now) == expected

    def test_before_start(self):
        g = _grant(start_time=1000)
        assert vested_amount(g, 999) == 0

    def test_one_after_cliff(self):
        # floor(1000 * 1 / 900)
        assert vested_amount(_grant(), 101) == 1

    def test_exactly_at_end(self):
        assert vested_amount(_grant(), 1000) == 1000

    def test_zero_length_ramp(self):
        g = _grant(cliff=500, duration=500)
        assert vested_amount(g, 499) == 0
        assert vested_amount(g, 500) == 1000

    def test_no_cliff(self):
        g = _grant(cliff=0, duration=10, amount=100)
        assert vested_amount(g, 0) == 0
        assert vested_amount(g, 5) == 50

    def test_large_amount_exact(self):
        g = _grant(amount=I128_MAX, cliff=0, duration=3)
        assert vested_amount(g, 1) == I128_MAX // 3

    def test_offset_start(self):
        g = _grant(start_time=10_000, cliff=100, duration=1000)
        assert vested_amount(g, 10_550) == 500


# ---------------------------------------------------------------------------
# validate_schedule / create_grant
# ---------------------------------------------------------------------------

class TestValidateSchedule:
    def test_valid(self):
        validate_schedule(1, 0, 0, 0)

    @pytest.mark.parametrize("amount", [0, -5, I128_MAX + 1])
    def test_bad_amount(self, amount):
        with pytest.raises(InvalidSchedule):
            validate_schedule(amount, 0, 0, 10)

    def test_cliff_past_duration(self):
        with pytest.raises(InvalidSchedule):
            validate_schedule(10, 0, 11, 10)

    def test_negative_time(self):
        with pytest.raises(InvalidSchedule):
            validate_schedule(10, -1, 0, 10)

    def test_end_overflows_u64(self):
        with pytest.raises(InvalidSchedule):
            validate_schedule(10, U64_MAX, 0, 1)

    def test_create_grant_starts_active(self):
        g = create_grant(7, "bob", 10, 0, 0, 10)
        assert g.grant_id == 7
        assert not g.claimed and not g.revoked
        assert g.revoke_time == 0

