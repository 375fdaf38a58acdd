"""Tests for stellara_ledger/core/staking/updates.py: deposit / withdraw / harvest.

Covers the two-staker reference sequence (rate 100/s):
A deposits 100 at t=0, B deposits 100 at t=10, both observed at t=20.
"""

import pytest

from stellara_ledger.core.errors import InsufficientStake, InvalidAmount
from stellara_ledger.core.fixed_point import PRECISION
from stellara_ledger.core.staking import (
    PoolState,
    Position,
    accrue,
    apply_deposit,
    apply_harvest,
    apply_withdraw,
    pending_reward,
)


def _pool(**kwargs) -> PoolState:
    return PoolState(reward_rate=kwargs.pop("reward_rate", 100), **kwargs)


# ---------------------------------------------------------------------------
# deposit
# ---------------------------------------------------------------------------

class TestDeposit:
    def test_first_deposit(self):
        out = apply_deposit(_pool(), Position(), 100, 0)
        assert out.reward_paid == 0
        assert out.position == Position(amount=100, reward_debt=0)
        assert out.pool.total_staked == 100

    def test_two_staker_sequence(self):
        a = apply_deposit(_pool(), Position(), 100, 0)
        assert pending_reward(a.position, accrue(a.pool, 10).acc_reward_per_share) == 1000

        b = apply_deposit(a.pool, Position(), 100, 10)
        assert b.reward_paid == 0
        assert b.pool.acc_reward_per_share == 10 * PRECISION
        assert b.position.reward_debt == 1000

        acc20 = accrue(b.pool, 20).acc_reward_per_share
        assert pending_reward(a.position, acc20) == 1500
        assert pending_reward(b.position, acc20) == 500

    def test_top_up_pays_old_weight(self):
        first = apply_deposit(_pool(), Position(), 100, 0)
        second = apply_deposit(first.pool, first.position, 50, 10)
        assert second.reward_paid == 1000
        assert second.position.amount == 150
        assert pending_reward(second.position, second.pool.acc_reward_per_share) == 0

    @pytest.mark.parametrize("amount", [0, -1])
    def test_non_positive_rejected(self, amount):
        with pytest.raises(InvalidAmount):
            apply_deposit(_pool(), Position(), amount, 0)


# ---------------------------------------------------------------------------
# withdraw
# ---------------------------------------------------------------------------

class TestWithdraw:
    def test_full_withdraw_empties_position(self):
        dep = apply_deposit(_pool(), Position(), 100, 0)
        out = apply_withdraw(dep.pool, dep.position, 100, 10)
        assert out.reward_paid == 1000
        assert out.position.is_empty
        assert out.pool.total_staked == 0

    def test_partial_withdraw(self):
        dep = apply_deposit(_pool(), Position(), 100, 0)
        out = apply_withdraw(dep.pool, dep.position, 40, 5)
        assert out.reward_paid == 500
        assert out.position.amount == 60
        assert out.pool.total_staked == 60

    def test_more_than_staked(self):
        dep = apply_deposit(_pool(), Position(), 100, 0)
        with pytest.raises(InsufficientStake):
            apply_withdraw(dep.pool, dep.position, 101, 10)

    def test_amount_checked_before_stake(self):
        with pytest.raises(InvalidAmount):
            apply_withdraw(_pool(), Position(), 0, 10)


# ---------------------------------------------------------------------------
# harvest
# ---------------------------------------------------------------------------

class TestHarvest:
    def test_pays_and_resets(self):
        dep = apply_deposit(_pool(), Position(), 100, 0)
        out = apply_harvest(dep.pool, dep.position, 7)
        assert out.reward_paid == 700
        assert out.position.amount == 100
        assert apply_harvest(out.pool, out.position, 7).reward_paid == 0

    def test_empty_position_pays_nothing(self):
        out = apply_harvest(_pool(total_staked=0), Position(), 100)
        assert out.reward_paid == 0
        assert out.position.is_empty
        assert out.pool.last_accrual_time == 100
