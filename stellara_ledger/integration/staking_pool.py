"""
Staking pool: the imperative shell around ``core.staking``.

Every mutating entry point runs as one ``Host.atomic()`` block:

1. load pool + position,
2. run the pure transition (accrue, settle pending reward under the old stake
   weight, rebalance),
3. check the accrual monotonicity and settled-position invariants,
4. pay the pending reward from the pool account in the reward token,
5. move the staking token,
6. persist pool + position.

A failing transfer in step 4 or 5 (e.g. an unfunded reward account) aborts the
whole call; ``reward_debt`` is never advanced past rewards that were not paid.

``pending_rewards`` replays the same ``accrue`` on a copy of the stored pool,
so a view at ``now`` returns exactly what a mutating call at ``now`` pays.

Store layout (``ns`` = configured staking namespace):
- ``(ns, "config")``          -> {"admin", "staking_token", "reward_token", "precision"}
- ``(ns, "pool")``            -> pool record
- ``(ns, "position", user)``  -> position record (absent when empty)
- ``(ns, "paused")``          -> bool
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..core.errors import (
    AlreadyInitialized,
    ContractPaused,
    InvalidAmount,
    InvalidTokenPair,
    NotInitialized,
    Unauthorized,
)
from ..core.staking import (
    Event,
    PoolState,
    Position,
    StakeOutcome,
    accrue,
    apply_deposit,
    apply_harvest,
    apply_withdraw,
    pending_reward,
    pool_from_dict,
    pool_to_dict,
    position_from_dict,
    position_to_dict,
    require_valid_touch,
)
from ..state.markers import MarkerSet
from ..state.store import KeyValueStore
from .host import Host

logger = logging.getLogger(__name__)


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise InvalidAmount(f"amount must be positive, got {amount}")


@dataclass(frozen=True)
class PoolConfig:
    admin: str
    staking_token: str
    reward_token: str
    precision: int


@dataclass(frozen=True)
class StakeReceipt:
    staked: int
    reward_paid: int
    position_amount: int
    total_staked: int


class StakingPool:
    def __init__(self, host: Host, *, namespace: Optional[str] = None, address: Optional[str] = None) -> None:
        self.host = host
        self.namespace = namespace or host.config.staking_namespace
        # Token account holding stakes and reward funding.
        self.address = address or f"contract:{self.namespace}"
        self._funding_refs = MarkerSet(f"{self.namespace}:funding")

    # -- Keys ----------------------------------------------------------------

    def _key(self, *parts: Any) -> tuple:
        return (self.namespace, *parts)

    # -- Internal loaders ----------------------------------------------------

    def _config(self, store: KeyValueStore) -> PoolConfig:
        raw = store.get(self._key("config"))
        if raw is None:
            raise NotInitialized("staking pool not initialized")
        return PoolConfig(**raw)

    def _pool(self, store: KeyValueStore) -> PoolState:
        return pool_from_dict(store.get(self._key("pool")))

    def _position(self, store: KeyValueStore, user: str) -> Position:
        raw = store.get(self._key("position", user))
        if raw is None:
            return Position()
        return position_from_dict(raw)

    def _write(self, store: KeyValueStore, user: str, outcome: StakeOutcome) -> None:
        store.set(self._key("pool"), pool_to_dict(outcome.pool))
        key = self._key("position", user)
        if outcome.position.is_empty:
            store.remove(key)
        else:
            store.set(key, position_to_dict(outcome.position))

    def _require_live(self, store: KeyValueStore) -> PoolConfig:
        cfg = self._config(store)
        if store.get(self._key("paused"), False):
            raise ContractPaused("staking pool is paused")
        return cfg

    def _commit(self, store: KeyValueStore, cfg: PoolConfig, user: str, outcome: StakeOutcome, pre: PoolState) -> None:
        """Check the touch and persist it; runs before any token transfer."""
        if outcome.pool.acc_reward_per_share != pre.acc_reward_per_share:
            logger.debug(
                "Pool %s accrued to %s over [%s, %s]",
                self.namespace,
                outcome.pool.acc_reward_per_share,
                pre.last_accrual_time,
                outcome.pool.last_accrual_time,
            )
        require_valid_touch(pre, outcome.pool, outcome.position, precision=cfg.precision)
        self._write(store, user, outcome)

    def _pay_reward(self, cfg: PoolConfig, user: str, outcome: StakeOutcome) -> None:
        if outcome.reward_paid > 0:
            self.host.token(cfg.reward_token).transfer(self.address, user, outcome.reward_paid)

    # -- Entry points --------------------------------------------------------

    def initialize(self, admin: str, staking_token: str, reward_token: str, reward_rate: int) -> None:
        self.host.require_auth(admin)
        if reward_rate < 0:
            raise InvalidAmount(f"reward_rate must be non-negative, got {reward_rate}")
        if staking_token == reward_token:
            raise InvalidTokenPair(f"staking and reward token must differ, got {staking_token} for both")
        with self.host.atomic() as store:
            if store.has(self._key("config")):
                raise AlreadyInitialized("staking pool already initialized")
            self.host.token(staking_token)
            self.host.token(reward_token)
            store.set(self._key("config"), {
                "admin": admin,
                "staking_token": staking_token,
                "reward_token": reward_token,
                "precision": self.host.config.precision,
            })
            store.set(self._key("pool"), pool_to_dict(PoolState(
                last_accrual_time=self.host.now(),
                reward_rate=reward_rate,
            )))
            store.set(self._key("paused"), False)
        logger.info("Staking pool %s initialized (rate=%s/s)", self.namespace, reward_rate)

    def deposit(self, user: str, amount: int) -> StakeReceipt:
        """Stake ``amount`` and pay out any reward pending on the old stake."""
        _require_positive(amount)
        now = self.host.now()
        with self.host.atomic() as store:
            cfg = self._require_live(store)
            self.host.require_auth(user)
            pre = self._pool(store)
            outcome = apply_deposit(pre, self._position(store, user), amount, now, precision=cfg.precision)
            self._commit(store, cfg, user, outcome, pre)
            self._pay_reward(cfg, user, outcome)
            self.host.token(cfg.staking_token).transfer(user, self.address, amount)
            self.host.emit(Event.DEPOSITED.value, {
                "user": user, "amount": amount, "reward_paid": outcome.reward_paid, "at": now,
            })
        logger.info("Deposit %s by %s (reward paid %s)", amount, user, outcome.reward_paid)
        return self._receipt(amount, outcome)

    def withdraw(self, user: str, amount: int) -> StakeReceipt:
        """Unstake ``amount`` and pay out any reward pending on the old stake."""
        _require_positive(amount)
        now = self.host.now()
        with self.host.atomic() as store:
            cfg = self._require_live(store)
            self.host.require_auth(user)
            pre = self._pool(store)
            outcome = apply_withdraw(pre, self._position(store, user), amount, now, precision=cfg.precision)
            self._commit(store, cfg, user, outcome, pre)
            self._pay_reward(cfg, user, outcome)
            self.host.token(cfg.staking_token).transfer(self.address, user, amount)
            self.host.emit(Event.WITHDRAWN.value, {
                "user": user, "amount": amount, "reward_paid": outcome.reward_paid, "at": now,
            })
        logger.info("Withdraw %s by %s (reward paid %s)", amount, user, outcome.reward_paid)
        return self._receipt(amount, outcome)

    def harvest(self, user: str) -> int:
        """Pay out pending reward without changing the stake."""
        now = self.host.now()
        with self.host.atomic() as store:
            cfg = self._require_live(store)
            self.host.require_auth(user)
            pre = self._pool(store)
            outcome = apply_harvest(pre, self._position(store, user), now, precision=cfg.precision)
            self._commit(store, cfg, user, outcome, pre)
            self._pay_reward(cfg, user, outcome)
            self.host.emit(Event.HARVESTED.value, {
                "user": user, "reward_paid": outcome.reward_paid, "at": now,
            })
        logger.info("Harvest by %s: %s", user, outcome.reward_paid)
        return outcome.reward_paid

    def fund_rewards(self, funder: str, amount: int, *, reference: Optional[str] = None) -> None:
        """Move reward tokens from ``funder`` into the pool account.

        ``reference`` (e.g. an external transfer hash) makes the call
        idempotent: a second funding with the same reference raises
        ``AlreadyConsumed`` and moves nothing.
        """
        _require_positive(amount)
        self.host.require_auth(funder)
        with self.host.atomic() as store:
            cfg = self._config(store)
            if reference is not None:
                self._funding_refs.consume(store, reference)
            self.host.token(cfg.reward_token).transfer(funder, self.address, amount)
            self.host.emit(Event.FUNDED.value, {"funder": funder, "amount": amount, "reference": reference})
        logger.info("Pool %s funded with %s by %s", self.namespace, amount, funder)

    def set_paused(self, admin: str, paused: bool) -> None:
        self.host.require_auth(admin)
        with self.host.atomic() as store:
            cfg = self._config(store)
            if admin != cfg.admin:
                raise Unauthorized(f"{admin} is not the staking admin")
            store.set(self._key("paused"), bool(paused))
            self.host.emit(Event.PAUSED.value, {"paused": bool(paused), "by": admin})
        logger.info("Pool %s paused=%s", self.namespace, paused)

    # -- Views ---------------------------------------------------------------

    def pending_rewards(self, user: str, now: Optional[int] = None) -> int:
        store = self.host.store
        cfg = self._config(store)
        at = self.host.now() if now is None else now
        simulated = accrue(self._pool(store), at, precision=cfg.precision)
        return pending_reward(self._position(store, user), simulated.acc_reward_per_share, precision=cfg.precision)

    def is_paused(self) -> bool:
        return bool(self.host.store.get(self._key("paused"), False))

    def config(self) -> PoolConfig:
        return self._config(self.host.store)

    def pool_state(self) -> PoolState:
        self._config(self.host.store)
        return self._pool(self.host.store)

    def position(self, user: str) -> Position:
        return self._position(self.host.store, user)

    # -- Helpers -------------------------------------------------------------

    @staticmethod
    def _receipt(amount: int, outcome: StakeOutcome) -> StakeReceipt:
        return StakeReceipt(
            staked=amount,
            reward_paid=outcome.reward_paid,
            position_amount=outcome.position.amount,
            total_staked=outcome.pool.total_staked,
        )

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of pool config and accumulator state."""
        return {"config": asdict(self.config()), "pool": pool_to_dict(self.pool_state()), "paused": self.is_paused()}
