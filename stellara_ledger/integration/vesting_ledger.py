"""
Vesting ledger: the imperative shell around ``core.vesting``.

Each entry point authorizes the caller, loads the records it needs from the
host store, runs the pure transition and writes the result back, all inside
one ``Host.atomic()`` block. A claim's ``claimed`` flag and its token transfer
therefore commit or abort together; if the reward token reports insufficient
funds the grant is left exactly as it was.

The ledger pays claims from its own token account (``address``), which must be
funded with the reward token beforehand.

Store layout (``ns`` = configured vesting namespace):
- ``(ns, "init")``          -> True
- ``(ns, "config")``        -> {"admin", "reward_token", "governance"}
- ``(ns, "grant_counter")`` -> last issued grant id
- ``(ns, "grant", id)``     -> grant record
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.errors import (
    AlreadyInitialized,
    GrantNotFound,
    InvalidSchedule,
    LedgerInvariantError,
    NotInitialized,
    Unauthorized,
)
from ..core.vesting import (
    Event,
    Grant,
    apply_claim,
    apply_revoke,
    check_all,
    check_transition,
    create_grant,
    grant_from_dict,
    grant_to_dict,
    vested_amount,
)
from ..state.counters import current_id, next_id
from ..state.store import KeyValueStore
from .host import Host

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VestingInfo:
    admin: str
    reward_token: str
    governance: str


class VestingLedger:
    def __init__(self, host: Host, *, namespace: Optional[str] = None, address: Optional[str] = None) -> None:
        self.host = host
        self.namespace = namespace or host.config.vesting_namespace
        # Token account the ledger pays claims from.
        self.address = address or f"contract:{self.namespace}"

    # -- Keys ----------------------------------------------------------------

    def _key(self, *parts: Any) -> tuple:
        return (self.namespace, *parts)

    # -- Internal loaders ----------------------------------------------------

    def _config(self, store: KeyValueStore) -> Dict[str, str]:
        cfg = store.get(self._key("config"))
        if cfg is None:
            raise NotInitialized("vesting ledger not initialized")
        return cfg

    def _require_admin(self, store: KeyValueStore, caller: str) -> Dict[str, str]:
        self.host.require_auth(caller)
        cfg = self._config(store)
        if caller != cfg["admin"]:
            raise Unauthorized(f"{caller} is not the vesting admin")
        return cfg

    def _load_grant(self, store: KeyValueStore, grant_id: int) -> Grant:
        raw = store.get(self._key("grant", grant_id))
        if raw is None:
            raise GrantNotFound(f"grant {grant_id} not found")
        return grant_from_dict(raw)

    def _write_grant(self, store: KeyValueStore, grant: Grant, pre: Optional[Grant] = None) -> None:
        violations = check_all(grant)
        if pre is not None:
            violations += check_transition(pre, grant)
        if violations:
            raise LedgerInvariantError(violations)
        store.set(self._key("grant", grant.grant_id), grant_to_dict(grant))

    # -- Entry points --------------------------------------------------------

    def init(self, admin: str, reward_token: str, governance: str) -> None:
        self.host.require_auth(admin)
        with self.host.atomic() as store:
            if store.has(self._key("init")):
                raise AlreadyInitialized("vesting ledger already initialized")
            self.host.token(reward_token)
            store.set(self._key("init"), True)
            store.set(self._key("config"), {
                "admin": admin,
                "reward_token": reward_token,
                "governance": governance,
            })
            store.set(self._key("grant_counter"), 0)
        logger.info("Vesting ledger %s initialized (admin=%s, token=%s)", self.namespace, admin, reward_token)

    def grant(
        self,
        admin: str,
        beneficiary: str,
        amount: int,
        start_time: int,
        cliff: int,
        duration: int,
    ) -> int:
        """Create a vesting grant and return its id.

        Raises:
            Unauthorized: caller is not the admin.
            InvalidSchedule: non-positive amount, cliff past duration, or a
                field outside its integer domain.
        """
        with self.host.atomic() as store:
            self._require_admin(store, admin)
            if not beneficiary:
                raise InvalidSchedule("beneficiary must be non-empty")
            grant_id = next_id(store, self._key("grant_counter"))
            grant = create_grant(grant_id, beneficiary, amount, start_time, cliff, duration)
            self._write_grant(store, grant)
            self.host.emit(Event.GRANTED.value, {
                "grant_id": grant_id,
                "beneficiary": beneficiary,
                "amount": amount,
                "start_time": start_time,
                "cliff": cliff,
                "duration": duration,
                "granted_at": self.host.now(),
                "granted_by": admin,
            })
        logger.info("Grant %s of %s to %s created", grant_id, amount, beneficiary)
        return grant_id

    def claim(self, grant_id: int, caller: str) -> int:
        """Pay out the vested amount of a grant; at most once per grant.

        Raises:
            GrantNotFound, Unauthorized, AlreadyClaimed, Revoked, NotVested,
            InsufficientBalance (the ledger account cannot cover the payout).
        """
        now = self.host.now()
        with self.host.atomic() as store:
            pre = self._load_grant(store, grant_id)
            cfg = self._config(store)
            self.host.require_auth(caller)
            outcome = apply_claim(pre, caller, now)
            self._write_grant(store, outcome.grant, pre)
            self.host.token(cfg["reward_token"]).transfer(self.address, caller, outcome.amount)
            self.host.emit(Event.CLAIMED.value, {
                "grant_id": grant_id,
                "beneficiary": caller,
                "amount": outcome.amount,
                "claimed_at": now,
            })
        logger.info("Grant %s claimed by %s: %s", grant_id, caller, outcome.amount)
        return outcome.amount

    def revoke(self, grant_id: int, caller: str, timelock: int) -> None:
        """Revoke an unclaimed grant once ``start_time + timelock`` has passed.

        Raises:
            Unauthorized, GrantNotFound, AlreadyClaimed, Revoked,
            InvalidTimelock, NotEnoughTimeForRevoke.
        """
        now = self.host.now()
        with self.host.atomic() as store:
            self._require_admin(store, caller)
            pre = self._load_grant(store, grant_id)
            post = apply_revoke(pre, now, timelock, min_timelock=self.host.config.min_revoke_timelock)
            self._write_grant(store, post, pre)
            self.host.emit(Event.REVOKED.value, {
                "grant_id": grant_id,
                "beneficiary": post.beneficiary,
                "revoked_at": now,
                "revoked_by": caller,
            })
        logger.info("Grant %s revoked by %s at %s", grant_id, caller, now)

    # -- Views ---------------------------------------------------------------

    def get_grant(self, grant_id: int) -> Grant:
        return self._load_grant(self.host.store, grant_id)

    def vested_amount(self, grant_id: int, now: Optional[int] = None) -> int:
        grant = self._load_grant(self.host.store, grant_id)
        return vested_amount(grant, self.host.now() if now is None else now)

    def grant_count(self) -> int:
        return current_id(self.host.store, self._key("grant_counter"))

    def info(self) -> VestingInfo:
        cfg = self._config(self.host.store)
        return VestingInfo(admin=cfg["admin"], reward_token=cfg["reward_token"], governance=cfg["governance"])
