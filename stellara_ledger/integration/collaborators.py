"""
Collaborator interfaces consumed by the engines, plus in-memory references.

- ``Authorizer``: succeeds or raises ``Unauthorized`` for a claimed identity.
- ``TokenLedger``: ``transfer`` / ``balance``; authoritative and synchronous.
- ``EventSink``: fire-and-forget notifications (non-authoritative).

``StoreToken`` keeps balances in the host store, so every balance change rolls
back with the enclosing ``Host.atomic()`` block. ``transfer`` does not check
authorization: the calling engine has already authorized the account it
debits. User-facing ``approve`` / ``transfer_from`` / ``mint`` do check.

Transfer hooks: a holder may register a callback that runs after every credit
to it. Each registration picks its failure policy explicitly:

- ``HookPolicy.ABORT``: the hook's exception propagates and aborts the whole
  operation that moved the tokens.
- ``HookPolicy.BEST_EFFORT``: the hook runs in a savepoint; if it raises, its
  writes are discarded, a warning is logged and the transfer stands.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, unique
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Tuple

from ..core.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    Unauthorized,
)
from ..core.fixed_point import I128_MAX, checked_add, checked_sub

if TYPE_CHECKING:
    from .host import Host

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------

class Authorizer(Protocol):
    def require_auth(self, identity: str) -> None: ...


class AllowAll:
    """Every identity is authorized (test hosts, trusted replay)."""

    def require_auth(self, identity: str) -> None:
        if not identity:
            raise Unauthorized("empty identity")


class SignerSet:
    """Authorizes exactly the identities that signed the current call."""

    def __init__(self, signers: Iterable[str] = ()) -> None:
        self._signers: set[str] = set(signers)

    def require_auth(self, identity: str) -> None:
        if identity not in self._signers:
            raise Unauthorized(f"{identity} did not authorize this call")

    def add(self, *identities: str) -> None:
        self._signers.update(identities)

    def clear(self) -> None:
        self._signers.clear()

    @contextmanager
    def signed_by(self, *identities: str) -> Iterator[None]:
        saved = set(self._signers)
        self._signers = set(identities)
        try:
            yield
        finally:
            self._signers = saved


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

class EventSink(Protocol):
    def emit(self, topic: str, payload: Mapping[str, Any]) -> None: ...


class EventLog:
    """Records delivered events in order."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, topic: str, payload: Mapping[str, Any]) -> None:
        self.records.append((topic, dict(payload)))

    def topics(self) -> List[str]:
        return [topic for topic, _ in self.records]

    def of(self, topic: str) -> List[Dict[str, Any]]:
        return [payload for t, payload in self.records if t == topic]


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

class TokenLedger(Protocol):
    token_id: str

    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...

    def balance(self, holder: str) -> int: ...


@unique
class HookPolicy(Enum):
    ABORT = "abort"
    BEST_EFFORT = "best_effort"


HookFn = Callable[[str, str, int], None]  # (token_id, sender, amount)


@dataclass(frozen=True)
class TransferHook:
    callback: HookFn
    policy: HookPolicy


class StoreToken:
    """Fungible token whose balances live in the host store."""

    def __init__(self, host: "Host", token_id: str, *, admin: Optional[str] = None) -> None:
        if not token_id:
            raise ValueError("token_id must be non-empty")
        self.host = host
        self.token_id = token_id
        self.admin = admin
        self._hooks: Dict[str, TransferHook] = {}

    # -- Keys ----------------------------------------------------------------

    def _balance_key(self, holder: str) -> tuple:
        return ("balance", self.token_id, holder)

    def _allowance_key(self, owner: str, spender: str) -> tuple:
        return ("allowance", self.token_id, owner, spender)

    def _supply_key(self) -> tuple:
        return ("supply", self.token_id)

    # -- Reads ---------------------------------------------------------------

    def balance(self, holder: str) -> int:
        return int(self.host.store.get(self._balance_key(holder), 0))

    def allowance(self, owner: str, spender: str) -> int:
        return int(self.host.store.get(self._allowance_key(owner, spender), 0))

    def total_supply(self) -> int:
        return int(self.host.store.get(self._supply_key(), 0))

    # -- Hooks ---------------------------------------------------------------

    def register_hook(self, holder: str, callback: HookFn, policy: Optional[HookPolicy] = None) -> None:
        if policy is None:
            policy = HookPolicy(self.host.config.hook_policy)
        self._hooks[holder] = TransferHook(callback=callback, policy=policy)

    def unregister_hook(self, holder: str) -> None:
        self._hooks.pop(holder, None)

    def _run_hook(self, sender: str, recipient: str, amount: int) -> None:
        hook = self._hooks.get(recipient)
        if hook is None:
            return
        if hook.policy is HookPolicy.ABORT:
            hook.callback(self.token_id, sender, amount)
            return
        try:
            with self.host.atomic():
                hook.callback(self.token_id, sender, amount)
        except Exception:
            logger.warning(
                "Transfer hook for %s on %s failed; ignoring",
                recipient,
                self.token_id,
                exc_info=True,
            )

    # -- Writes --------------------------------------------------------------

    def _set_balance(self, holder: str, amount: int) -> None:
        store = self.host.store
        if amount == 0:
            store.remove(self._balance_key(holder))
        else:
            store.set(self._balance_key(holder), amount)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount(f"transfer amount must be non-negative, got {amount}")
        from_balance = self.balance(sender)
        if from_balance < amount:
            raise InsufficientBalance(
                f"{sender} holds {from_balance} {self.token_id}, needs {amount}"
            )
        self._set_balance(sender, checked_sub(from_balance, amount, lo=0))
        self._set_balance(recipient, checked_add(self.balance(recipient), amount, lo=0))

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        with self.host.atomic():
            self._move(sender, recipient, amount)
            self.host.emit("transfer", {
                "token": self.token_id, "from": sender, "to": recipient, "amount": amount,
            })
            self._run_hook(sender, recipient, amount)

    def mint(self, to: str, amount: int) -> None:
        if self.admin is not None:
            self.host.require_auth(self.admin)
        if amount < 0:
            raise InvalidAmount(f"mint amount must be non-negative, got {amount}")
        with self.host.atomic() as store:
            store.set(self._supply_key(), checked_add(self.total_supply(), amount, lo=0, hi=I128_MAX))
            self._set_balance(to, checked_add(self.balance(to), amount, lo=0))
            self.host.emit("mint", {"token": self.token_id, "to": to, "amount": amount})

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self.host.require_auth(owner)
        if amount < 0:
            raise InvalidAmount(f"allowance must be non-negative, got {amount}")
        with self.host.atomic() as store:
            key = self._allowance_key(owner, spender)
            if amount == 0:
                store.remove(key)
            else:
                store.set(key, amount)
            self.host.emit("approve", {
                "token": self.token_id, "from": owner, "spender": spender, "amount": amount,
            })

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        self.host.require_auth(spender)
        if amount < 0:
            raise InvalidAmount(f"transfer amount must be non-negative, got {amount}")
        with self.host.atomic() as store:
            allowed = self.allowance(owner, spender)
            if allowed < amount:
                raise InsufficientAllowance(
                    f"{spender} may move {allowed} of {owner}'s {self.token_id}, needs {amount}"
                )
            remaining = allowed - amount
            key = self._allowance_key(owner, spender)
            if remaining == 0:
                store.remove(key)
            else:
                store.set(key, remaining)
            self.transfer(owner, recipient, amount)

    def __repr__(self) -> str:
        return f"StoreToken({self.token_id!r})"
