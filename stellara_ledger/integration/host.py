"""
Execution host for the ledger engines.

The host is the imperative shell every engine is constructed with. It bundles
the persistent store, the ledger clock, the authorizer, the registered tokens
and the event sink, and it owns the transaction boundary:

- ``atomic()`` pushes a ``Transaction`` over the current store. Normal exit
  commits it into its parent, any exception discards it and propagates.
  Nested blocks are savepoints.
- ``store`` always resolves to the innermost open transaction, so engines and
  token collaborators read and write through the same overlay.
- ``emit()`` buffers events while a transaction is open and delivers them only
  after the outermost commit. Aborted work publishes nothing. Delivery is
  fire-and-forget: sink failures are logged and dropped.

Operations are serialized by the caller; the host is not thread-safe.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Tuple

from ..config import LedgerConfig
from ..core.errors import NotInitialized
from ..state.store import KeyValueStore, MemoryStore
from ..state.transaction import Transaction
from .collaborators import AllowAll, Authorizer, EventLog, EventSink, TokenLedger

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> int: ...


class ManualClock:
    """Ledger clock driven explicitly by the caller (tests, scenario replay)."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("clock start must be non-negative")
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < 0:
            raise ValueError("timestamp must be non-negative")
        self._now = int(timestamp)

    def advance(self, delta: int) -> int:
        if delta < 0:
            raise ValueError("delta must be non-negative")
        self._now += int(delta)
        return self._now


class Host:
    def __init__(
        self,
        *,
        store: Optional[KeyValueStore] = None,
        clock: Optional[Clock] = None,
        auth: Optional[Authorizer] = None,
        events: Optional[EventSink] = None,
        config: Optional[LedgerConfig] = None,
    ) -> None:
        self._base: KeyValueStore = store if store is not None else MemoryStore()
        self.clock: Clock = clock if clock is not None else ManualClock()
        self.auth: Authorizer = auth if auth is not None else AllowAll()
        self.events: EventSink = events if events is not None else EventLog()
        self.config: LedgerConfig = config if config is not None else LedgerConfig()
        self._stack: List[Transaction] = []
        self._pending: List[Tuple[str, Mapping[str, Any]]] = []
        self._tokens: Dict[str, TokenLedger] = {}

    # -- Store / transactions ------------------------------------------------

    @property
    def base_store(self) -> KeyValueStore:
        return self._base

    @property
    def store(self) -> KeyValueStore:
        return self._stack[-1] if self._stack else self._base

    @property
    def in_transaction(self) -> bool:
        return bool(self._stack)

    @contextmanager
    def atomic(self) -> Iterator[KeyValueStore]:
        tx = Transaction(self.store)
        mark = len(self._pending)
        self._stack.append(tx)
        try:
            yield tx
        except BaseException:
            self._stack.pop()
            tx.discard()
            del self._pending[mark:]
            raise
        self._stack.pop()
        tx.commit()
        if not self._stack:
            self._flush_events()

    # -- Clock / auth --------------------------------------------------------

    def now(self) -> int:
        return int(self.clock.now())

    def require_auth(self, identity: str) -> None:
        self.auth.require_auth(identity)

    # -- Tokens --------------------------------------------------------------

    def register_token(self, token: TokenLedger) -> TokenLedger:
        token_id = token.token_id
        if token_id in self._tokens:
            raise ValueError(f"token already registered: {token_id}")
        self._tokens[token_id] = token
        return token

    def token(self, token_id: str) -> TokenLedger:
        try:
            return self._tokens[token_id]
        except KeyError:
            raise NotInitialized(f"token not registered: {token_id}") from None

    # -- Events --------------------------------------------------------------

    def emit(self, topic: str, payload: Mapping[str, Any]) -> None:
        self._pending.append((topic, dict(payload)))
        if not self._stack:
            self._flush_events()

    def _flush_events(self) -> None:
        pending, self._pending = self._pending, []
        for topic, payload in pending:
            try:
                self.events.emit(topic, payload)
            except Exception:
                logger.warning("Dropping undeliverable %s event", topic, exc_info=True)
