from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ase.ledger.state import LedgerView
from ase.runtime.domain_apply import apply_tx_atomic
from ase.runtime.envelope import TxEnvelope
from ase.runtime.errors import ApplyError
from ase.runtime.genesis import GenesisConfig, build_genesis_state, default_genesis_config
from ase.runtime.ledger_logging import log_event
from ase.runtime.metrics import observe_ledger, record_applied, record_rejected
from ase.runtime.state_invariants import check_supply_invariant, ensure_state

Json = Dict[str, Any]
Subscriber = Callable[[Json], None]

log = logging.getLogger("ase.executor")


class ExecutorError(RuntimeError):
    pass


class LedgerExecutor:
    """Single-writer executor for the community ledger.

    - One RLock is held for the whole of each operation; other threads queue.
    - A depth counter is the re-entrancy guard: a submit() issued from inside a
      running operation (e.g. from an event subscriber) is rejected, never run.
    - Every tx is applied fail-atomically; rejected txs change nothing.
    - Committed events get a monotonic `seq` and are fanned out to subscribers
      in registration order.
    """

    def __init__(
        self,
        *,
        genesis: Optional[GenesisConfig] = None,
        state: Optional[Json] = None,
        check_invariants: bool = False,
    ) -> None:
        if state is not None and genesis is not None:
            raise ExecutorError("pass either genesis or state, not both")

        if state is None:
            state = build_genesis_state(genesis or default_genesis_config())

        self.state: Json = ensure_state(state)
        self.ledger_id = str(self.state.get("ledger_id") or "")
        self.check_invariants = bool(check_invariants)

        self._lock = threading.RLock()
        self._depth = 0
        self._tx_seq = 0
        self._events: List[Json] = []
        self._subscribers: List[Subscriber] = []

        observe_ledger(self.state)

    # ---- writes ----

    def submit(self, env: Any) -> Json:
        """Apply one tx. Returns the receipt, raises ApplyError on rejection."""
        env_norm = TxEnvelope.from_json(env)

        with self._lock:
            if self._depth > 0:
                record_rejected("ReentrancyGuardReentrantCall")
                log_event(log, "tx_rejected", tx_type=env_norm.tx_type, signer=env_norm.signer, reason="ReentrancyGuardReentrantCall")
                raise ApplyError("reentrancy", "ReentrancyGuardReentrantCall", {"tx_type": env_norm.tx_type})

            self._depth += 1
            try:
                receipt = self._apply_locked(env_norm)
                self._fan_out(receipt["events"])
                return receipt
            finally:
                self._depth -= 1

    def _apply_locked(self, env: TxEnvelope) -> Json:
        post_check = check_supply_invariant if self.check_invariants else None
        try:
            meta = apply_tx_atomic(self.state, env, post_check=post_check)
        except ApplyError as e:
            record_rejected(str(e.reason))
            log_event(
                log,
                "tx_rejected",
                tx_type=env.tx_type,
                signer=env.signer,
                code=e.code,
                reason=e.reason,
                details=e.details,
            )
            raise

        self._tx_seq += 1
        events: List[Json] = []
        for ev in meta.pop("events", []) or []:
            rec = dict(ev)
            rec["seq"] = len(self._events)
            rec["tx_seq"] = self._tx_seq
            self._events.append(rec)
            events.append(rec)

        t = str(env.tx_type).strip().upper()
        record_applied(t)
        observe_ledger(self.state)
        log_event(log, "tx_applied", tx_type=t, signer=env.signer, tx_seq=self._tx_seq, events=len(events))

        receipt: Json = {"ok": True, "seq": self._tx_seq, "tx_type": t, "events": events}
        receipt.update(meta)
        return receipt

    def _fan_out(self, events: List[Json]) -> None:
        for ev in events:
            for fn in list(self._subscribers):
                try:
                    fn(copy.deepcopy(ev))
                except Exception:
                    # The tx is already committed; a broken subscriber must not undo it.
                    log.exception("event subscriber failed (event=%s seq=%s)", ev.get("event"), ev.get("seq"))

    # ---- subscriptions ----

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register an event callback. Returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(fn)

        def _unsubscribe() -> None:
            with self._lock:
                if fn in self._subscribers:
                    self._subscribers.remove(fn)

        return _unsubscribe

    # ---- reads ----

    def snapshot(self) -> Json:
        with self._lock:
            return copy.deepcopy(self.state)

    def view(self) -> LedgerView:
        with self._lock:
            return LedgerView.from_ledger(self.state)

    def events(self, since: int = 0, limit: Optional[int] = None) -> List[Json]:
        with self._lock:
            start = max(0, int(since))
            out = self._events[start:]
            if limit is not None:
                out = out[: max(0, int(limit))]
            return copy.deepcopy(out)

    @property
    def tx_count(self) -> int:
        return self._tx_seq


__all__ = ["ExecutorError", "LedgerExecutor"]
