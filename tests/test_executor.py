# tests/test_executor.py
from __future__ import annotations

import logging
import threading

import pytest

from ase.runtime import metrics
from ase.runtime.errors import ApplyError
from ase.runtime.executor import ExecutorError, LedgerExecutor
from ase.runtime.genesis import GenesisConfig, build_genesis_state


def _ex(**kw) -> LedgerExecutor:
    return LedgerExecutor(genesis=GenesisConfig(ledger_id="t", deployer="d", initial_supply=1_000), **kw)


def _tx(tx_type: str, payload: dict, signer: str = "d") -> dict:
    return {"tx_type": tx_type, "signer": signer, "payload": payload}


def test_receipt_and_event_sequencing() -> None:
    ex = _ex()
    r1 = ex.submit(_tx("PRAYER_OFFER", {"to": "e", "amount": 10, "intention": "hope"}))
    r2 = ex.submit(_tx("MUTUAL_AID_SUPPORT", {"to": "e", "amount": 5}))

    assert r1["ok"] is True and r1["seq"] == 1 and r1["tx_type"] == "PRAYER_OFFER"
    assert r1["applied"] == "PRAYER_OFFER"
    assert [e["seq"] for e in r1["events"]] == [0, 1]
    assert [e["seq"] for e in r2["events"]] == [2, 3]
    assert all(e["tx_seq"] == 2 for e in r2["events"])

    evs = ex.events()
    assert [e["event"] for e in evs] == ["Transfer", "PrayerOffered", "Transfer", "MutualAidSupport"]
    assert [e["event"] for e in ex.events(since=2, limit=1)] == ["Transfer"]
    assert ex.tx_count == 2


def test_rejected_tx_changes_nothing_and_is_not_sequenced() -> None:
    ex = _ex()
    before = ex.snapshot()
    with pytest.raises(ApplyError) as ei:
        ex.submit(_tx("PRAYER_OFFER", {"to": "e", "amount": 1, "intention": ""}))
    assert ei.value.reason == "EmptyIntention"
    assert ex.snapshot() == before
    assert ex.events() == []
    assert ex.tx_count == 0


def test_subscribers_receive_committed_events_in_order() -> None:
    ex = _ex()
    seen: list = []
    unsubscribe = ex.subscribe(lambda ev: seen.append(ev["event"]))

    ex.submit(_tx("ANCESTORS_BURN", {"amount": 3, "purpose": "memory"}))
    assert seen == ["Transfer", "AncestralOffering"]

    unsubscribe()
    ex.submit(_tx("TRANSFER", {"to": "e", "amount": 1}))
    assert seen == ["Transfer", "AncestralOffering"]


def test_reentrant_submit_from_subscriber_is_rejected() -> None:
    ex = _ex()
    errors: list = []

    def _reenter(ev: dict) -> None:
        if ev["event"] != "MutualAidSupport":
            return
        try:
            ex.submit(_tx("TRANSFER", {"to": "e", "amount": 1}))
        except ApplyError as e:
            errors.append(e)

    ex.subscribe(_reenter)
    ex.submit(_tx("MUTUAL_AID_SUPPORT", {"to": "e", "amount": 10}))

    assert len(errors) == 1
    assert errors[0].code == "reentrancy"
    assert errors[0].reason == "ReentrancyGuardReentrantCall"
    # the outer operation committed, the nested one did not
    assert ex.view().balance_of("e") == 10
    assert ex.tx_count == 1


def test_failing_subscriber_is_logged_not_fatal(caplog: pytest.LogCaptureFixture) -> None:
    ex = _ex()

    def _broken(_: dict) -> None:
        raise RuntimeError("subscriber down")

    ex.subscribe(_broken)
    with caplog.at_level(logging.ERROR, logger="ase.executor"):
        receipt = ex.submit(_tx("TRANSFER", {"to": "e", "amount": 1}))

    assert receipt["ok"] is True
    assert ex.view().balance_of("e") == 1
    assert any("event subscriber failed" in r.getMessage() for r in caplog.records)


def test_concurrent_submits_serialize() -> None:
    ex = _ex()

    def _worker() -> None:
        for _ in range(25):
            ex.submit(_tx("TRANSFER", {"to": "e", "amount": 1}))

    threads = [threading.Thread(target=_worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    v = ex.view()
    assert v.balance_of("e") == 100
    assert v.balance_of("d") == 900
    assert ex.tx_count == 100


def test_invariant_checking_mode_accepts_healthy_txs() -> None:
    ex = _ex(check_invariants=True)
    ex.submit(_tx("SPIRITUAL_LABOR_RECOGNIZE", {"contributor": "e", "work_type": "w", "amount": 7}))
    assert ex.view().total_supply == 1_007


def test_metrics_count_applied_and_rejected() -> None:
    metrics.reset()
    ex = _ex()
    ex.submit(_tx("TRANSFER", {"to": "e", "amount": 1}))
    with pytest.raises(ApplyError):
        ex.submit(_tx("TRANSFER", {"to": "e", "amount": 10_000}))

    snap = metrics.snapshot()
    assert snap["applied"] == {"TRANSFER": 1}
    assert snap["rejected"] == {"InsufficientBalance": 1}
    assert snap["applied_total"] == 1 and snap["rejected_total"] == 1
    assert snap["gauges"]["total_supply"] == 1_000
    assert snap["gauges"]["paused"] == 0

    text = metrics.format_prometheus()
    assert 'ase_tx_applied_total{tx_type="TRANSFER"} 1' in text
    assert 'ase_tx_rejected_total{reason="InsufficientBalance"} 1' in text
    assert "ase_total_supply 1000" in text


def test_metrics_track_custodial_balance_and_pause() -> None:
    metrics.reset()
    ex = _ex()
    ex.submit(_tx("RITUAL_CONTRIBUTE", {"ritual_id": "odun", "amount": 30}))
    ex.submit(_tx("ANCESTORS_BURN", {"amount": 5, "purpose": "memory"}))
    ex.submit(_tx("LEDGER_PAUSE", {}))

    gauges = metrics.snapshot()["gauges"]
    assert gauges["ledger_balance"] == 30
    assert gauges["ancestral_offerings"] == 5
    assert gauges["total_supply"] == 995
    assert gauges["paused"] == 1


def test_executor_rejects_conflicting_sources() -> None:
    st = build_genesis_state(GenesisConfig(ledger_id="t", deployer="d"))
    with pytest.raises(ExecutorError):
        LedgerExecutor(genesis=GenesisConfig(ledger_id="t", deployer="d"), state=st)

    ex = LedgerExecutor(state=st)
    assert ex.ledger_id == "t"
