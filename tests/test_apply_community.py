# tests/test_apply_community.py
from __future__ import annotations

import pytest

from ase.ledger.constants import LEDGER_ACCOUNT_ID
from ase.ledger.tags import to_tag
from ase.runtime.domain_apply import ApplyError, apply_tx, apply_tx_atomic
from ase.runtime.envelope import TxEnvelope
from ase.runtime.genesis import GenesisConfig, build_genesis_state
from ase.runtime.state_invariants import check_supply_invariant


def _env(tx_type: str, payload: dict, signer: str = "deployer") -> TxEnvelope:
    return TxEnvelope(tx_type=tx_type, signer=signer, payload=payload)


def _state(supply: int = 10_000) -> dict:
    return build_genesis_state(GenesisConfig(ledger_id="t", deployer="deployer", initial_supply=supply))


def _recognize(st: dict, who: str, amount: int) -> None:
    apply_tx(st, _env("SPIRITUAL_LABOR_RECOGNIZE", {"contributor": who, "work_type": "teaching", "amount": amount}))


def test_gathering_requires_points_and_is_write_once() -> None:
    st = _state()
    _recognize(st, "O", 99)

    with pytest.raises(ApplyError) as ei:
        apply_tx_atomic(st, _env("GATHERING_ORGANIZE", {"gathering_id": "g1", "location": "grove"}, signer="O"))
    assert ei.value.reason == "InsufficientContributions"

    _recognize(st, "O", 1)
    meta = apply_tx(st, _env("GATHERING_ORGANIZE", {"gathering_id": "g1", "location": "grove"}, signer="O"))
    assert meta["events"] == [
        {"event": "CommunityGathering", "organizer": "O", "gathering_id": to_tag("g1"), "location": "grove"}
    ]
    assert st["gatherings"][to_tag("g1")] == "O"

    with pytest.raises(ApplyError) as ei2:
        apply_tx_atomic(st, _env("GATHERING_ORGANIZE", {"gathering_id": "g1", "location": "river"}, signer="O"))
    assert ei2.value.code == "conflict"
    assert ei2.value.reason == "GatheringExists"
    assert st["gatherings"][to_tag("g1")] == "O"


def test_duplicate_gathering_wins_over_missing_points() -> None:
    st = _state()
    _recognize(st, "O", 100)
    apply_tx(st, _env("GATHERING_ORGANIZE", {"gathering_id": "g1", "location": "grove"}, signer="O"))

    with pytest.raises(ApplyError) as ei:
        apply_tx_atomic(st, _env("GATHERING_ORGANIZE", {"gathering_id": "g1", "location": "x"}, signer="newcomer"))
    assert ei.value.reason == "GatheringExists"


def test_ritual_contribution_pays_custodial_account() -> None:
    st = _state()
    meta = apply_tx(st, _env("RITUAL_CONTRIBUTE", {"ritual_id": "egungun", "amount": 300}))
    assert meta["new_total"] == 300
    assert meta["events"][-1] == {"event": "CommunityBlessing", "ritual_id": to_tag("egungun"), "new_total": 300}

    apply_tx(st, _env("RITUAL_CONTRIBUTE", {"ritual_id": "egungun", "amount": 200}))
    assert st["rituals"][to_tag("egungun")] == 500
    assert st["accounts"][LEDGER_ACCOUNT_ID]["balance"] == 500
    assert st["accounts"]["deployer"]["balance"] == 9_500
    check_supply_invariant(st)


def test_ritual_contribution_guards() -> None:
    st = _state()
    with pytest.raises(ApplyError) as ei:
        apply_tx_atomic(st, _env("RITUAL_CONTRIBUTE", {"ritual_id": "r", "amount": 0}))
    assert ei.value.reason == "InvalidAmount"

    with pytest.raises(ApplyError) as ei2:
        apply_tx_atomic(st, _env("RITUAL_CONTRIBUTE", {"ritual_id": "r", "amount": 10_001}))
    assert ei2.value.reason == "InsufficientAse"

    assert st["rituals"] == {}


def test_mutual_aid_support() -> None:
    st = _state()
    meta = apply_tx(st, _env("MUTUAL_AID_SUPPORT", {"to": "neighbor", "amount": 42}))
    assert meta["events"][-1] == {"event": "MutualAidSupport", "supporter": "deployer", "recipient": "neighbor", "amount": 42}
    assert st["accounts"]["neighbor"]["balance"] == 42

    with pytest.raises(ApplyError) as ei:
        apply_tx_atomic(st, _env("MUTUAL_AID_SUPPORT", {"to": "deployer", "amount": 43}, signer="neighbor"))
    assert ei.value.reason == "InsufficientAse"


def test_withdraw_sweeps_pool_without_touching_ritual_totals() -> None:
    st = _state()
    apply_tx(st, _env("RITUAL_CONTRIBUTE", {"ritual_id": "r1", "amount": 400}))

    meta = apply_tx(st, _env("RITUAL_OFFERINGS_WITHDRAW", {"amount": 250, "to": "healer"}))
    assert meta["events"][-1] == {"event": "RitualOfferingsWithdrawn", "recipient": "healer", "amount": 250}
    assert st["accounts"][LEDGER_ACCOUNT_ID]["balance"] == 150
    assert st["accounts"]["healer"]["balance"] == 250
    # per-ritual total is an audit record, not an earmark
    assert st["rituals"][to_tag("r1")] == 400
    check_supply_invariant(st)

    with pytest.raises(ApplyError) as ei:
        apply_tx_atomic(st, _env("RITUAL_OFFERINGS_WITHDRAW", {"amount": 151, "to": "healer"}))
    assert ei.value.reason == "InsufficientBalance"

    with pytest.raises(ApplyError) as ei2:
        apply_tx_atomic(st, _env("RITUAL_OFFERINGS_WITHDRAW", {"amount": 1, "to": "healer"}, signer="healer"))
    assert ei2.value.reason == "AccessControlUnauthorizedAccount"


def test_withdraw_is_blocked_while_paused() -> None:
    st = _state()
    apply_tx(st, _env("RITUAL_CONTRIBUTE", {"ritual_id": "r1", "amount": 10}))
    st["paused"] = True
    with pytest.raises(ApplyError) as ei:
        apply_tx_atomic(st, _env("RITUAL_OFFERINGS_WITHDRAW", {"amount": 10, "to": "healer"}))
    assert ei.value.reason == "EnforcedPause"


@pytest.mark.parametrize(
    "tx_type,payload",
    [
        ("TRANSFER", {"to": "mallory", "amount": 500}),
        ("RITUAL_CONTRIBUTE", {"ritual_id": "odun", "amount": 10}),
        ("MUTUAL_AID_SUPPORT", {"to": "mallory", "amount": 1}),
        ("APPROVE", {"spender": "mallory", "amount": 500}),
    ],
)
def test_custodial_account_cannot_sign(tx_type: str, payload: dict) -> None:
    st = _state()
    apply_tx(st, _env("RITUAL_CONTRIBUTE", {"ritual_id": "odun", "amount": 500}))

    with pytest.raises(ApplyError) as ei:
        apply_tx_atomic(st, _env(tx_type, payload, signer=LEDGER_ACCOUNT_ID))
    assert ei.value.code == "forbidden"
    assert ei.value.reason == "AccessControlUnauthorizedAccount"

    assert st["accounts"][LEDGER_ACCOUNT_ID]["balance"] == 500
    assert st["rituals"][to_tag("odun")] == 500
    assert "mallory" not in st["accounts"]
    assert st["allowances"].get(LEDGER_ACCOUNT_ID) is None


def test_custodial_account_honors_custom_ledger_account() -> None:
    st = build_genesis_state(
        GenesisConfig(ledger_id="t", deployer="deployer", initial_supply=100, ledger_account="POOL")
    )
    apply_tx(st, _env("RITUAL_CONTRIBUTE", {"ritual_id": "r", "amount": 40}))
    assert st["accounts"]["POOL"]["balance"] == 40

    with pytest.raises(ApplyError) as ei:
        apply_tx_atomic(st, _env("TRANSFER", {"to": "mallory", "amount": 40}, signer="POOL"))
    assert ei.value.reason == "AccessControlUnauthorizedAccount"
