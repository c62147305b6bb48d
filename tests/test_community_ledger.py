# tests/test_community_ledger.py
from __future__ import annotations

import pytest

from ase.ledger.constants import ADMIN_ROLE, INITIAL_SUPPLY, ORGANIZER_ROLE, TREASURY_ROLE, UNIT
from ase.ledger.tags import to_tag
from ase.runtime.community import CommunityLedger
from ase.runtime.errors import ApplyError
from ase.runtime.genesis import GenesisConfig
from ase.runtime.state_invariants import check_supply_invariant

DEPLOYER = "deployer"


@pytest.fixture()
def ledger() -> CommunityLedger:
    return CommunityLedger(genesis=GenesisConfig(ledger_id="scenario", deployer=DEPLOYER))


def _check(ledger: CommunityLedger) -> None:
    check_supply_invariant(ledger.executor.snapshot())


def test_genesis_scenario(ledger: CommunityLedger) -> None:
    assert ledger.total_supply() == INITIAL_SUPPLY
    assert ledger.balance_of(DEPLOYER) == INITIAL_SUPPLY
    for role in (ADMIN_ROLE, TREASURY_ROLE, ORGANIZER_ROLE):
        assert ledger.has_role(role, DEPLOYER)
    assert ledger.get_community_stats() == {
        "total_supply": INITIAL_SUPPLY,
        "ancestral_offerings": 0,
        "ledger_balance": 0,
    }
    assert ledger.token_info()["symbol"] == "ASE"


def test_prayer_scenario(ledger: CommunityLedger) -> None:
    ledger.transfer(DEPLOYER, "A", 1_000 * UNIT)
    ledger.offer_prayer("A", "B", 100 * UNIT, "healing")

    a = ledger.get_user_profile("A")
    b = ledger.get_user_profile("B")
    assert a["balance"] == 900 * UNIT
    assert b["balance"] == 100 * UNIT
    assert a["prayers_offered"] == 1
    assert b["prayers_received"] == 1
    _check(ledger)


def test_recognition_then_profile(ledger: CommunityLedger) -> None:
    before = ledger.get_user_profile("C")
    ledger.recognize_spiritual_labor(DEPLOYER, "C", "drumming", 1_000)
    after = ledger.get_user_profile("C")

    assert after["balance"] == before["balance"] + 1_000
    assert after["contribution_points"] == before["contribution_points"] + 1_000
    assert ledger.get_contribution_level("C") == "Ritual Facilitator"
    _check(ledger)


def test_burn_scenario(ledger: CommunityLedger) -> None:
    ledger.contribute_to_ritual(DEPLOYER, "odun", 5 * UNIT)
    custodial = ledger.get_community_stats()["ledger_balance"]

    ledger.burn_for_ancestors(DEPLOYER, 100 * UNIT, "egungun")

    stats = ledger.get_community_stats()
    assert stats["total_supply"] == INITIAL_SUPPLY - 100 * UNIT
    assert stats["ancestral_offerings"] == 100 * UNIT
    assert stats["ledger_balance"] == custodial
    _check(ledger)


def test_gathering_scenario(ledger: CommunityLedger) -> None:
    ledger.recognize_spiritual_labor(DEPLOYER, "O", "teaching", 99)
    with pytest.raises(ApplyError) as ei:
        ledger.organize_gathering("O", "new-moon", "the grove")
    assert ei.value.reason == "InsufficientContributions"

    ledger.recognize_spiritual_labor(DEPLOYER, "O", "teaching", 1)
    ledger.organize_gathering("O", "new-moon", "the grove")
    assert ledger.gathering_organizer("new-moon") == "O"
    assert ledger.get_contribution_level("O") == "Circle Holder"

    with pytest.raises(ApplyError) as ei2:
        ledger.organize_gathering("O", "new-moon", "the river")
    assert ei2.value.reason == "GatheringExists"


def test_pause_scenario(ledger: CommunityLedger) -> None:
    ledger.transfer(DEPLOYER, "A", 10 * UNIT)
    ledger.contribute_to_ritual(DEPLOYER, "odun", UNIT)
    ledger.pause(DEPLOYER)
    recorded = ledger.executor.snapshot()

    attempts = [
        lambda: ledger.transfer("A", "B", 1),
        lambda: ledger.offer_prayer("A", "B", 1, "x"),
        lambda: ledger.batch_prayer_offering("A", ["B"], [1], ["x"]),
        lambda: ledger.recognize_spiritual_labor(DEPLOYER, "A", "w", 1),
        lambda: ledger.burn_for_ancestors("A", 1, "p"),
        lambda: ledger.contribute_to_ritual("A", "odun", 1),
        lambda: ledger.mutual_aid_support("A", "B", 1),
        lambda: ledger.withdraw_ritual_offerings(DEPLOYER, 1, "B"),
    ]
    for attempt in attempts:
        with pytest.raises(ApplyError) as ei:
            attempt()
        assert ei.value.reason == "EnforcedPause"

    ledger.unpause(DEPLOYER)
    after = ledger.executor.snapshot()
    after["paused"] = True
    assert after == recorded

    ledger.transfer("A", "B", 1)
    assert ledger.balance_of("B") == 1


def test_batch_scenario_matches_sequential() -> None:
    batch = CommunityLedger(genesis=GenesisConfig(ledger_id="b", deployer=DEPLOYER))
    seq = CommunityLedger(genesis=GenesisConfig(ledger_id="s", deployer=DEPLOYER))

    recipients, amounts, intentions = ["B", "C"], [3 * UNIT, 4 * UNIT], ["rain", "sun"]
    receipt = batch.batch_prayer_offering(DEPLOYER, recipients, amounts, intentions)
    for r, a, i in zip(recipients, amounts, intentions):
        seq.offer_prayer(DEPLOYER, r, a, i)

    for who in (DEPLOYER, "B", "C"):
        assert batch.get_user_profile(who) == seq.get_user_profile(who)
    assert receipt["events"][-1]["event"] == "BatchPrayersOffered"


def test_allowance_and_roles_via_facade(ledger: CommunityLedger) -> None:
    ledger.approve(DEPLOYER, "spender", 50)
    assert ledger.allowance(DEPLOYER, "spender") == 50
    ledger.transfer_from("spender", DEPLOYER, "Z", 20)
    assert ledger.balance_of("Z") == 20

    ledger.grant_role(DEPLOYER, TREASURY_ROLE, "keeper")
    assert ledger.has_role(TREASURY_ROLE, "keeper")
    ledger.set_community_role("keeper", "Z", "drummer")
    assert ledger.get_user_profile("Z")["community_role"] == to_tag("drummer")

    ledger.renounce_role("keeper", TREASURY_ROLE)
    assert not ledger.has_role(TREASURY_ROLE, "keeper")
    ledger.grant_role(DEPLOYER, ORGANIZER_ROLE, "keeper")
    ledger.revoke_role(DEPLOYER, ORGANIZER_ROLE, "keeper")
    assert not ledger.has_role(ORGANIZER_ROLE, "keeper")


def test_ritual_registry_and_withdraw(ledger: CommunityLedger) -> None:
    ledger.contribute_to_ritual(DEPLOYER, "odun", 30)
    ledger.mutual_aid_support(DEPLOYER, "neighbor", 5)
    ledger.withdraw_ritual_offerings(DEPLOYER, 30, "neighbor")

    assert ledger.ritual_offerings("odun") == 30
    assert ledger.balance_of("neighbor") == 35
    assert ledger.get_community_stats()["ledger_balance"] == 0
    assert [e["event"] for e in ledger.events(since=0)][-1] == "RitualOfferingsWithdrawn"
    _check(ledger)


def test_unknown_principals_read_as_zero(ledger: CommunityLedger) -> None:
    p = ledger.get_user_profile("nobody")
    assert p["balance"] == 0
    assert p["level"] == "Community Member"
    assert ledger.gathering_organizer("never") is None
    assert "nobody" not in ledger.executor.snapshot()["accounts"]
