# tests/test_genesis.py
from __future__ import annotations

import json

import pytest

from ase.ledger.constants import (
    ADMIN_ROLE,
    INITIAL_SUPPLY,
    LEDGER_ACCOUNT_ID,
    ORGANIZER_ROLE,
    TREASURY_ROLE,
    UNIT,
)
from ase.ledger.state import LedgerView
from ase.runtime.genesis import (
    GenesisConfig,
    build_genesis_state,
    default_genesis_config,
    genesis_from_dict,
    load_genesis,
)
from ase.runtime.state_invariants import check_supply_invariant, supply_violations


def test_genesis_mints_whole_supply_to_deployer() -> None:
    st = build_genesis_state(GenesisConfig(ledger_id="t", deployer="elder"))
    v = LedgerView.from_ledger(st)

    assert INITIAL_SUPPLY == 1_000_000 * 10**18
    assert v.total_supply == INITIAL_SUPPLY
    assert v.balance_of("elder") == INITIAL_SUPPLY
    assert v.balance_of(LEDGER_ACCOUNT_ID) == 0
    assert v.ancestral_offerings == 0
    assert v.paused is False

    for role in (ADMIN_ROLE, TREASURY_ROLE, ORGANIZER_ROLE):
        assert v.has_role(role, "elder")

    info = v.token_info()
    assert info["name"] == "Àṣẹ"
    assert info["symbol"] == "ASE"
    assert info["decimals"] == 18

    assert supply_violations(st) == []
    check_supply_invariant(st)


def test_default_genesis_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASE_LEDGER_ID", "ase-env")
    monkeypatch.setenv("ASE_DEPLOYER", "founder")
    cfg = default_genesis_config()
    assert cfg.ledger_id == "ase-env"
    assert cfg.deployer == "founder"


def test_genesis_from_dict_supply_in_tokens_or_units() -> None:
    a = genesis_from_dict({"ledger_id": "x", "deployer": "d", "initial_supply_tokens": 5})
    assert a.initial_supply == 5 * UNIT

    b = genesis_from_dict({"ledger_id": "x", "deployer": "d", "initial_supply": "42"})
    assert b.initial_supply == 42

    with pytest.raises(ValueError):
        genesis_from_dict({"deployer": "d", "initial_supply": -1})

    with pytest.raises(ValueError):
        genesis_from_dict({"deployer": LEDGER_ACCOUNT_ID})

    with pytest.raises(ValueError):
        genesis_from_dict(["not", "a", "mapping"])


def test_load_genesis_yaml_and_json(tmp_path) -> None:
    y = tmp_path / "genesis.yaml"
    y.write_text(
        "ledger_id: ase-main\n"
        "deployer: '@elder'\n"
        "initial_supply_tokens: 10\n"
        "token_symbol: ASE\n",
        encoding="utf-8",
    )
    cfg = load_genesis(str(y))
    assert cfg.ledger_id == "ase-main"
    assert cfg.deployer == "@elder"
    assert cfg.initial_supply == 10 * UNIT

    j = tmp_path / "genesis.json"
    j.write_text(json.dumps({"ledger_id": "ase-j", "deployer": "dj"}), encoding="utf-8")
    cfg2 = load_genesis(str(j))
    assert cfg2.ledger_id == "ase-j"
    assert cfg2.initial_supply == INITIAL_SUPPLY

    with pytest.raises(FileNotFoundError):
        load_genesis(str(tmp_path / "missing.yaml"))


def test_genesis_rejects_non_ascii_digits_and_custodial_deployer() -> None:
    with pytest.raises(ValueError):
        genesis_from_dict({"deployer": "d", "initial_supply": "²"})

    with pytest.raises(ValueError):
        build_genesis_state(GenesisConfig(ledger_id="t", deployer=LEDGER_ACCOUNT_ID))
