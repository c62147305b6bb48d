# src/ase/runtime/genesis.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from ase.ledger.constants import (
    ADMIN_ROLE,
    INITIAL_SUPPLY,
    LEDGER_ACCOUNT_ID,
    ORGANIZER_ROLE,
    STATE_VERSION,
    TOKEN_DECIMALS,
    TOKEN_NAME,
    TOKEN_SYMBOL,
    TREASURY_ROLE,
    U256_MAX,
)
from ase.ledger.types import empty_profile, is_decimal_digits

Json = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class GenesisConfig:
    ledger_id: str
    deployer: str
    initial_supply: int = INITIAL_SUPPLY
    token_name: str = TOKEN_NAME
    token_symbol: str = TOKEN_SYMBOL
    decimals: int = TOKEN_DECIMALS
    ledger_account: str = LEDGER_ACCOUNT_ID


def default_genesis_config() -> GenesisConfig:
    return GenesisConfig(
        ledger_id=str(os.environ.get("ASE_LEDGER_ID") or "ase-dev").strip(),
        deployer=str(os.environ.get("ASE_DEPLOYER") or "deployer").strip(),
    )


def _as_supply(obj: Json) -> int:
    """initial_supply is in base units; initial_supply_tokens is in whole tokens."""
    decimals = int(obj.get("decimals", TOKEN_DECIMALS))
    if obj.get("initial_supply") is not None:
        raw = obj.get("initial_supply")
        scale = 1
    elif obj.get("initial_supply_tokens") is not None:
        raw = obj.get("initial_supply_tokens")
        scale = 10**decimals
    else:
        return INITIAL_SUPPLY

    if isinstance(raw, bool):
        raise ValueError("genesis initial supply must be an integer")
    if isinstance(raw, str) and is_decimal_digits(raw.strip()):
        raw = int(raw.strip())
    if not isinstance(raw, int) or raw < 0:
        raise ValueError(f"genesis initial supply must be a non-negative integer (got {raw!r})")

    supply = raw * scale
    if supply > U256_MAX:
        raise ValueError("genesis initial supply exceeds u256")
    return supply


def genesis_from_dict(obj: Any) -> GenesisConfig:
    if not isinstance(obj, dict):
        raise ValueError("genesis config must be a mapping")

    d = default_genesis_config()

    ledger_id = str(obj.get("ledger_id") or "").strip() or d.ledger_id
    deployer = str(obj.get("deployer") or "").strip() or d.deployer
    ledger_account = str(obj.get("ledger_account") or "").strip() or d.ledger_account
    if deployer == ledger_account:
        raise ValueError("deployer must differ from the ledger custodial account")

    return GenesisConfig(
        ledger_id=ledger_id,
        deployer=deployer,
        initial_supply=_as_supply(obj),
        token_name=str(obj.get("token_name") or d.token_name),
        token_symbol=str(obj.get("token_symbol") or d.token_symbol),
        decimals=int(obj.get("decimals", d.decimals)),
        ledger_account=ledger_account,
    )


def load_genesis(path: str) -> GenesisConfig:
    """Load GenesisConfig from a YAML (.yaml/.yml) or JSON file.

    Supported shape:
      ledger_id: ase-main
      deployer: "@elder"
      initial_supply_tokens: 1000000     # or initial_supply (base units)
      token_name: Àṣẹ
      token_symbol: ASE
      decimals: 18
      ledger_account: LEDGER
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(str(p))

    raw = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        import yaml

        obj = yaml.safe_load(raw)
    else:
        obj = json.loads(raw)

    return genesis_from_dict(obj)


def build_genesis_state(cfg: GenesisConfig) -> Json:
    """Genesis: the deployer holds the whole supply and every privileged role."""
    if cfg.deployer == cfg.ledger_account:
        raise ValueError("deployer must differ from the ledger custodial account")
    deployer = dict(empty_profile(), balance=int(cfg.initial_supply))
    return {
        "state_version": STATE_VERSION,
        "ledger_id": cfg.ledger_id,
        "token": {
            "name": cfg.token_name,
            "symbol": cfg.token_symbol,
            "decimals": int(cfg.decimals),
        },
        "ledger_account": cfg.ledger_account,
        "total_supply": int(cfg.initial_supply),
        "ancestral_offerings": 0,
        "paused": False,
        "accounts": {
            cfg.deployer: deployer,
            cfg.ledger_account: empty_profile(),
        },
        "allowances": {},
        "roles": {
            ADMIN_ROLE: [cfg.deployer],
            TREASURY_ROLE: [cfg.deployer],
            ORGANIZER_ROLE: [cfg.deployer],
        },
        "rituals": {},
        "gatherings": {},
    }


__all__ = [
    "GenesisConfig",
    "build_genesis_state",
    "default_genesis_config",
    "genesis_from_dict",
    "load_genesis",
]
