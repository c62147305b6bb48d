# src/ase/runtime/ledger_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_bool(v: Any, default: bool) -> bool:
    if v is None:
        return bool(default)
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return bool(default)


@dataclass(frozen=True)
class LedgerConfig:
    ledger_id: str
    mode: str  # "dev" | "testnet" | "prod"

    # Optional genesis file (YAML or JSON). Empty means built-in defaults.
    genesis_path: str

    api_host: str
    api_port: int

    # Re-check sum(balances) == total_supply after every tx before commit.
    check_invariants: bool

    log_level: str


_ALLOWED_MODES = {"dev", "testnet", "prod"}
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_ledger_config(cfg: LedgerConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.ledger_id, str) or not cfg.ledger_id.strip():
        raise ValueError("ledger_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")

    if str(cfg.log_level or "").strip().upper() not in _ALLOWED_LOG_LEVELS:
        raise ValueError(f"log_level must be one of {_ALLOWED_LOG_LEVELS}; got: {cfg.log_level!r}")

    if cfg.genesis_path and not Path(cfg.genesis_path).is_file():
        raise ValueError(f"genesis_path does not exist or is not a file: {cfg.genesis_path!r}")


def default_ledger_config() -> LedgerConfig:
    return LedgerConfig(
        ledger_id="ase-dev",
        # Production-safe default: no docs endpoints, no wildcard CORS.
        mode="prod",
        genesis_path="",
        api_host="127.0.0.1",
        api_port=8080,
        check_invariants=False,
        log_level="INFO",
    )


def read_ledger_config_file(path: str) -> LedgerConfig:
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("ledger config must be a JSON object")

    d = default_ledger_config()

    cfg = LedgerConfig(
        ledger_id=_as_str(raw.get("ledger_id"), d.ledger_id),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        genesis_path=str(raw.get("genesis_path") or d.genesis_path),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
        check_invariants=_as_bool(raw.get("check_invariants"), d.check_invariants),
        log_level=_as_str(raw.get("log_level"), d.log_level).strip().upper(),
    )

    validate_ledger_config(cfg)
    return cfg


def load_ledger_config(*, config_path: Optional[str] = None) -> LedgerConfig:
    """Config file if ASE_LEDGER_CONFIG_PATH (or config_path) is set, else defaults.

    Individual ASE_* env vars override either source.
    """
    p = config_path or os.environ.get("ASE_LEDGER_CONFIG_PATH")
    base = read_ledger_config_file(p) if p else default_ledger_config()

    cfg = LedgerConfig(
        ledger_id=_as_str(os.environ.get("ASE_LEDGER_ID"), base.ledger_id),
        mode=_as_str(os.environ.get("ASE_MODE"), base.mode).strip().lower(),
        genesis_path=str(os.environ.get("ASE_GENESIS_PATH") or base.genesis_path),
        api_host=_as_str(os.environ.get("ASE_API_HOST"), base.api_host),
        api_port=_as_int(os.environ.get("ASE_API_PORT"), base.api_port),
        check_invariants=_as_bool(os.environ.get("ASE_CHECK_INVARIANTS"), base.check_invariants),
        log_level=_as_str(os.environ.get("ASE_LOG_LEVEL"), base.log_level).strip().upper(),
    )
    validate_ledger_config(cfg)
    return cfg


__all__ = [
    "LedgerConfig",
    "default_ledger_config",
    "load_ledger_config",
    "read_ledger_config_file",
    "validate_ledger_config",
]
