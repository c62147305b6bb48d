# src/ase/runtime/executor_boot.py

from __future__ import annotations

from typing import Optional

from ase.runtime.executor import LedgerExecutor
from ase.runtime.genesis import GenesisConfig, default_genesis_config, load_genesis
from ase.runtime.ledger_config import LedgerConfig, load_ledger_config


def genesis_for_config(cfg: LedgerConfig) -> GenesisConfig:
    if cfg.genesis_path:
        return load_genesis(cfg.genesis_path)
    d = default_genesis_config()
    return GenesisConfig(ledger_id=cfg.ledger_id, deployer=d.deployer)


def build_executor(cfg: Optional[LedgerConfig] = None) -> LedgerExecutor:
    """
    Build a LedgerExecutor from an explicit config or, if omitted, from
    ASE_* environment variables / ASE_LEDGER_CONFIG_PATH.

    `ase.api.app` calls build_executor() with no args in production.
    """
    c = cfg or load_ledger_config()
    return LedgerExecutor(genesis=genesis_for_config(c), check_invariants=c.check_invariants)
