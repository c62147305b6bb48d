# src/ase/runtime/apply/__init__.py
"""Domain-specific apply modules.

Each module implements deterministic ledger state transitions for a subset of
tx types and returns None for tx types it does not claim. The router lives in
ase.runtime.domain_dispatch.

NOTE: Keep this package import-safe (no imports of the dispatcher here).
"""

from __future__ import annotations

__all__ = [
    "token",
    "admin",
    "prayers",
    "recognition",
    "community",
]
