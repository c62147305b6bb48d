# src/ase/runtime/state_invariants.py
from __future__ import annotations

"""State invariants / normalization helpers.

Ledger state is a nested JSON-like dict mutated deterministically by the
apply/* modules. This module is the single place that:

  - validates the state is dict-like
  - ensures the core top-level containers exist
  - checks the conservation invariant (sum of balances == total supply)
"""

from collections.abc import MutableMapping
from typing import Any, Dict, List

Json = Dict[str, Any]

_DICT_ROOTS = ("accounts", "allowances", "roles", "rituals", "gatherings", "token")
_INT_ROOTS = ("total_supply", "ancestral_offerings")


class InvariantViolation(AssertionError):
    pass


def ensure_state(st: Any) -> Json:
    """Ensure `st` is a dict and contains the core roots.

    Returns the (possibly mutated) dict.

    Raises:
        TypeError: if st is not a MutableMapping or a root has the wrong type
    """
    if not isinstance(st, MutableMapping):
        raise TypeError(f"state must be MutableMapping, got {type(st)}")

    for key in _DICT_ROOTS:
        cur = st.get(key)
        if cur is None:
            st[key] = {}
        elif not isinstance(cur, dict):
            # Fail closed: do not attempt to coerce arbitrary types.
            raise TypeError(f"state[{key!r}] must be dict, got {type(cur)}")

    for key in _INT_ROOTS:
        cur = st.get(key)
        if cur is None:
            st[key] = 0
        elif isinstance(cur, bool) or not isinstance(cur, int):
            raise TypeError(f"state[{key!r}] must be int, got {type(cur)}")

    if "paused" not in st:
        st["paused"] = False

    return st  # type: ignore[return-value]


def supply_violations(st: Json) -> List[str]:
    """Return human-readable invariant violations (empty list means healthy)."""
    out: List[str] = []
    accounts = st.get("accounts") or {}
    total = 0
    for aid, acct in accounts.items():
        bal = acct.get("balance", 0) if isinstance(acct, dict) else 0
        if not isinstance(bal, int) or bal < 0:
            out.append(f"negative_or_bad_balance:{aid}:{bal!r}")
            continue
        total += bal

    supply = st.get("total_supply", 0)
    if total != supply:
        out.append(f"supply_mismatch:sum_balances={total}:total_supply={supply}")
    return out


def check_supply_invariant(st: Json) -> None:
    """Raise InvariantViolation unless sum(balances) == total_supply and no balance is negative."""
    problems = supply_violations(st)
    if problems:
        raise InvariantViolation("; ".join(problems))


__all__ = ["InvariantViolation", "ensure_state", "supply_violations", "check_supply_invariant"]
