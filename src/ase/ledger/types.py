"""ase.ledger.types

Account/profile schema helpers shared by every apply module.

A profile is created zero-valued on first touch and is never deleted:

  accounts[principal] = {
    "balance": int,               # 18-decimal units
    "contribution_points": int,   # saturates at U128_MAX
    "prayers_offered": int,       # saturates at U64_MAX
    "prayers_received": int,      # saturates at U64_MAX
    "community_role": "0x..",     # 32-byte tag, zero = no role
  }
"""

from __future__ import annotations

from typing import Any, Dict

from ase.ledger.tags import ZERO_TAG
from ase.runtime.errors import ApplyError

Json = Dict[str, Any]


def empty_profile() -> Json:
    return {
        "balance": 0,
        "contribution_points": 0,
        "prayers_offered": 0,
        "prayers_received": 0,
        "community_role": ZERO_TAG,
    }


def as_principal(v: Any, *, field: str = "account") -> str:
    """Normalize a principal id. Empty or non-string ids are rejected."""
    if not isinstance(v, str) or not v.strip():
        raise ApplyError("invalid_payload", "InvalidAccount", {"field": field, "value": repr(v)[:80]})
    return v.strip()


def is_decimal_digits(s: str) -> bool:
    """ASCII 0-9 only; str.isdigit also admits superscripts and other non-int digits."""
    return bool(s) and s.isascii() and s.isdigit()


def as_amount(v: Any, *, field: str = "amount") -> int:
    """Normalize an amount to a non-negative int.

    Decimal strings are accepted (large values arrive as strings from JSON clients).
    bool is an int subclass; disallow it explicitly.
    """
    if isinstance(v, bool):
        raise ApplyError("invalid_payload", "InvalidAmount", {"field": field, "value": v})
    if isinstance(v, int):
        amt = v
    elif isinstance(v, str) and is_decimal_digits(v.strip()):
        amt = int(v.strip())
    else:
        raise ApplyError("invalid_payload", "InvalidAmount", {"field": field, "value": repr(v)[:80]})
    if amt < 0:
        raise ApplyError("invalid_payload", "InvalidAmount", {"field": field, "value": amt})
    return amt


def ensure_accounts(state: Json) -> Json:
    accts = state.get("accounts")
    if not isinstance(accts, dict):
        accts = {}
        state["accounts"] = accts
    return accts


def ensure_account(state: Json, account_id: str) -> Json:
    accts = ensure_accounts(state)
    acct = accts.get(account_id)
    if not isinstance(acct, dict):
        acct = empty_profile()
        accts[account_id] = acct

    # Backfill fields on older shapes
    for k, v in empty_profile().items():
        acct.setdefault(k, v)
    return acct


def saturating_add(cur: int, delta: int, ceiling: int) -> int:
    total = int(cur) + int(delta)
    return ceiling if total > ceiling else total


__all__ = [
    "Json",
    "empty_profile",
    "as_principal",
    "as_amount",
    "is_decimal_digits",
    "ensure_accounts",
    "ensure_account",
    "saturating_add",
]
