# src/ase/runtime/apply/token.py
from __future__ import annotations

"""Fungible-token domain apply semantics.

Txs handled here:
- TRANSFER       {to, amount}
- APPROVE        {spender, amount}
- TRANSFER_FROM  {owner, to, amount}   (signer is the spender)

This module also owns the single balance primitive `update()`. Every path that
moves value (transfers, mints, burns, custodial sweeps) goes through it, so the
pause flag suppresses all of them uniformly and the supply invariant
(sum of balances == total_supply) is maintained in one place.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ase.ledger.constants import INFINITE_ALLOWANCE, U256_MAX
from ase.ledger.types import as_amount, as_principal, ensure_account
from ase.runtime.envelope import TxEnvelope
from ase.runtime.errors import ApplyError

Json = Dict[str, Any]


@dataclass
class TokenApplyError(ApplyError):
    code: str
    reason: str
    details: Optional[Json] = None


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def _as_str(v: Any) -> str:
    return v.strip() if isinstance(v, str) else ""


def event(name: str, **fields: Any) -> Json:
    out: Json = {"event": name}
    out.update(fields)
    return out


def require_not_paused(state: Json) -> None:
    if bool(state.get("paused", False)):
        raise TokenApplyError("paused", "EnforcedPause", {})


def require_receiver(v: Any) -> str:
    to = _as_str(v)
    if not to:
        raise TokenApplyError("invalid_payload", "InvalidReceiver", {"to": v})
    return to


def update(
    state: Json,
    frm: str,
    to: str,
    amount: Any,
    events: List[Json],
    *,
    insufficient_reason: str = "InsufficientBalance",
) -> int:
    """Move `amount` from `frm` to `to`.

    An empty `frm` mints (total_supply grows), an empty `to` burns
    (total_supply shrinks). All checks run before the first write.
    """
    require_not_paused(state)
    amt = as_amount(amount)
    supply = int(state.get("total_supply", 0))

    src: Optional[Json] = None
    if frm:
        src = ensure_account(state, frm)
        bal = int(src.get("balance", 0))
        if bal < amt:
            raise TokenApplyError(
                "insufficient",
                insufficient_reason,
                {"account": frm, "balance": bal, "amount": amt},
            )
    elif supply + amt > U256_MAX:
        raise TokenApplyError("insufficient", "SupplyOverflow", {"total_supply": supply, "amount": amt})

    if src is not None:
        src["balance"] = int(src["balance"]) - amt
    else:
        state["total_supply"] = supply + amt

    if to:
        dst = ensure_account(state, to)
        dst["balance"] = int(dst.get("balance", 0)) + amt
    else:
        state["total_supply"] = int(state["total_supply"]) - amt

    events.append(event("Transfer", **{"from": frm, "to": to, "amount": amt}))
    return amt


def transfer(
    state: Json,
    frm: str,
    to: str,
    amount: Any,
    events: List[Json],
    *,
    insufficient_reason: str = "InsufficientBalance",
) -> int:
    return update(state, frm, require_receiver(to), amount, events, insufficient_reason=insufficient_reason)


def mint(state: Json, to: str, amount: Any, events: List[Json]) -> int:
    return update(state, "", require_receiver(to), amount, events)


def burn(
    state: Json,
    frm: str,
    amount: Any,
    events: List[Json],
    *,
    insufficient_reason: str = "InsufficientBalance",
) -> int:
    return update(state, frm, "", amount, events, insufficient_reason=insufficient_reason)


def _ensure_allowances(state: Json, owner: str) -> Json:
    root = state.get("allowances")
    if not isinstance(root, dict):
        root = {}
        state["allowances"] = root
    per_owner = root.get(owner)
    if not isinstance(per_owner, dict):
        per_owner = {}
        root[owner] = per_owner
    return per_owner


def _apply_transfer(state: Json, env: TxEnvelope) -> Json:
    payload = _as_dict(env.payload)
    events: List[Json] = []
    amt = transfer(state, env.signer, payload.get("to"), payload.get("amount"), events)
    return {"applied": "TRANSFER", "amount": amt, "events": events}


def _apply_approve(state: Json, env: TxEnvelope) -> Json:
    payload = _as_dict(env.payload)
    spender = as_principal(payload.get("spender"), field="spender")
    amt = as_amount(payload.get("amount"))
    if amt > U256_MAX:
        raise TokenApplyError("invalid_payload", "InvalidAmount", {"amount": amt})

    _ensure_allowances(state, env.signer)[spender] = amt
    events = [event("Approval", owner=env.signer, spender=spender, amount=amt)]
    return {"applied": "APPROVE", "events": events}


def _apply_transfer_from(state: Json, env: TxEnvelope) -> Json:
    payload = _as_dict(env.payload)
    owner = as_principal(payload.get("owner") or payload.get("from"), field="owner")
    amt = as_amount(payload.get("amount"))

    allowances = _ensure_allowances(state, owner)
    current = int(allowances.get(env.signer, 0))
    if current != INFINITE_ALLOWANCE:
        if current < amt:
            raise TokenApplyError(
                "insufficient",
                "InsufficientAllowance",
                {"owner": owner, "spender": env.signer, "allowance": current, "amount": amt},
            )
        allowances[env.signer] = current - amt

    events: List[Json] = []
    transfer(state, owner, payload.get("to"), amt, events)
    return {"applied": "TRANSFER_FROM", "amount": amt, "events": events}


TOKEN_TX_TYPES: Set[str] = {"TRANSFER", "APPROVE", "TRANSFER_FROM"}


def apply_token(state: Json, env: TxEnvelope) -> Optional[Json]:
    """
    Returns:
      - dict: applied result (receipt convenience)
      - None: tx_type not in token domain
    """
    t = _as_str(env.tx_type).upper()
    if t not in TOKEN_TX_TYPES:
        return None

    if t == "TRANSFER":
        return _apply_transfer(state, env)

    if t == "APPROVE":
        return _apply_approve(state, env)

    if t == "TRANSFER_FROM":
        return _apply_transfer_from(state, env)

    return None


__all__ = [
    "TokenApplyError",
    "TOKEN_TX_TYPES",
    "apply_token",
    "burn",
    "event",
    "mint",
    "require_not_paused",
    "require_receiver",
    "transfer",
    "update",
]
