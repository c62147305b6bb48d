# src/ase/runtime/apply/community.py
from __future__ import annotations

"""Community registries: gatherings, ritual offerings, mutual aid.

Txs handled here:
- GATHERING_ORGANIZE         {gathering_id, location}
- RITUAL_CONTRIBUTE          {ritual_id, amount}
- MUTUAL_AID_SUPPORT         {to, amount}
- RITUAL_OFFERINGS_WITHDRAW  {amount, to}          TREASURY_ROLE only

State shape:
state["gatherings"] = {"<gathering tag>": "<organizer>"}    # write-once
state["rituals"]    = {"<ritual tag>": <cumulative amount>}  # monotonic

Ritual contributions are paid into the ledger's own custodial account
(state["ledger_account"]). Treasury withdrawals sweep that pooled balance and
leave the per-ritual totals untouched: the ritual registry is an audit record,
not a spendable earmark.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ase.ledger.constants import GATHERING_MIN_POINTS, LEDGER_ACCOUNT_ID, TREASURY_ROLE
from ase.ledger.tags import to_tag
from ase.ledger.types import as_amount, ensure_account
from ase.runtime.apply.admin import require_role
from ase.runtime.apply.token import event, require_not_paused, require_receiver, transfer
from ase.runtime.envelope import TxEnvelope
from ase.runtime.errors import ApplyError

Json = Dict[str, Any]


@dataclass
class CommunityApplyError(ApplyError):
    code: str
    reason: str
    details: Optional[Json] = None


def _as_dict(x: Any) -> Json:
    return x if isinstance(x, dict) else {}


def _as_str(x: Any) -> str:
    return x if isinstance(x, str) else ""


def _ensure_root_dict(state: Json, key: str) -> Json:
    cur = state.get(key)
    if not isinstance(cur, dict):
        cur = {}
        state[key] = cur
    return cur


def ledger_account(state: Json) -> str:
    return _as_str(state.get("ledger_account")).strip() or LEDGER_ACCOUNT_ID


def _apply_gathering_organize(state: Json, env: TxEnvelope) -> Json:
    require_not_paused(state)
    payload = _as_dict(env.payload)
    organizer = env.signer
    gathering_id = to_tag(payload.get("gathering_id"))
    location = _as_str(payload.get("location"))

    gatherings = _ensure_root_dict(state, "gatherings")
    if gathering_id in gatherings:
        raise CommunityApplyError(
            "conflict",
            "GatheringExists",
            {"gathering_id": gathering_id, "organizer": gatherings[gathering_id]},
        )

    points = int(ensure_account(state, organizer).get("contribution_points", 0))
    if points < GATHERING_MIN_POINTS:
        raise CommunityApplyError(
            "insufficient",
            "InsufficientContributions",
            {"points": points, "required": GATHERING_MIN_POINTS},
        )

    gatherings[gathering_id] = organizer
    events = [event("CommunityGathering", organizer=organizer, gathering_id=gathering_id, location=location)]
    return {"applied": "GATHERING_ORGANIZE", "gathering_id": gathering_id, "events": events}


def _apply_ritual_contribute(state: Json, env: TxEnvelope) -> Json:
    require_not_paused(state)
    payload = _as_dict(env.payload)
    sender = env.signer
    ritual_id = to_tag(payload.get("ritual_id"))
    amt = as_amount(payload.get("amount"))

    bal = int(ensure_account(state, sender).get("balance", 0))
    if bal < amt:
        raise CommunityApplyError("insufficient", "InsufficientAse", {"balance": bal, "amount": amt})
    if amt <= 0:
        raise CommunityApplyError("invalid_payload", "InvalidAmount", {"amount": amt})

    events: List[Json] = []
    transfer(state, sender, ledger_account(state), amt, events, insufficient_reason="InsufficientAse")

    rituals = _ensure_root_dict(state, "rituals")
    new_total = int(rituals.get(ritual_id, 0)) + amt
    rituals[ritual_id] = new_total
    events.append(event("CommunityBlessing", ritual_id=ritual_id, new_total=new_total))

    return {"applied": "RITUAL_CONTRIBUTE", "ritual_id": ritual_id, "new_total": new_total, "events": events}


def _apply_mutual_aid_support(state: Json, env: TxEnvelope) -> Json:
    require_not_paused(state)
    payload = _as_dict(env.payload)
    sender = env.signer
    to = require_receiver(payload.get("to") or payload.get("recipient"))
    amt = as_amount(payload.get("amount"))

    bal = int(ensure_account(state, sender).get("balance", 0))
    if bal < amt:
        raise CommunityApplyError("insufficient", "InsufficientAse", {"balance": bal, "amount": amt})

    events: List[Json] = []
    transfer(state, sender, to, amt, events, insufficient_reason="InsufficientAse")
    events.append(event("MutualAidSupport", supporter=sender, recipient=to, amount=amt))

    return {"applied": "MUTUAL_AID_SUPPORT", "amount": amt, "events": events}


def _apply_ritual_offerings_withdraw(state: Json, env: TxEnvelope) -> Json:
    require_role(state, TREASURY_ROLE, env.signer)
    payload = _as_dict(env.payload)
    to = require_receiver(payload.get("to") or payload.get("recipient"))
    amt = as_amount(payload.get("amount"))

    custodian = ledger_account(state)
    held = int(ensure_account(state, custodian).get("balance", 0))
    if held < amt:
        raise CommunityApplyError("insufficient", "InsufficientBalance", {"balance": held, "amount": amt})

    events: List[Json] = []
    transfer(state, custodian, to, amt, events)
    events.append(event("RitualOfferingsWithdrawn", recipient=to, amount=amt))

    return {"applied": "RITUAL_OFFERINGS_WITHDRAW", "amount": amt, "events": events}


COMMUNITY_TX_TYPES: Set[str] = {
    "GATHERING_ORGANIZE",
    "RITUAL_CONTRIBUTE",
    "MUTUAL_AID_SUPPORT",
    "RITUAL_OFFERINGS_WITHDRAW",
}


def apply_community(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _as_str(env.tx_type).strip().upper()
    if t not in COMMUNITY_TX_TYPES:
        return None

    if t == "GATHERING_ORGANIZE":
        return _apply_gathering_organize(state, env)

    if t == "RITUAL_CONTRIBUTE":
        return _apply_ritual_contribute(state, env)

    if t == "MUTUAL_AID_SUPPORT":
        return _apply_mutual_aid_support(state, env)

    if t == "RITUAL_OFFERINGS_WITHDRAW":
        return _apply_ritual_offerings_withdraw(state, env)

    return None


__all__ = ["CommunityApplyError", "COMMUNITY_TX_TYPES", "apply_community", "ledger_account"]
