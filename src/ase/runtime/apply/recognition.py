# src/ase/runtime/apply/recognition.py
from __future__ import annotations

"""Recognition and ancestral-offering apply semantics.

Txs handled here:
- SPIRITUAL_LABOR_RECOGNIZE  {contributor, work_type, amount}   TREASURY_ROLE only
- ANCESTORS_BURN             {amount, purpose}

Recognition mints `amount` to the contributor and credits the same number of
contribution points (u128, saturating). Points are the only input to the
community tier ladder and to gathering eligibility.

An ancestral offering burns from the sender and grows the global
`ancestral_offerings` accumulator by the burned amount.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ase.ledger.constants import TREASURY_ROLE, U128_MAX
from ase.ledger.tags import ZERO_TAG, to_tag
from ase.ledger.types import as_amount, as_principal, ensure_account, saturating_add
from ase.runtime.apply.admin import require_role
from ase.runtime.apply.token import burn, event, mint, require_not_paused
from ase.runtime.envelope import TxEnvelope
from ase.runtime.errors import ApplyError

Json = Dict[str, Any]


@dataclass
class RecognitionApplyError(ApplyError):
    code: str
    reason: str
    details: Optional[Json] = None


def _as_dict(x: Any) -> Json:
    return x if isinstance(x, dict) else {}


def _as_str(x: Any) -> str:
    return x if isinstance(x, str) else ""


def _apply_spiritual_labor_recognize(state: Json, env: TxEnvelope) -> Json:
    require_role(state, TREASURY_ROLE, env.signer)
    require_not_paused(state)

    payload = _as_dict(env.payload)
    contributor = as_principal(payload.get("contributor"), field="contributor")
    work_type = to_tag(payload.get("work_type"))
    if work_type == ZERO_TAG:
        raise RecognitionApplyError("invalid_payload", "EmptyWorkType", {"contributor": contributor})
    amt = as_amount(payload.get("amount"))

    acct = ensure_account(state, contributor)
    acct["contribution_points"] = saturating_add(int(acct.get("contribution_points", 0)), amt, U128_MAX)

    events: List[Json] = []
    mint(state, contributor, amt, events)
    events.append(event("SpiritualLabor", contributor=contributor, work_type=work_type, amount=amt))

    return {"applied": "SPIRITUAL_LABOR_RECOGNIZE", "amount": amt, "events": events}


def _apply_ancestors_burn(state: Json, env: TxEnvelope) -> Json:
    require_not_paused(state)

    payload = _as_dict(env.payload)
    sender = env.signer
    amt = as_amount(payload.get("amount"))

    bal = int(ensure_account(state, sender).get("balance", 0))
    if bal < amt:
        raise RecognitionApplyError("insufficient", "InsufficientAse", {"balance": bal, "amount": amt})

    purpose = to_tag(payload.get("purpose"))
    if purpose == ZERO_TAG:
        raise RecognitionApplyError("invalid_payload", "EmptyPurpose", {})

    events: List[Json] = []
    burn(state, sender, amt, events, insufficient_reason="InsufficientAse")
    state["ancestral_offerings"] = int(state.get("ancestral_offerings", 0)) + amt
    events.append(event("AncestralOffering", offerer=sender, amount=amt, purpose=purpose))

    return {"applied": "ANCESTORS_BURN", "amount": amt, "events": events}


RECOGNITION_TX_TYPES: Set[str] = {"SPIRITUAL_LABOR_RECOGNIZE", "ANCESTORS_BURN"}


def apply_recognition(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _as_str(env.tx_type).strip().upper()
    if t not in RECOGNITION_TX_TYPES:
        return None

    if t == "SPIRITUAL_LABOR_RECOGNIZE":
        return _apply_spiritual_labor_recognize(state, env)

    if t == "ANCESTORS_BURN":
        return _apply_ancestors_burn(state, env)

    return None


__all__ = ["RecognitionApplyError", "RECOGNITION_TX_TYPES", "apply_recognition"]
