# src/ase/runtime/apply/prayers.py
from __future__ import annotations

"""Prayer domain apply semantics.

Txs handled here:
- PRAYER_OFFER        {to, amount, intention}
- PRAYER_BATCH_OFFER  {recipients: [...], amounts: [...], intentions: [...]}

A prayer is a labeled transfer that also bumps the sender's prayers_offered
and the recipient's prayers_received counters (u64, saturating).

Batch offering is validate-then-apply: lengths, the recipient cap, every
intention, every amount and the sender's balance against the *sum* of amounts
are all checked before the first transfer. Checking the balance per iteration
would let a batch succeed partially.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ase.ledger.constants import MAX_BATCH_RECIPIENTS, U64_MAX
from ase.ledger.types import as_amount, ensure_account, saturating_add
from ase.runtime.apply.token import event, require_not_paused, require_receiver, transfer
from ase.runtime.envelope import TxEnvelope
from ase.runtime.errors import ApplyError

Json = Dict[str, Any]


@dataclass
class PrayerApplyError(ApplyError):
    code: str
    reason: str
    details: Optional[Json] = None


def _as_dict(x: Any) -> Json:
    return x if isinstance(x, dict) else {}


def _as_list(x: Any) -> List[Any]:
    return x if isinstance(x, list) else []


def _as_str(x: Any) -> str:
    return x if isinstance(x, str) else ""


def _require_intention(v: Any, *, index: Optional[int] = None) -> str:
    s = _as_str(v)
    if not s:
        details: Json = {} if index is None else {"index": index}
        raise PrayerApplyError("invalid_payload", "EmptyIntention", details)
    return s


def _bump(state: Json, account: str, field: str, by: int = 1) -> None:
    acct = ensure_account(state, account)
    acct[field] = saturating_add(int(acct.get(field, 0)), by, U64_MAX)


def _balance(state: Json, account: str) -> int:
    return int(ensure_account(state, account).get("balance", 0))


def _apply_prayer_offer(state: Json, env: TxEnvelope) -> Json:
    require_not_paused(state)
    payload = _as_dict(env.payload)

    sender = env.signer
    to = require_receiver(payload.get("to") or payload.get("recipient"))
    amt = as_amount(payload.get("amount"))

    bal = _balance(state, sender)
    if bal < amt:
        raise PrayerApplyError("insufficient", "InsufficientBalance", {"balance": bal, "amount": amt})
    intention = _require_intention(payload.get("intention"))

    _bump(state, sender, "prayers_offered")
    _bump(state, to, "prayers_received")

    events: List[Json] = []
    transfer(state, sender, to, amt, events)
    events.append(event("PrayerOffered", **{"from": sender, "to": to, "amount": amt, "intention": intention}))

    return {"applied": "PRAYER_OFFER", "amount": amt, "events": events}


def _apply_prayer_batch_offer(state: Json, env: TxEnvelope) -> Json:
    require_not_paused(state)
    payload = _as_dict(env.payload)
    sender = env.signer

    recipients_raw = _as_list(payload.get("recipients"))
    amounts_raw = _as_list(payload.get("amounts"))
    intentions_raw = _as_list(payload.get("intentions"))

    # Pass 1: validate everything.
    n = len(recipients_raw)
    if len(amounts_raw) != n or len(intentions_raw) != n:
        raise PrayerApplyError(
            "invalid_payload",
            "ArrayLengthMismatch",
            {"recipients": n, "amounts": len(amounts_raw), "intentions": len(intentions_raw)},
        )
    if n > MAX_BATCH_RECIPIENTS:
        raise PrayerApplyError("invalid_payload", "TooManyRecipients", {"count": n, "max": MAX_BATCH_RECIPIENTS})

    intentions = [_require_intention(v, index=i) for i, v in enumerate(intentions_raw)]
    recipients = [require_receiver(r) for r in recipients_raw]
    amounts = [as_amount(a, field=f"amounts[{i}]") for i, a in enumerate(amounts_raw)]

    total = sum(amounts)
    bal = _balance(state, sender)
    if bal < total:
        raise PrayerApplyError("insufficient", "InsufficientBalance", {"balance": bal, "amount": total})

    # Pass 2: apply in array order.
    events: List[Json] = []
    for to, amt, intention in zip(recipients, amounts, intentions):
        _bump(state, to, "prayers_received")
        transfer(state, sender, to, amt, events)
        events.append(event("PrayerOffered", **{"from": sender, "to": to, "amount": amt, "intention": intention}))

    _bump(state, sender, "prayers_offered", n)
    events.append(event("BatchPrayersOffered", **{"from": sender, "total_amount": total, "count": n}))

    return {"applied": "PRAYER_BATCH_OFFER", "total_amount": total, "count": n, "events": events}


PRAYER_TX_TYPES: Set[str] = {"PRAYER_OFFER", "PRAYER_BATCH_OFFER"}


def apply_prayers(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _as_str(env.tx_type).strip().upper()
    if t not in PRAYER_TX_TYPES:
        return None

    if t == "PRAYER_OFFER":
        return _apply_prayer_offer(state, env)

    if t == "PRAYER_BATCH_OFFER":
        return _apply_prayer_batch_offer(state, env)

    return None


__all__ = ["PrayerApplyError", "PRAYER_TX_TYPES", "apply_prayers"]
