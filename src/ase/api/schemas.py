from __future__ import annotations

"""Pydantic request/response schemas for the public API.

These exist only for HTTP input validation and UX stability; the ledger's
own payload validation happens at apply time.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class TxSubmitRequest(BaseModel):
    tx_type: str = Field(..., min_length=1, description="Tx type, e.g. PRAYER_OFFER")
    signer: str = Field(..., min_length=1, description="Calling principal")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Operation arguments")

    model_config = {"extra": "forbid"}


class TxReceipt(BaseModel):
    ok: bool = True
    seq: int
    tx_type: str
    applied: str
    events: List[Dict[str, Any]] = Field(default_factory=list)

    # Per-operation receipt fields (amount, new_total, ...) pass through
    model_config = {"extra": "allow"}


class UserProfile(BaseModel):
    account: str
    balance: int
    contribution_points: int
    level: str
    community_role: str
    prayers_offered: int
    prayers_received: int


class CommunityStats(BaseModel):
    total_supply: int
    ancestral_offerings: int
    ledger_balance: int
