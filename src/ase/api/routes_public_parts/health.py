from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health(request: Request) -> Dict[str, Any]:
    """Liveness plus the two facts operators check first: which ledger, and is it paused."""
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        return {"ok": True, "ready": False, "ledger_id": "", "paused": False}

    v = ex.view()
    return {"ok": True, "ready": True, "ledger_id": v.ledger_id, "paused": bool(v.paused)}
