from __future__ import annotations

from fastapi import Request

from ase.api.errors import ApiError
from ase.ledger.state import LedgerView


def _executor(request: Request):
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        raise ApiError.internal("not_ready", "executor not attached to app.state", {})
    return ex


def _view(request: Request) -> LedgerView:
    ex = _executor(request)
    if hasattr(ex, "view"):
        return ex.view()
    return LedgerView.from_ledger(ex.snapshot())
