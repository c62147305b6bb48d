from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from ase.api.errors import ApiError
from ase.api.routes_public_parts.common import _executor
from ase.api.schemas import TxReceipt, TxSubmitRequest
from ase.runtime.envelope import TxEnvelope
from ase.runtime.errors import ApplyError

router = APIRouter()

Json = Dict[str, Any]


@router.post("/tx/submit", response_model=TxReceipt)
def tx_submit(body: TxSubmitRequest, request: Request) -> Json:
    """Apply one ledger operation.

    The signer is trusted as given; authenticating principals is the
    deployment's job (edge proxy / wallet gateway).

    Returns the receipt:
      { ok, seq, tx_type, applied, events, ...operation fields }
    """
    ex = _executor(request)
    env = TxEnvelope(tx_type=body.tx_type.strip().upper(), signer=body.signer.strip(), payload=dict(body.payload))
    try:
        return ex.submit(env)
    except ApplyError as e:
        raise ApiError.from_apply_error(e) from e
