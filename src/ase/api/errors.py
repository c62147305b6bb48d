from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ase.runtime.errors import ApplyError

# Ledger failure category -> HTTP status
_APPLY_STATUS: Dict[str, int] = {
    "invalid_payload": 400,
    "invalid_tx": 400,
    "tx_unimplemented": 400,
    "insufficient": 400,
    "forbidden": 403,
    "conflict": 409,
    "paused": 409,
    "reentrancy": 409,
}


@dataclass
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_apply_error(e: ApplyError) -> "ApiError":
        status = _APPLY_STATUS.get(str(e.code), 500)
        details = e.details if isinstance(e.details, dict) else {"details": e.details}
        return ApiError(status, str(e.reason), str(e.code), dict(details) if e.details is not None else {})

    def to_json(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "error": {"code": self.code, "message": self.message, "details": self.details},
        }
