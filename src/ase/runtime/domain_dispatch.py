# src/ase/runtime/domain_dispatch.py

from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet, Optional

from ase.ledger.constants import LEDGER_ACCOUNT_ID
from ase.runtime.errors import ApplyError
from ase.runtime.envelope import TxEnvelope
from ase.runtime.state_invariants import ensure_state

# Domain appliers (each returns Optional[Json]; returning None means "not claimed")
from ase.runtime.apply.admin import ADMIN_TX_TYPES, apply_admin
from ase.runtime.apply.community import COMMUNITY_TX_TYPES, apply_community
from ase.runtime.apply.prayers import PRAYER_TX_TYPES, apply_prayers
from ase.runtime.apply.recognition import RECOGNITION_TX_TYPES, apply_recognition
from ase.runtime.apply.token import TOKEN_TX_TYPES, apply_token

Json = Dict[str, Any]
ApplyFn = Callable[[Json, Any], Optional[Json]]


_APPLIERS: tuple[ApplyFn, ...] = (
    apply_token,
    apply_prayers,
    apply_recognition,
    apply_community,
    apply_admin,
)

SUPPORTED_TX_TYPES: FrozenSet[str] = frozenset(
    TOKEN_TX_TYPES | PRAYER_TX_TYPES | RECOGNITION_TX_TYPES | COMMUNITY_TX_TYPES | ADMIN_TX_TYPES
)


def _get(env: Any, key: str, default: Any = None) -> Any:
    """Read a field from either a TxEnvelope-like object or a dict."""
    if isinstance(env, dict):
        return env.get(key, default)
    return getattr(env, key, default)


def _tx_type(env: Any) -> str:
    return str(_get(env, "tx_type", "") or "").strip().upper()


def _ledger_account(state: Json) -> str:
    return str(state.get("ledger_account") or "").strip() or LEDGER_ACCOUNT_ID


def apply_tx(state: Json, env: Any) -> Json:
    """Dispatch a TxEnvelope to the first domain applier that claims it.

    Mutates `state` in place. Callers that need fail-atomic behavior use
    ase.runtime.domain_apply.apply_tx_atomic instead.
    """

    ensure_state(state)

    # Tests and the HTTP layer pass raw dict envelopes. Normalize to TxEnvelope
    # so domain appliers can rely on attribute access.
    env_norm: Any = env
    if isinstance(env, dict):
        env_norm = TxEnvelope.from_json(env)

    t = _tx_type(env_norm)
    if not t:
        raise ApplyError("invalid_tx", "missing_tx_type", {"tx_type": t})

    signer = str(_get(env_norm, "signer", "") or "").strip()
    if not signer:
        raise ApplyError("invalid_tx", "missing_signer", {"tx_type": t})
    # The custodial account only moves value through treasury operations; it never signs.
    if signer == _ledger_account(state):
        raise ApplyError("forbidden", "AccessControlUnauthorizedAccount", {"tx_type": t, "account": signer})
    if signer != env_norm.signer:
        env_norm = TxEnvelope(tx_type=env_norm.tx_type, signer=signer, payload=env_norm.payload)

    for fn in _APPLIERS:
        try:
            out = fn(state, env_norm)
        except ApplyError:
            raise
        except Exception as e:
            code = getattr(e, "code", None)
            reason = getattr(e, "reason", None)
            details = getattr(e, "details", None)

            if code is not None or reason is not None:
                raise ApplyError(
                    str(code or "domain_error"),
                    str(reason or type(e).__name__),
                    details if details is not None else {"tx_type": t, "domain": fn.__name__},
                ) from e

            raise ApplyError(
                "domain_error",
                type(e).__name__,
                {"tx_type": t, "domain": fn.__name__, "error": str(e)},
            ) from e

        if out is not None:
            out.setdefault("events", [])
            return out

    raise ApplyError("tx_unimplemented", "tx_type_not_implemented", {"tx_type": t})


__all__ = ["SUPPORTED_TX_TYPES", "apply_tx"]
