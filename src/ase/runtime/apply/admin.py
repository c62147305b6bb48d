from __future__ import annotations

"""
Admin / access-control domain apply semantics.

Txs handled here:
- ROLE_GRANT           {role, account}   ADMIN_ROLE only
- ROLE_REVOKE          {role, account}   ADMIN_ROLE only
- ROLE_RENOUNCE        {role, account}   account must be the signer
- LEDGER_PAUSE         {}                ADMIN_ROLE only
- LEDGER_UNPAUSE       {}                ADMIN_ROLE only
- COMMUNITY_ROLE_SET   {account, role}   TREASURY_ROLE only

Role grants are an explicit authorization table:

  state["roles"] = {"ADMIN_ROLE": ["alice", ...], "TREASURY_ROLE": [...], ...}

Lists are kept sorted and de-duplicated so snapshots are deterministic.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ase.ledger.constants import ADMIN_ROLE, ALL_ROLES, TREASURY_ROLE
from ase.ledger.tags import to_tag
from ase.ledger.types import as_principal, ensure_account
from ase.runtime.apply.token import event
from ase.runtime.envelope import TxEnvelope
from ase.runtime.errors import ApplyError

Json = Dict[str, Any]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@dataclass
class AdminApplyError(ApplyError):
    code: str
    reason: str
    details: Optional[Json] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _as_dict(x: Any) -> Json:
    return x if isinstance(x, dict) else {}


def _as_str(x: Any) -> str:
    return x.strip() if isinstance(x, str) else ""


def _as_role(x: Any) -> str:
    role = _as_str(x).upper()
    if role not in ALL_ROLES:
        raise AdminApplyError("invalid_payload", "UnknownRole", {"role": x})
    return role


def _ensure_roles(state: Json) -> Json:
    roles = state.get("roles")
    if not isinstance(roles, dict):
        roles = {}
        state["roles"] = roles
    return roles


def role_members(state: Json, role: str) -> List[str]:
    cur = _as_dict(state.get("roles")).get(role)
    return list(cur) if isinstance(cur, list) else []


def has_role(state: Json, role: str, account: str) -> bool:
    return account in role_members(state, role)


def require_role(state: Json, role: str, account: str) -> None:
    if not has_role(state, role, account):
        raise AdminApplyError(
            "forbidden",
            "AccessControlUnauthorizedAccount",
            {"account": account, "role": role},
        )


def grant_role(state: Json, role: str, account: str, sender: str, events: List[Json]) -> bool:
    """Grant `role` to `account`. Returns False (and emits nothing) if already granted."""
    roles = _ensure_roles(state)
    members = role_members(state, role)
    if account in members:
        return False
    members.append(account)
    roles[role] = sorted(set(members))
    events.append(event("RoleGranted", role=role, account=account, sender=sender))
    return True


def revoke_role(state: Json, role: str, account: str, sender: str, events: List[Json]) -> bool:
    roles = _ensure_roles(state)
    members = role_members(state, role)
    if account not in members:
        return False
    roles[role] = sorted(m for m in members if m != account)
    events.append(event("RoleRevoked", role=role, account=account, sender=sender))
    return True


# ---------------------------------------------------------------------------
# Appliers
# ---------------------------------------------------------------------------


def _apply_role_grant(state: Json, env: TxEnvelope) -> Json:
    require_role(state, ADMIN_ROLE, env.signer)
    payload = _as_dict(env.payload)
    role = _as_role(payload.get("role"))
    account = as_principal(payload.get("account"))

    events: List[Json] = []
    changed = grant_role(state, role, account, env.signer, events)
    return {"applied": "ROLE_GRANT", "role": role, "account": account, "changed": changed, "events": events}


def _apply_role_revoke(state: Json, env: TxEnvelope) -> Json:
    require_role(state, ADMIN_ROLE, env.signer)
    payload = _as_dict(env.payload)
    role = _as_role(payload.get("role"))
    account = as_principal(payload.get("account"))

    events: List[Json] = []
    changed = revoke_role(state, role, account, env.signer, events)
    return {"applied": "ROLE_REVOKE", "role": role, "account": account, "changed": changed, "events": events}


def _apply_role_renounce(state: Json, env: TxEnvelope) -> Json:
    payload = _as_dict(env.payload)
    role = _as_role(payload.get("role"))
    account = as_principal(payload.get("account") or env.signer)
    if account != env.signer:
        raise AdminApplyError("forbidden", "AccessControlBadConfirmation", {"account": account, "signer": env.signer})

    events: List[Json] = []
    changed = revoke_role(state, role, account, env.signer, events)
    return {"applied": "ROLE_RENOUNCE", "role": role, "account": account, "changed": changed, "events": events}


def _apply_ledger_pause(state: Json, env: TxEnvelope) -> Json:
    require_role(state, ADMIN_ROLE, env.signer)
    if bool(state.get("paused", False)):
        raise AdminApplyError("paused", "EnforcedPause", {})
    state["paused"] = True
    return {"applied": "LEDGER_PAUSE", "events": [event("Paused", account=env.signer)]}


def _apply_ledger_unpause(state: Json, env: TxEnvelope) -> Json:
    require_role(state, ADMIN_ROLE, env.signer)
    if not bool(state.get("paused", False)):
        raise AdminApplyError("paused", "ExpectedPause", {})
    state["paused"] = False
    return {"applied": "LEDGER_UNPAUSE", "events": [event("Unpaused", account=env.signer)]}


def _apply_community_role_set(state: Json, env: TxEnvelope) -> Json:
    require_role(state, TREASURY_ROLE, env.signer)
    payload = _as_dict(env.payload)
    account = as_principal(payload.get("account"))
    tag = to_tag(payload.get("role"))

    # Unconditional overwrite; the zero tag clears the role.
    ensure_account(state, account)["community_role"] = tag
    return {"applied": "COMMUNITY_ROLE_SET", "account": account, "role": tag, "events": []}


ADMIN_TX_TYPES: Set[str] = {
    "ROLE_GRANT",
    "ROLE_REVOKE",
    "ROLE_RENOUNCE",
    "LEDGER_PAUSE",
    "LEDGER_UNPAUSE",
    "COMMUNITY_ROLE_SET",
}


def apply_admin(state: Json, env: TxEnvelope) -> Optional[Json]:
    t = _as_str(env.tx_type).upper()
    if t not in ADMIN_TX_TYPES:
        return None

    if t == "ROLE_GRANT":
        return _apply_role_grant(state, env)
    if t == "ROLE_REVOKE":
        return _apply_role_revoke(state, env)
    if t == "ROLE_RENOUNCE":
        return _apply_role_renounce(state, env)
    if t == "LEDGER_PAUSE":
        return _apply_ledger_pause(state, env)
    if t == "LEDGER_UNPAUSE":
        return _apply_ledger_unpause(state, env)
    if t == "COMMUNITY_ROLE_SET":
        return _apply_community_role_set(state, env)

    return None


__all__ = [
    "AdminApplyError",
    "ADMIN_TX_TYPES",
    "apply_admin",
    "grant_role",
    "has_role",
    "require_role",
    "revoke_role",
    "role_members",
]
