from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request

from ase.api.errors import ApiError
from ase.api.routes_public_parts.common import _executor, _view
from ase.api.schemas import CommunityStats, UserProfile
from ase.ledger.constants import ALL_ROLES
from ase.ledger.tags import to_tag
from ase.runtime.errors import ApplyError

router = APIRouter()

Json = Dict[str, Any]


def _tag_or_400(raw: str) -> str:
    try:
        return to_tag(raw)
    except ApplyError as e:
        raise ApiError.from_apply_error(e) from e


@router.get("/token")
def token_info(request: Request) -> Json:
    return {"ok": True, **_view(request).token_info()}


@router.get("/stats", response_model=CommunityStats)
def community_stats(request: Request) -> Json:
    return _view(request).community_stats()


@router.get("/accounts/{account}", response_model=UserProfile)
def user_profile(account: str, request: Request) -> Json:
    return _view(request).user_profile(account)


@router.get("/accounts/{account}/level")
def contribution_level(account: str, request: Request) -> Json:
    v = _view(request)
    return {
        "ok": True,
        "account": account,
        "contribution_points": v.contribution_points(account),
        "level": v.contribution_level(account),
    }


@router.get("/accounts/{account}/allowances/{spender}")
def allowance(account: str, spender: str, request: Request) -> Json:
    return {"ok": True, "owner": account, "spender": spender, "allowance": _view(request).allowance(account, spender)}


@router.get("/roles/{role}")
def role_members(role: str, request: Request) -> Json:
    r = role.strip().upper()
    if r not in ALL_ROLES:
        raise ApiError.not_found("UnknownRole", "unknown role", {"role": role})
    return {"ok": True, "role": r, "members": _view(request).role_members(r)}


@router.get("/rituals/{ritual_id}")
def ritual_offerings(ritual_id: str, request: Request) -> Json:
    tag = _tag_or_400(ritual_id)
    return {"ok": True, "ritual_id": tag, "total": _view(request).ritual_offerings(tag)}


@router.get("/gatherings/{gathering_id}")
def gathering(gathering_id: str, request: Request) -> Json:
    tag = _tag_or_400(gathering_id)
    organizer = _view(request).gathering_organizer(tag)
    if organizer is None:
        raise ApiError.not_found("GatheringNotFound", "gathering not registered", {"gathering_id": tag})
    return {"ok": True, "gathering_id": tag, "organizer": organizer}


@router.get("/events")
def events(
    request: Request,
    since: int = Query(default=0, ge=0),
    limit: Optional[int] = Query(default=100, ge=1, le=1000),
) -> Json:
    evs = _executor(request).events(since=since, limit=limit)
    next_since = evs[-1]["seq"] + 1 if evs else since
    return {"ok": True, "events": evs, "next_since": next_since}
