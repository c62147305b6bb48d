from __future__ import annotations

from dataclasses import dataclass, field
import copy
from typing import Any, Dict, List, Optional

from ase.ledger.constants import LEDGER_ACCOUNT_ID, TOKEN_DECIMALS, TOKEN_NAME, TOKEN_SYMBOL
from ase.ledger.levels import contribution_level
from ase.ledger.tags import ZERO_TAG, to_tag
from ase.ledger.types import empty_profile


Json = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class LedgerView:
    """
    Immutable read-only ledger view used by the facade and the HTTP layer.

    Every getter is a pure projection; unknown principals read as zero-valued
    profiles without being created.
    """

    ledger_id: str = ""
    token: Dict[str, Any] = field(default_factory=dict)
    ledger_account: str = LEDGER_ACCOUNT_ID
    total_supply: int = 0
    ancestral_offerings: int = 0
    paused: bool = False
    accounts: Dict[str, Any] = field(default_factory=dict)
    allowances: Dict[str, Any] = field(default_factory=dict)
    roles: Dict[str, Any] = field(default_factory=dict)
    rituals: Dict[str, Any] = field(default_factory=dict)
    gatherings: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_ledger(cls, state: Dict[str, Any]) -> "LedgerView":
        def _d(key: str) -> Dict[str, Any]:
            v = state.get(key)
            return copy.deepcopy(v) if isinstance(v, dict) else {}

        return cls(
            ledger_id=str(state.get("ledger_id") or ""),
            token=_d("token"),
            ledger_account=str(state.get("ledger_account") or LEDGER_ACCOUNT_ID),
            total_supply=int(state.get("total_supply", 0) or 0),
            ancestral_offerings=int(state.get("ancestral_offerings", 0) or 0),
            paused=bool(state.get("paused", False)),
            accounts=_d("accounts"),
            allowances=_d("allowances"),
            roles=_d("roles"),
            rituals=_d("rituals"),
            gatherings=_d("gatherings"),
        )

    # ---- accounts ----

    def get_account(self, account_id: str) -> Dict[str, Any]:
        acct = self.accounts.get(account_id)
        out = empty_profile()
        if isinstance(acct, dict):
            out.update(acct)
        return out

    def balance_of(self, account_id: str) -> int:
        return int(self.get_account(account_id).get("balance", 0))

    def contribution_points(self, account_id: str) -> int:
        return int(self.get_account(account_id).get("contribution_points", 0))

    def contribution_level(self, account_id: str) -> str:
        return contribution_level(self.contribution_points(account_id))

    def user_profile(self, account_id: str) -> Json:
        acct = self.get_account(account_id)
        points = int(acct.get("contribution_points", 0))
        return {
            "account": account_id,
            "balance": int(acct.get("balance", 0)),
            "contribution_points": points,
            "level": contribution_level(points),
            "community_role": str(acct.get("community_role") or ZERO_TAG),
            "prayers_offered": int(acct.get("prayers_offered", 0)),
            "prayers_received": int(acct.get("prayers_received", 0)),
        }

    def allowance(self, owner: str, spender: str) -> int:
        per_owner = self.allowances.get(owner)
        if not isinstance(per_owner, dict):
            return 0
        return int(per_owner.get(spender, 0) or 0)

    # ---- roles ----

    def role_members(self, role: str) -> List[str]:
        cur = self.roles.get(role)
        return list(cur) if isinstance(cur, list) else []

    def has_role(self, role: str, account_id: str) -> bool:
        return account_id in self.role_members(role)

    # ---- registries ----

    def ritual_offerings(self, ritual_id: Any) -> int:
        return int(self.rituals.get(to_tag(ritual_id), 0) or 0)

    def gathering_organizer(self, gathering_id: Any) -> Optional[str]:
        v = self.gatherings.get(to_tag(gathering_id))
        return str(v) if v else None

    # ---- globals ----

    def token_info(self) -> Json:
        return {
            "name": str(self.token.get("name") or TOKEN_NAME),
            "symbol": str(self.token.get("symbol") or TOKEN_SYMBOL),
            "decimals": int(self.token.get("decimals", TOKEN_DECIMALS)),
            "total_supply": int(self.total_supply),
        }

    def community_stats(self) -> Json:
        return {
            "total_supply": int(self.total_supply),
            "ancestral_offerings": int(self.ancestral_offerings),
            "ledger_balance": self.balance_of(self.ledger_account),
        }
