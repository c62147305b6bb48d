from __future__ import annotations

"""CommunityLedger: the ledger's public Python surface.

One method per ledger operation, in the argument order callers expect
(principal first). Mutating methods build a TxEnvelope, submit it through the
executor and return the receipt; they raise ApplyError on any guard failure.
Read-only methods project the current state without mutating it.
"""

from typing import Any, Dict, List, Optional, Sequence

from ase.ledger.state import LedgerView
from ase.runtime.envelope import TxEnvelope
from ase.runtime.executor import LedgerExecutor
from ase.runtime.genesis import GenesisConfig

Json = Dict[str, Any]


class CommunityLedger:
    def __init__(self, executor: Optional[LedgerExecutor] = None, *, genesis: Optional[GenesisConfig] = None) -> None:
        self.executor = executor or LedgerExecutor(genesis=genesis)

    def _submit(self, tx_type: str, signer: str, **payload: Any) -> Json:
        return self.executor.submit(TxEnvelope(tx_type=tx_type, signer=signer, payload=payload))

    @property
    def view(self) -> LedgerView:
        return self.executor.view()

    # ---- token ----

    def transfer(self, sender: str, to: str, amount: int) -> Json:
        return self._submit("TRANSFER", sender, to=to, amount=amount)

    def approve(self, owner: str, spender: str, amount: int) -> Json:
        return self._submit("APPROVE", owner, spender=spender, amount=amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> Json:
        return self._submit("TRANSFER_FROM", spender, owner=owner, to=to, amount=amount)

    # ---- community operations ----

    def offer_prayer(self, sender: str, recipient: str, amount: int, intention: str) -> Json:
        return self._submit("PRAYER_OFFER", sender, to=recipient, amount=amount, intention=intention)

    def recognize_spiritual_labor(self, caller: str, contributor: str, work_type: Any, amount: int) -> Json:
        return self._submit(
            "SPIRITUAL_LABOR_RECOGNIZE",
            caller,
            contributor=contributor,
            work_type=work_type,
            amount=amount,
        )

    def burn_for_ancestors(self, sender: str, amount: int, purpose: Any) -> Json:
        return self._submit("ANCESTORS_BURN", sender, amount=amount, purpose=purpose)

    def batch_prayer_offering(
        self,
        sender: str,
        recipients: Sequence[str],
        amounts: Sequence[int],
        intentions: Sequence[str],
    ) -> Json:
        return self._submit(
            "PRAYER_BATCH_OFFER",
            sender,
            recipients=list(recipients),
            amounts=list(amounts),
            intentions=list(intentions),
        )

    def organize_gathering(self, organizer: str, gathering_id: Any, location: str) -> Json:
        return self._submit("GATHERING_ORGANIZE", organizer, gathering_id=gathering_id, location=location)

    def contribute_to_ritual(self, sender: str, ritual_id: Any, amount: int) -> Json:
        return self._submit("RITUAL_CONTRIBUTE", sender, ritual_id=ritual_id, amount=amount)

    def mutual_aid_support(self, sender: str, recipient: str, amount: int) -> Json:
        return self._submit("MUTUAL_AID_SUPPORT", sender, to=recipient, amount=amount)

    # ---- admin ----

    def set_community_role(self, caller: str, account: str, role: Any) -> Json:
        return self._submit("COMMUNITY_ROLE_SET", caller, account=account, role=role)

    def pause(self, caller: str) -> Json:
        return self._submit("LEDGER_PAUSE", caller)

    def unpause(self, caller: str) -> Json:
        return self._submit("LEDGER_UNPAUSE", caller)

    def withdraw_ritual_offerings(self, caller: str, amount: int, recipient: str) -> Json:
        return self._submit("RITUAL_OFFERINGS_WITHDRAW", caller, amount=amount, to=recipient)

    def grant_role(self, caller: str, role: str, account: str) -> Json:
        return self._submit("ROLE_GRANT", caller, role=role, account=account)

    def revoke_role(self, caller: str, role: str, account: str) -> Json:
        return self._submit("ROLE_REVOKE", caller, role=role, account=account)

    def renounce_role(self, caller: str, role: str) -> Json:
        return self._submit("ROLE_RENOUNCE", caller, role=role, account=caller)

    # ---- read-only ----

    def get_user_profile(self, account: str) -> Json:
        return self.view.user_profile(account)

    def get_contribution_level(self, account: str) -> str:
        return self.view.contribution_level(account)

    def get_community_stats(self) -> Json:
        return self.view.community_stats()

    def balance_of(self, account: str) -> int:
        return self.view.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self.view.allowance(owner, spender)

    def total_supply(self) -> int:
        return self.view.total_supply

    def has_role(self, role: str, account: str) -> bool:
        return self.view.has_role(role, account)

    def token_info(self) -> Json:
        return self.view.token_info()

    def ritual_offerings(self, ritual_id: Any) -> int:
        return self.view.ritual_offerings(ritual_id)

    def gathering_organizer(self, gathering_id: Any) -> Optional[str]:
        return self.view.gathering_organizer(gathering_id)

    def events(self, since: int = 0, limit: Optional[int] = None) -> List[Json]:
        return self.executor.events(since=since, limit=limit)


__all__ = ["CommunityLedger"]
