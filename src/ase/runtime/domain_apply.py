# src/ase/runtime/domain_apply.py
# ---------------------------------------------------------------------------
# Public, stable import path for applying tx envelopes.
# ---------------------------------------------------------------------------

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Optional

from ase.runtime.domain_dispatch import apply_tx
from ase.runtime.envelope import TxEnvelope
from ase.runtime.errors import ApplyError
from ase.runtime.state_invariants import InvariantViolation

Json = Dict[str, Any]


def apply_tx_atomic(
    state: Json,
    env: Any,
    *,
    post_check: Optional[Callable[[Json], None]] = None,
) -> Json:
    """Apply a tx with fail-atomic semantics.

    On success:
      - state is updated as if apply_tx() ran directly.

    On ApplyError (or a failed post_check):
      - state remains unchanged.

    We must never allow partial state mutation when a tx is rejected halfway
    through, e.g. a batch whose third transfer fails.
    """

    env_norm: Any = env
    if isinstance(env, dict):
        env_norm = TxEnvelope.from_json(env)

    # Apply on a deep copy to guarantee atomicity.
    snapshot = copy.deepcopy(state)

    meta = apply_tx(snapshot, env_norm)

    if post_check is not None:
        try:
            post_check(snapshot)
        except InvariantViolation as e:
            raise ApplyError("invariant_violation", "StateInvariantBroken", {"error": str(e)}) from e

    # Commit by replacing contents in-place so callers holding references
    # to `state` see the updated view.
    state.clear()
    state.update(snapshot)
    return meta


__all__ = ["ApplyError", "apply_tx", "apply_tx_atomic", "Json"]
