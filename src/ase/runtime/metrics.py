# src/ase/runtime/metrics.py
from __future__ import annotations

"""In-process ledger metrics.

Three families, all process-local and reset on restart:

  tx_applied{tx_type}   committed operations per tx type
  tx_rejected{reason}   rejected operations per named failure
  ledger gauges         total_supply, ancestral_offerings, custodial balance, paused

Exported as Prometheus text on /v1/metrics when ASE_METRICS_ENABLED is set.
"""

import os
import threading
import time
from typing import Any, Dict, List, Mapping

_lock = threading.Lock()
_applied: Dict[str, int] = {}
_rejected: Dict[str, int] = {}
_gauges: Dict[str, int] = {}
_started_ms = int(time.time() * 1000)

_GAUGE_HELP: Dict[str, str] = {
    "total_supply": "Circulating supply in base units.",
    "ancestral_offerings": "Cumulative amount burned as ancestral offerings.",
    "ledger_balance": "Balance held by the custodial ledger account.",
    "paused": "1 while the ledger is paused.",
}


def metrics_enabled() -> bool:
    v = (os.environ.get("ASE_METRICS_ENABLED") or "").strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def record_applied(tx_type: str) -> None:
    t = str(tx_type or "").strip().upper() or "UNKNOWN"
    with _lock:
        _applied[t] = _applied.get(t, 0) + 1


def record_rejected(reason: str) -> None:
    r = str(reason or "").strip() or "Unknown"
    with _lock:
        _rejected[r] = _rejected.get(r, 0) + 1


def observe_ledger(state: Mapping[str, Any]) -> None:
    """Refresh the ledger gauges from a committed state dict."""
    custodian = str(state.get("ledger_account") or "")
    acct = (state.get("accounts") or {}).get(custodian) or {}
    with _lock:
        _gauges["total_supply"] = int(state.get("total_supply", 0) or 0)
        _gauges["ancestral_offerings"] = int(state.get("ancestral_offerings", 0) or 0)
        _gauges["ledger_balance"] = int(acct.get("balance", 0) or 0) if isinstance(acct, dict) else 0
        _gauges["paused"] = 1 if state.get("paused") else 0


def snapshot() -> Dict[str, Any]:
    with _lock:
        applied = dict(_applied)
        rejected = dict(_rejected)
        gauges = dict(_gauges)
    now = int(time.time() * 1000)
    return {
        "uptime_ms": now - _started_ms,
        "applied": applied,
        "rejected": rejected,
        "applied_total": sum(applied.values()),
        "rejected_total": sum(rejected.values()),
        "gauges": gauges,
    }


def reset() -> None:
    with _lock:
        _applied.clear()
        _rejected.clear()
        _gauges.clear()


def _label(v: str) -> str:
    return str(v).replace("\\", "\\\\").replace('"', '\\"')


def format_prometheus(prefix: str = "ase_") -> str:
    pre = str(prefix or "").strip() or "ase_"
    snap = snapshot()
    lines: List[str] = [
        f"# TYPE {pre}uptime_ms gauge",
        f"{pre}uptime_ms {snap['uptime_ms']}",
        f"# HELP {pre}tx_applied_total Committed ledger operations.",
        f"# TYPE {pre}tx_applied_total counter",
    ]
    for t in sorted(snap["applied"]):
        lines.append(f'{pre}tx_applied_total{{tx_type="{_label(t)}"}} {snap["applied"][t]}')

    lines += [
        f"# HELP {pre}tx_rejected_total Rejected ledger operations by named failure.",
        f"# TYPE {pre}tx_rejected_total counter",
    ]
    for r in sorted(snap["rejected"]):
        lines.append(f'{pre}tx_rejected_total{{reason="{_label(r)}"}} {snap["rejected"][r]}')

    for name in sorted(snap["gauges"]):
        help_text = _GAUGE_HELP.get(name)
        if help_text:
            lines.append(f"# HELP {pre}{name} {help_text}")
        lines.append(f"# TYPE {pre}{name} gauge")
        lines.append(f"{pre}{name} {snap['gauges'][name]}")

    return "\n".join(lines) + "\n"


__all__ = [
    "format_prometheus",
    "metrics_enabled",
    "observe_ledger",
    "record_applied",
    "record_rejected",
    "reset",
    "snapshot",
]
