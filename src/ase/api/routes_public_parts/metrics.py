from __future__ import annotations

from fastapi import APIRouter, Request, Response

from ase.runtime.metrics import format_prometheus, metrics_enabled, observe_ledger

router = APIRouter()


@router.get("/metrics")
def metrics(request: Request) -> Response:
    """Ledger counters and gauges as Prometheus text (404 unless ASE_METRICS_ENABLED=1)."""
    if not metrics_enabled():
        return Response(status_code=404, content="not_found\n", media_type="text/plain")

    # Refresh gauges from the attached ledger at scrape time.
    ex = getattr(request.app.state, "executor", None)
    if ex is not None:
        observe_ledger(ex.snapshot())
    return Response(content=format_prometheus(), media_type="text/plain; version=0.0.4")
