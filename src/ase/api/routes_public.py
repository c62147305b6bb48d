# src/ase/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from ase.api.routes_public_parts.health import router as health_router
from ase.api.routes_public_parts.ledger import router as ledger_router
from ase.api.routes_public_parts.metrics import router as metrics_router
from ase.api.routes_public_parts.tx import router as tx_router

public_router = APIRouter()

# Versioned API surface
public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(ledger_router, prefix="/v1", tags=["ledger"])
public_router.include_router(tx_router, prefix="/v1", tags=["tx"])

# Ops
public_router.include_router(metrics_router, prefix="/v1", tags=["metrics"])
