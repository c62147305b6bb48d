from __future__ import annotations

import logging
import os
from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ase.api.errors import ApiError
from ase.api.routes_public import public_router
from ase.api.structured_logging import RequestLogMiddleware, configure_structured_logging
from ase.runtime.executor_boot import build_executor as _build_executor

log = logging.getLogger("ase.api")


def build_executor():
    """Build a LedgerExecutor for API runtime.

    This wrapper exists so tests can monkeypatch `ase.api.app.build_executor`
    without reaching into runtime modules.
    """
    return _build_executor()


def _parse_cors_origins() -> List[str]:
    """Parse CORS origins with production-safe defaults.

    Policy:
      - If ASE_CORS_ORIGINS is unset/empty -> CORS disabled (fail-closed)
      - Wildcard "*" is rejected in ASE_MODE=prod
      - In non-prod modes, "*" is allowed for convenience
    """
    raw = os.environ.get("ASE_CORS_ORIGINS", "").strip()
    mode = os.environ.get("ASE_MODE", "prod").strip().lower()

    if not raw:
        return []

    origins = [o.strip() for o in raw.split(",") if o.strip()]

    if "*" in origins:
        if mode == "prod":
            raise RuntimeError(
                "Unsafe CORS configuration: wildcard '*' not allowed in production. "
                "Set explicit origins in ASE_CORS_ORIGINS."
            )
        return ["*"]

    return origins


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): build the ledger executor and attach it to app.state
      - False: keep lightweight for unit tests / import-time validation
    """
    mode = os.environ.get("ASE_MODE", "prod").strip().lower()
    configure_structured_logging()

    # Disable docs in production.
    if mode == "prod":
        app = FastAPI(title="Àṣẹ Community Ledger API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="Àṣẹ Community Ledger API")

    if boot_runtime:
        app.state.executor = build_executor()
    else:
        app.state.executor = None

    @app.exception_handler(ApiError)
    async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error("api error %s: %s", exc.code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_json())

    # --- Middleware ---
    app.add_middleware(RequestLogMiddleware)

    cors_origins = _parse_cors_origins()
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=cors_origins != ["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        )

    # --- Routers ---
    app.include_router(public_router)

    return app
