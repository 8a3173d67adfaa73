"""
FastAPI application factory.

Why:
    The app is built around one `Platform` (store, repository, session,
    administration, tutor) passed in by the caller, so tests run against an
    in-memory platform and production against the configured store. There is
    no module-level app or platform.

Run:
    uvicorn --factory educa.web.main:create_app

Recovery:
    Unexpected errors answer 500 with a pointer to `POST /api/recovery/reset`,
    which wipes all persisted data and restarts from the seeded state.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from educa.bootstrap import Platform, load_environment, reset_all, start
from educa.web.config import ensure_secure_config_on_startup
from educa.web.guards import ok, platform_of, private_no_store
from educa.web.routes.auth import auth_router
from educa.web.routes.learning import learning_router
from educa.web.routes.teaching import teaching_router
from educa.web.routes.users import users_router

logger = logging.getLogger("educa.web")

RECOVERY_PATH = "/api/recovery/reset"


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("web.unhandled_error path=%s", request.url.path)
    return JSONResponse(
        {"error": "internal_error", "recovery": RECOVERY_PATH},
        status_code=500,
        headers=private_no_store(),
    )


def create_app(platform: Optional[Platform] = None) -> FastAPI:
    """Build the API around `platform`, starting one from the environment if omitted."""
    if platform is None:
        load_environment()
        ensure_secure_config_on_startup()
        platform = start()

    app = FastAPI(title="Educa", description="Plataforma educacional com tutor IA", version="0.1.0")
    app.state.platform = platform
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(teaching_router)
    app.include_router(learning_router)

    @app.post(RECOVERY_PATH, tags=["Operations"])
    async def recovery_reset(request: Request):
        """Clear every persisted key and restart from the seeded defaults.

        Open to any caller: it is the way out when the stored data itself
        breaks the session routes.
        """
        request.app.state.platform = reset_all(platform_of(request))
        return ok({"status": "reset"})

    return app


__all__ = ["create_app", "RECOVERY_PATH"]
