"""FastAPI application setup, error mapping and route registration."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from registrar.errors import RegistrarError
from registrar.registry import Registrar, open_registrar
from registrar.server.models import ErrorResponse
from registrar.server.routes import configure_routes, router

_log = logging.getLogger(__name__)

_registrar: Registrar | None = None

_STATUS_BY_CODE: dict[str, int] = {
    "already_registered": status.HTTP_409_CONFLICT,
    "target_already_registered": status.HTTP_409_CONFLICT,
    "not_registered": status.HTTP_404_NOT_FOUND,
    "unauthorized": status.HTTP_403_FORBIDDEN,
    "self_signatory": status.HTTP_400_BAD_REQUEST,
    "cooldown_active": status.HTTP_429_TOO_MANY_REQUESTS,
    "insufficient_approvals": status.HTTP_409_CONFLICT,
}


def get_registrar() -> Registrar:
    """Return the global registry, opening it from the environment on first use."""
    global _registrar
    if _registrar is None:
        base_dir = Path(os.getenv("REGISTRAR_HOME", ".")).resolve()
        _registrar = open_registrar(base_dir)
        configure_routes(_registrar)
    return _registrar


def set_registrar(registrar: Registrar | None) -> None:
    """Replace the global registry."""
    global _registrar
    _registrar = registrar
    configure_routes(registrar)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — open the registry before serving."""
    registrar = get_registrar()
    _log.info("Registrar server starting (db=%s)", registrar.config.db_path)
    yield
    _log.info("Registrar server shutting down")


app = FastAPI(
    title="Registrar",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RegistrarError)
async def registrar_error_handler(request: Request, exc: RegistrarError) -> JSONResponse:
    status_code = _STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    body = ErrorResponse(code=exc.code, message=exc.message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)
