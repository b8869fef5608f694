"""FastAPI application exposing the person directory over HTTP."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from persondir.core.config import get_settings
from persondir.core.logging import configure_logging
from persondir.domain.persons import MalformedInputError, PersonError, PersonNotFoundError
from persondir.repositories import build_repository
from persondir.routers import persons as persons_router
from persondir.services.person_service import PersonService

logger = logging.getLogger(__name__)


def _error_response(exc: PersonError, status_code: int) -> JSONResponse:
    return JSONResponse({"ok": False, "error": type(exc).__name__, "message": exc.message}, status_code=status_code)


async def _not_found(request: Request, exc: PersonNotFoundError) -> JSONResponse:
    return _error_response(exc, 404)


async def _malformed(request: Request, exc: MalformedInputError) -> JSONResponse:
    return _error_response(exc, 400)


async def _person_error(request: Request, exc: PersonError) -> JSONResponse:
    logger.error("request %s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc, 500)


def create_app(service: PersonService | None = None) -> FastAPI:
    """Factory compatible with uvicorn (`--factory`) and the test client."""
    settings = get_settings()
    if service is None:
        configure_logging(settings.log_level)
        service = PersonService(build_repository(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        service.repository.close()

    app = FastAPI(title="Person Directory API", lifespan=lifespan)
    app.state.person_service = service

    app.add_exception_handler(PersonNotFoundError, _not_found)
    app.add_exception_handler(MalformedInputError, _malformed)
    app.add_exception_handler(PersonError, _person_error)

    @app.get("/healthz")
    def healthz():
        return {"ok": True, "backend": service.repository.name}

    app.include_router(persons_router.router)
    logger.info("person directory ready (%s backend, env=%s)", service.repository.name, settings.app_env)
    return app


def __getattr__(name: str):
    # built on first access so importing create_app has no side effects
    if name == "app":
        global app
        app = create_app()
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
