"""ASGI application factory for the VentureScope API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from venturescope.api.v1.router import get_api_router
from venturescope.core.config import get_config
from venturescope.core.exceptions import VentureScopeException
from venturescope.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, **details) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **details})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request data"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in {"body", "query", "path"})
    message = first.get("msg", "Invalid value")
    return f"Invalid request data: {location}: {message}" if location else f"Invalid request data: {message}"


def install_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": ...}`` with the matching status code."""

    @app.exception_handler(VentureScopeException)
    async def handle_domain_error(request: Request, exc: VentureScopeException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "api.request.failed",
                extra={"event": "api.request.failed", "path": request.url.path, "error": str(exc)},
            )
        return _error_response(exc.status_code, str(exc) or "Request failed", **exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, _validation_message(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "api.request.unhandled",
            extra={"event": "api.request.unhandled", "path": request.url.path},
        )
        return _error_response(500, "Internal server error")


def create_app() -> FastAPI:
    cfg = get_config()
    configure_logging()
    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION)
    install_exception_handlers(app)
    app.include_router(get_api_router())

    @app.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return app


# ASGI entrypoint for `uvicorn venturescope.main:app`.
app = create_app()


if __name__ == "__main__":
    import uvicorn

    from venturescope.core.startup import bootstrap

    bootstrap()
    cfg = get_config()
    uvicorn.run("venturescope.main:app", host=cfg.API_HOST, port=cfg.API_PORT)
