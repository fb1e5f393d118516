"""errors.py - Proxy error taxonomy and the FastAPI handler that renders it."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ProxyError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"success": False, "error": self.message}


class AuthError(ProxyError):
    """Login was rejected or returned no usable authid."""


class RequestError(ProxyError):
    """The upstream could not be reached or answered with a transport-level failure."""


class ValidationError(ProxyError):
    """Required caller input is missing. Raised before any upstream call."""

    status_code = 400


def register_error_handlers(app: FastAPI) -> None:
    """Render every ProxyError as the uniform {success: false, error} envelope."""

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        if exc.status_code >= 500:
            logger.error(f"[proxy] {type(exc).__name__} on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"[proxy] {type(exc).__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())
