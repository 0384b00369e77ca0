from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from artsite.core.config import Settings, get_settings
from artsite.repositories.store import PersistentStore, StorageBackend, build_backend
from artsite.routers import about as about_router
from artsite.routers import collections as collections_router
from artsite.routers import pages as pages_router
from artsite.services.site_service import SiteRegistry

log = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)
TEMPLATES_DIR = os.path.join(BASE, "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        # Pasted image links may point anywhere, uploads are data: URIs.
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "img-src 'self' data: https: http:; "
            "style-src 'self' 'unsafe-inline'; "
            "script-src 'self' 'unsafe-inline'; "
            "form-action 'self' mailto:",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app(settings: Settings | None = None, backend: StorageBackend | None = None) -> FastAPI:
    """Factory compatible with uvicorn (--factory); tests pass their own backend."""
    settings = settings or get_settings()
    app = FastAPI(title=f"{settings.site_name} site")

    if backend is None:
        backend = build_backend(settings)
    log.info("using %s storage backend", type(backend).__name__)
    app.state.settings = settings
    app.state.site_registry = SiteRegistry(PersistentStore(backend), max_visitors=settings.view_state_limit)
    app.state.templates = Jinja2Templates(directory=TEMPLATES_DIR)

    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.include_router(pages_router.router)
    app.include_router(about_router.router)
    app.include_router(collections_router.router)
    return app
