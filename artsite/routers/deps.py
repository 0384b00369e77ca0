"""Shared plumbing for routers: templates, the visitor's Site, redirects."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from fastapi.responses import RedirectResponse

from artsite.core import csrf
from artsite.core.config import get_settings
from artsite.services.site_service import (
    Site,
    SiteRegistry,
    ensure_visitor_id,
    set_visitor_cookie,
    visitor_id,
)


def templates(request: Request):
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def registry(request: Request) -> SiteRegistry:
    reg = getattr(getattr(request.app, "state", None), "site_registry", None)
    if reg is None:
        raise RuntimeError("Site registry not configured")
    return reg


@contextmanager
def visitor_site(request: Request, vid: str) -> Iterator[Site]:
    """A freshly loaded Site for ``vid``, locked against the visitor's other requests."""
    with registry(request).locked(vid) as site:
        yield site


@contextmanager
def guarded_site(request: Request, csrf_token: str) -> Iterator[tuple[str, Site]]:
    """Validate the form's CSRF token, then lock and load the visitor's Site."""
    csrf.validate_csrf(request, csrf_token)
    vid = ensure_visitor_id(request)
    with visitor_site(request, vid) as site:
        yield vid, site


def remember_visitor(request: Request, response, vid: str):
    if visitor_id(request) != vid:
        set_visitor_cookie(response, vid)
    return response


def back_to(section: str, error: str = "") -> RedirectResponse:
    query = f"?error={error}" if error else ""
    return RedirectResponse(f"/{query}#{section}", status_code=303)


def app_settings(request: Request):
    return getattr(getattr(request.app, "state", None), "settings", None) or get_settings()
