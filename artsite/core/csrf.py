"""
Double-submit CSRF protection for the page's editing forms.

GET / hands out a token in a readable cookie and embeds the same value in
every form; a POST is accepted only when both copies match and the request
(if it says where it came from) came from this host.
"""
from __future__ import annotations

import secrets
from urllib import parse as urlparse

from fastapi import HTTPException, Request, Response

from artsite.core.config import get_settings

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "x-csrf-token"
CSRF_COOKIE_MAX_AGE = 7 * 24 * 60 * 60
_MIN_TOKEN_LENGTH = 16


def ensure_csrf_token(request: Request) -> str:
    """Reuse the visitor's token when it looks sane, otherwise mint a new one."""
    token = request.cookies.get(CSRF_COOKIE_NAME) or ""
    if len(token) < _MIN_TOKEN_LENGTH:
        token = secrets.token_urlsafe(32)
    return token


def set_csrf_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        CSRF_COOKIE_NAME,
        token,
        max_age=CSRF_COOKIE_MAX_AGE,
        httponly=False,
        secure=get_settings().app_env == "prod",
        samesite="strict",
        path="/",
    )


def _same_origin(request: Request) -> bool:
    source = request.headers.get("origin") or request.headers.get("referer") or ""
    if not source:
        return True
    try:
        parsed = urlparse.urlparse(source)
    except ValueError:
        return False
    host = (request.headers.get("host") or "").split(":", 1)[0].lower()
    source_host = (parsed.hostname or "").lower()
    if source_host and host and source_host != host:
        return False
    return not parsed.scheme or parsed.scheme == request.url.scheme


def validate_csrf(request: Request, supplied_token: str | None) -> None:
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME)
    token = (supplied_token or "").strip() or (request.headers.get(CSRF_HEADER_NAME) or "").strip()
    if not cookie_token or not token:
        raise HTTPException(403, "Missing CSRF token.")
    if not secrets.compare_digest(cookie_token, token):
        raise HTTPException(403, "Invalid CSRF token.")
    if not _same_origin(request):
        raise HTTPException(403, "Invalid origin.")
