from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from artsite.core import csrf
from artsite.domain.items import ContactDraft, display_price, display_title, link_target
from artsite.routers.deps import app_settings, registry, remember_visitor, templates
from artsite.services.contact_service import compose_mailto
from artsite.services.site_service import ensure_visitor_id, visitor_id

router = APIRouter(prefix="", tags=["pages"])

HERO_IMAGE = (
    "https://images.unsplash.com/photo-1541701494587-cb58502866ab"
    "?auto=format&fit=crop&w=1600&q=80"
)

ERROR_MESSAGES = {
    "upload": "Some files could not be read, so nothing was added. Try again with image files.",
}


def _cards(editor) -> list[dict]:
    cards = []
    for index, item in enumerate(editor.items):
        card = {
            "index": index,
            "item": item,
            "title": display_title(item, index),
            "placeholder": f"{item.label} {index + 1}",
            "link": link_target(item.href),
        }
        if hasattr(item, "price"):
            card["price"] = display_price(item)
        cards.append(card)
    return cards


@router.get("/", response_class=HTMLResponse)
def home(request: Request, error: str = ""):
    settings = app_settings(request)
    known = visitor_id(request)
    # First visit: the id is only minted here, so there is nothing stored yet.
    site = registry(request).get(known) if known else registry(request).blank()
    vid = known or ensure_visitor_id(request)
    csrf_token = csrf.ensure_csrf_token(request)
    context = {
        "request": request,
        "site_name": settings.site_name,
        "site_tagline": settings.site_tagline,
        "contact_email": settings.contact_email,
        "hero_image": HERO_IMAGE,
        "csrf_token": csrf_token,
        "error_message": ERROR_MESSAGES.get(error, ""),
        "about": site.about.content,
        "gallery": site.gallery,
        "gallery_cards": _cards(site.gallery),
        "shop": site.shop,
        "shop_cards": _cards(site.shop),
        "year": datetime.now().year,
    }
    response = templates(request).TemplateResponse(request, "page.html", context)
    csrf.set_csrf_cookie(response, csrf_token)
    return remember_visitor(request, response, vid)


@router.post("/contact")
async def send_contact(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    message: str = Form(""),
):
    settings = app_settings(request)
    draft = ContactDraft(name=name, email=email, message=message)
    target = compose_mailto(draft, settings.contact_email, settings.site_name)
    return RedirectResponse(target, status_code=303)


@router.post("/contact/clear")
async def clear_contact():
    return RedirectResponse("/#contact", status_code=303)


@router.get("/healthz")
async def healthz():
    return PlainTextResponse("ok")
