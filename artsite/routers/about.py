from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from artsite.core import csrf
from artsite.routers.deps import app_settings, back_to, guarded_site, remember_visitor, visitor_site
from artsite.services.ingestion import FileReadError, read_about_image
from artsite.services.site_service import ensure_visitor_id

router = APIRouter(prefix="/about", tags=["about"])


@router.post("/text")
def save_text(request: Request, text: str = Form(""), csrf_token: str = Form("")):
    with guarded_site(request, csrf_token) as (vid, site):
        site.about.set_text(text)
    return remember_visitor(request, back_to("about"), vid)


@router.post("/image")
async def upload_image(
    request: Request,
    image: Optional[List[UploadFile]] = File(None),
    csrf_token: str = Form(""),
):
    csrf.validate_csrf(request, csrf_token)
    vid = ensure_visitor_id(request)
    try:
        uri = await read_about_image(image, app_settings(request))
    except FileReadError:
        return remember_visitor(request, back_to("about", "upload"), vid)
    if uri is not None:
        def commit() -> None:
            with visitor_site(request, vid) as site:
                site.about.set_image(uri)

        await run_in_threadpool(commit)
    return remember_visitor(request, back_to("about"), vid)


@router.post("/image/remove")
def remove_image(request: Request, csrf_token: str = Form("")):
    with guarded_site(request, csrf_token) as (vid, site):
        site.about.remove_image()
    return remember_visitor(request, back_to("about"), vid)
