from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from artsite.core import csrf
from artsite.routers.deps import app_settings, back_to, guarded_site, remember_visitor, visitor_site
from artsite.services.ingestion import FileReadError, add_data_uris, ingest_urls, read_uploads
from artsite.services.site_service import ensure_visitor_id

log = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["collections"])


class CollectionName(str, Enum):
    gallery = "gallery"
    shop = "shop"


def _done(request: Request, vid: str, section: str, error: str = ""):
    return remember_visitor(request, back_to(section, error), vid)


# Plain ``def`` handlers run in FastAPI's threadpool, so backend I/O never
# blocks the event loop; guarded_site serialises each visitor's edits.


@router.post("/{collection}/toggle-edit")
def toggle_edit(collection: CollectionName, request: Request, csrf_token: str = Form("")):
    with guarded_site(request, csrf_token) as (vid, site):
        site.collection(collection.value).toggle_editing()
    return _done(request, vid, collection.value)


@router.post("/{collection}/toggle-paste")
def toggle_paste(collection: CollectionName, request: Request, csrf_token: str = Form("")):
    with guarded_site(request, csrf_token) as (vid, site):
        site.collection(collection.value).toggle_paste()
    return _done(request, vid, collection.value)


@router.post("/{collection}/paste/cancel")
def cancel_paste(collection: CollectionName, request: Request, csrf_token: str = Form("")):
    with guarded_site(request, csrf_token) as (vid, site):
        site.collection(collection.value).close_paste()
    return _done(request, vid, collection.value)


@router.post("/{collection}/paste")
def paste_urls(
    collection: CollectionName,
    request: Request,
    urls: str = Form(""),
    csrf_token: str = Form(""),
):
    with guarded_site(request, csrf_token) as (vid, site):
        ingest_urls(site.collection(collection.value), urls)
    return _done(request, vid, collection.value)


@router.post("/{collection}/upload")
async def upload_files(
    collection: CollectionName,
    request: Request,
    files: Optional[List[UploadFile]] = File(None),
    csrf_token: str = Form(""),
):
    csrf.validate_csrf(request, csrf_token)
    vid = ensure_visitor_id(request)
    try:
        uris = await read_uploads(files, app_settings(request))
    except FileReadError as exc:
        log.info("upload rejected for %s: %s", collection.value, exc)
        return _done(request, vid, collection.value, "upload")

    def commit() -> None:
        # Appends to whatever the collection holds once every read is done.
        with visitor_site(request, vid) as site:
            add_data_uris(site.collection(collection.value), uris)

    await run_in_threadpool(commit)
    return _done(request, vid, collection.value)


@router.post("/{collection}/reset")
def reset(collection: CollectionName, request: Request, csrf_token: str = Form("")):
    with guarded_site(request, csrf_token) as (vid, site):
        site.collection(collection.value).reset()
    return _done(request, vid, collection.value)


@router.post("/{collection}/items/{index}")
def update_item(
    collection: CollectionName,
    index: int,
    request: Request,
    title: Optional[str] = Form(None),
    href: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    csrf_token: str = Form(""),
):
    with guarded_site(request, csrf_token) as (vid, site):
        editor = site.collection(collection.value)
        fields = {"title": title, "href": href}
        if collection is CollectionName.shop:
            fields["price"] = price
        editor.update(index, editor.patch_type(**fields))
    return _done(request, vid, collection.value)


@router.post("/{collection}/items/{index}/remove")
def remove_item(collection: CollectionName, index: int, request: Request, csrf_token: str = Form("")):
    with guarded_site(request, csrf_token) as (vid, site):
        site.collection(collection.value).remove(index)
    return _done(request, vid, collection.value)
