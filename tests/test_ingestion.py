from __future__ import annotations

import asyncio
import base64
import io
import sys
from dataclasses import replace
from pathlib import Path

import pytest
from PIL import Image

# Keep the artsite package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from artsite.core.config import get_settings  # noqa: E402
from artsite.repositories.memory_storage import MemoryStorage  # noqa: E402
from artsite.repositories.store import PersistentStore  # noqa: E402
from artsite.services import ingestion  # noqa: E402
from artsite.services.ingestion import (  # noqa: E402
    EmptyUploadError,
    FileReadError,
    UploadTooLargeError,
    guess_mime,
    ingest_about_image,
    ingest_files,
    ingest_urls,
    parse_url_text,
    to_data_uri,
)
from artsite.services.site_service import Site  # noqa: E402


class FakeUpload:
    """Stands in for fastapi.UploadFile."""

    def __init__(self, filename, data, content_type="image/png", delay=0.0, fail=False):
        self.filename = filename
        self.content_type = content_type
        self._data = data
        self._delay = delay
        self._fail = fail
        self.reads = 0
        self.finished = False

    async def read(self):
        self.reads += 1
        await asyncio.sleep(self._delay)
        self.finished = True
        if self._fail:
            raise OSError("disk went away")
        return self._data


@pytest.fixture()
def settings():
    return replace(get_settings(), embed_max_px=0, max_upload_bytes=1024)


@pytest.fixture()
def site():
    return Site(PersistentStore(MemoryStorage(), "visitor"))


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_parse_url_text_splits_on_newlines_commas_and_spaces():
    text = "https://x/1.jpg\nhttps://x/2.jpg,https://x/3.jpg  https://x/4.jpg\t\n,,"
    assert parse_url_text(text) == [
        "https://x/1.jpg",
        "https://x/2.jpg",
        "https://x/3.jpg",
        "https://x/4.jpg",
    ]


@pytest.mark.parametrize("text", ["", "   ", "\n,\n", None])
def test_empty_paste_is_a_silent_no_op(site, text):
    site.gallery.toggle_paste()
    assert ingest_urls(site.gallery, text) == 0
    assert site.gallery.items == ()
    assert site.gallery.paste_open is True


def test_pasted_urls_become_shop_products(site):
    site.shop.toggle_paste()
    added = ingest_urls(site.shop, "https://x/1.jpg\nhttps://x/2.jpg,https://x/3.jpg")
    assert added == 3
    assert [(i.src, i.title, i.price, i.href) for i in site.shop.items] == [
        ("https://x/1.jpg", "Product 1", "From $39", ""),
        ("https://x/2.jpg", "Product 2", "From $39", ""),
        ("https://x/3.jpg", "Product 3", "From $39", ""),
    ]
    assert site.shop.paste_open is False


def test_titles_continue_from_existing_length(site):
    ingest_urls(site.gallery, "a b")
    ingest_urls(site.gallery, "c")
    assert [i.title for i in site.gallery.items] == ["Artwork 1", "Artwork 2", "Artwork 3"]


def test_to_data_uri_uses_content_type_then_filename():
    assert to_data_uri(b"abc", "image/webp", "x.png") == "data:image/webp;base64,YWJj"
    assert to_data_uri(b"abc", None, "x.png") == "data:image/png;base64,YWJj"
    assert to_data_uri(b"abc", "", "noext") == "data:application/octet-stream;base64,YWJj"
    assert guess_mime("application/octet-stream", "photo.jpg") == "image/jpeg"
    assert guess_mime("image/png; charset=binary", "") == "image/png"


def test_large_images_are_downscaled_before_embedding():
    buffer = io.BytesIO()
    Image.new("RGB", (3200, 400), "teal").save(buffer, format="PNG")
    uri = to_data_uri(buffer.getvalue(), "image/png", "wide.png", max_px=1600)
    assert uri.startswith("data:image/jpeg;base64,")
    decoded = base64.b64decode(uri.split(",", 1)[1])
    with Image.open(io.BytesIO(decoded)) as image:
        assert image.size == (1600, 200)


def test_small_and_non_image_payloads_are_embedded_unchanged():
    buffer = io.BytesIO()
    Image.new("RGBA", (10, 10)).save(buffer, format="PNG")
    small = buffer.getvalue()
    assert to_data_uri(small, "image/png", "s.png", max_px=1600) == f"data:image/png;base64,{_b64(small)}"
    assert to_data_uri(b"not an image", "image/png", "x.png", max_px=1600) == (
        f"data:image/png;base64,{_b64(b'not an image')}"
    )


def test_file_batch_keeps_selection_order_even_when_reads_finish_out_of_order(site, settings):
    files = [
        FakeUpload("slow.png", b"slow", delay=0.05),
        FakeUpload("fast.jpg", b"fast", content_type="image/jpeg", delay=0.0),
    ]
    site.gallery.toggle_paste()
    added = asyncio.run(ingest_files(site.gallery, files, settings))
    assert added == 2
    assert [i.src for i in site.gallery.items] == [
        f"data:image/png;base64,{_b64(b'slow')}",
        f"data:image/jpeg;base64,{_b64(b'fast')}",
    ]
    assert [i.title for i in site.gallery.items] == ["Artwork 1", "Artwork 2"]
    assert site.gallery.paste_open is False


def test_shop_file_batch_gets_default_price(site, settings):
    asyncio.run(ingest_files(site.shop, [FakeUpload("p.png", b"p")], settings))
    assert site.shop.items[0].price == "From $39"
    assert site.shop.items[0].title == "Product 1"


def test_one_failed_read_discards_the_whole_batch(site, settings):
    ingest_urls(site.gallery, "https://x/existing.jpg")
    files = [
        FakeUpload("ok.png", b"ok"),
        FakeUpload("broken.png", b"", fail=True),
        FakeUpload("ok2.png", b"ok2"),
    ]
    with pytest.raises(FileReadError) as info:
        asyncio.run(ingest_files(site.gallery, files, settings))
    assert info.value.filename == "broken.png"
    assert [i.src for i in site.gallery.items] == ["https://x/existing.jpg"]
    assert all(f.reads == 1 for f in files)


def test_failed_read_cancels_reads_still_in_flight():
    slow = FakeUpload("slow.png", b"slow", delay=0.2)
    broken = FakeUpload("broken.png", b"", fail=True)

    async def scenario():
        with pytest.raises(FileReadError):
            await ingestion.read_files([slow, broken], max_bytes=1024)
        # Long enough for the slow read to have completed had it kept running.
        await asyncio.sleep(0.3)

    asyncio.run(scenario())
    assert slow.reads == 1
    assert slow.finished is False


def test_read_uploads_then_add_data_uris_to_the_current_collection(site, settings):
    uris = asyncio.run(ingestion.read_uploads([FakeUpload("a.png", b"a")], settings))
    assert uris == [f"data:image/png;base64,{_b64(b'a')}"]
    assert asyncio.run(ingestion.read_uploads([], settings)) == []
    ingest_urls(site.gallery, "existing")
    site.gallery.toggle_paste()
    assert ingestion.add_data_uris(site.gallery, uris) == 1
    assert [i.title for i in site.gallery.items] == ["Artwork 1", "Artwork 2"]
    assert site.gallery.paste_open is False
    assert ingestion.add_data_uris(site.gallery, []) == 0


def test_empty_and_oversized_files_fail_the_batch(site, settings):
    with pytest.raises(EmptyUploadError):
        asyncio.run(ingest_files(site.gallery, [FakeUpload("empty.png", b"")], settings))
    with pytest.raises(UploadTooLargeError):
        asyncio.run(ingest_files(site.gallery, [FakeUpload("big.png", b"x" * 2048)], settings))
    assert site.gallery.items == ()


def test_no_files_selected_is_a_no_op(site, settings):
    assert asyncio.run(ingest_files(site.gallery, None, settings)) == 0
    assert asyncio.run(ingest_files(site.gallery, [FakeUpload("", b"")], settings)) == 0
    assert site.gallery.items == ()


def test_reset_during_reads_is_superseded_by_the_late_append(site, settings):
    ingest_urls(site.gallery, "old-1 old-2")

    async def scenario():
        task = asyncio.create_task(
            ingest_files(site.gallery, [FakeUpload("late.png", b"late", delay=0.05)], settings)
        )
        await asyncio.sleep(0.01)
        site.gallery.reset()
        assert site.gallery.items == ()
        await task

    asyncio.run(scenario())
    assert len(site.gallery.items) == 1
    assert site.gallery.items[0].title == "Artwork 1"
    assert site.gallery.items[0].src.endswith(_b64(b"late"))


def test_reads_run_concurrently(site, settings, monkeypatch):
    in_flight = []
    peak = []

    class TrackingUpload(FakeUpload):
        async def read(self):
            in_flight.append(self.filename)
            peak.append(len(in_flight))
            await asyncio.sleep(0.02)
            in_flight.remove(self.filename)
            return self._data

    files = [TrackingUpload(f"{n}.png", b"x") for n in range(4)]
    asyncio.run(ingest_files(site.gallery, files, settings))
    assert max(peak) == 4


def test_about_image_uses_first_file_only(site, settings):
    files = [FakeUpload("me.jpg", b"me", content_type="image/jpeg"), FakeUpload("other.png", b"o")]
    assert asyncio.run(ingest_about_image(site.about, files, settings)) is True
    assert site.about.content.image_ref == f"data:image/jpeg;base64,{_b64(b'me')}"
    assert files[1].reads == 0
    assert asyncio.run(ingest_about_image(site.about, [], settings)) is False


def test_ingestion_defaults_to_global_settings(site, monkeypatch):
    monkeypatch.setattr(ingestion, "get_settings", lambda: replace(get_settings(), embed_max_px=0))
    asyncio.run(ingest_files(site.gallery, [FakeUpload("a.png", b"a")]))
    assert len(site.gallery.items) == 1
