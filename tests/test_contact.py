from __future__ import annotations

import sys
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

# Keep the artsite package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from artsite.core.mailer import build_mailto, encode_component  # noqa: E402
from artsite.domain.items import ContactDraft  # noqa: E402
from artsite.services.contact_service import compose_body, compose_mailto, compose_subject  # noqa: E402


def test_mailto_carries_subject_and_all_fields_percent_encoded():
    draft = ContactDraft(name="Jane", email="j@x.com", message="Hi")
    uri = compose_mailto(draft, "hello@chaoticcolors.art", "ChaoticColors")

    parts = urlsplit(uri)
    assert parts.scheme == "mailto"
    assert parts.path == "hello@chaoticcolors.art"
    assert "j%40x.com" in parts.query
    assert "%0A" in parts.query
    query = parse_qs(parts.query)
    assert query["subject"] == ["ChaoticColors Inquiry from Jane"]
    assert query["body"] == ["Name: Jane\nEmail: j@x.com\n\nMessage:\nHi"]


def test_anonymous_sender_gets_placeholder_name():
    assert compose_subject(ContactDraft(), "ChaoticColors") == "ChaoticColors Inquiry from Website Visitor"
    assert compose_subject(ContactDraft(name="Ana"), "") == "Inquiry from Ana"
    assert compose_body(ContactDraft()) == "Name: \nEmail: \n\nMessage:\n"


def test_encoding_matches_encode_uri_component():
    assert encode_component("a b&c=d/é") == "a%20b%26c%3Dd%2F%C3%A9"
    assert encode_component("it's (ok)!*~") == "it's%20(ok)!*~"
    assert build_mailto("me@x.com", "", "") == "mailto:me@x.com?subject=&body="
