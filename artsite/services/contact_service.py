"""Contact form: turns a draft into a mailto: link for the visitor's mail client."""
from __future__ import annotations

from artsite.core.mailer import build_mailto
from artsite.domain.items import ContactDraft

ANONYMOUS_SENDER = "Website Visitor"


def compose_subject(draft: ContactDraft, site_name: str) -> str:
    who = draft.name or ANONYMOUS_SENDER
    return f"{site_name} Inquiry from {who}".strip()


def compose_body(draft: ContactDraft) -> str:
    return f"Name: {draft.name}\nEmail: {draft.email}\n\nMessage:\n{draft.message}"


def compose_mailto(draft: ContactDraft, to_address: str, site_name: str = "") -> str:
    return build_mailto(to_address, compose_subject(draft, site_name), compose_body(draft))
