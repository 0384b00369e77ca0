"""
Email adapter for the contact form.

Nothing is sent from the server: the site hands the visitor a ``mailto:`` URI
and the operating system's default mail client drafts the message.
"""

from urllib.parse import quote

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.".
_URI_COMPONENT_SAFE = "!~*'()"


def encode_component(value: str) -> str:
    return quote(value or "", safe=_URI_COMPONENT_SAFE)


def build_mailto(to_email: str, subject: str, body: str) -> str:
    """
    Build the ``mailto:`` URI with percent-encoded subject and body.
    The destination address is left as-is, which is what mail handlers expect.
    """
    return f"mailto:{to_email}?subject={encode_component(subject)}&body={encode_component(body)}"
