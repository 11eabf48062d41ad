"""Input sanitation for untrusted document text."""

from __future__ import annotations

import re

BOM = "\ufeff"
UTF8_BOM = b"\xef\xbb\xbf"

# Bounded excerpt of offending input carried by DecodingError
MAX_EXCERPT_CHARS = 512

_XML_DECLARATION = re.compile(r"^\s*<\?xml\s[^>]*\?>")


def strip_bom(text: str | bytes) -> str | bytes:
    """Remove a single leading byte-order mark, if present.

    Example:
        >>> strip_bom("\\ufeff<a/>")
        '<a/>'
        >>> strip_bom(b"\\xef\\xbb\\xbf<a/>")
        b'<a/>'
    """
    if isinstance(text, bytes):
        return text[len(UTF8_BOM):] if text.startswith(UTF8_BOM) else text
    return text[1:] if text.startswith(BOM) else text


def strip_declaration(text: str) -> str:
    """Remove a leading XML declaration from already-decoded text.

    lxml refuses str input that still declares an encoding.
    """
    return _XML_DECLARATION.sub("", text, count=1)


def is_blank(text: str | bytes) -> bool:
    return not text.strip()


def excerpt(text: str | bytes, limit: int = MAX_EXCERPT_CHARS) -> str:
    """Return at most ``limit`` characters of ``text`` for diagnostics."""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text) - limit} more characters)"
