from __future__ import annotations

import re
import unicodedata

from flask import request

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """ASCII, lowercase, hyphen separated. Empty input gives "idea"."""
    normalized = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM.sub("-", normalized.lower()).strip("-")
    return slug or "idea"


def parse_page(raw: str | None) -> int:
    """Query-string page number; anything unparseable or below 1 becomes 1."""
    try:
        page = int(raw or 1)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def wants_json() -> bool:
    """True for fetch/XHR callers that asked for JSON instead of a redirect."""
    if request.is_json:
        return True
    best = request.accept_mimetypes.best_match(["application/json", "text/html"])
    return best == "application/json" and request.accept_mimetypes[best] > request.accept_mimetypes["text/html"]


def is_local_path(url: str | None) -> bool:
    # Only allow local paths to avoid open redirects.
    return bool(url) and url.startswith("/") and not url.startswith("//")
