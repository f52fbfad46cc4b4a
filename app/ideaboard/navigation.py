"""
In-app "back" navigation.

The session remembers the last two distinct pages this visitor rendered.
At the start of each request that memory is turned into an explicit
``NavigationContext`` (stored on ``g.navigation``) so views compute their
back link from request-scoped data only. Only HTML GET responses of this
application are recorded; external referrers never enter the session.
"""
from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from flask import Request, Response

_CURRENT_KEY = "nav_current"
_PREVIOUS_KEY = "nav_previous"


@dataclass(frozen=True)
class NavigationContext:
    previous_url: str | None = None


def _path_of(url: str) -> str:
    return urlsplit(url).path or "/"


def request_url(req: Request) -> str:
    """Path plus the raw query string, exactly as requested."""
    qs = req.query_string.decode("latin-1")
    return f"{req.path}?{qs}" if qs else req.path


def navigation_from_session(sess: MutableMapping[str, Any], current_path: str) -> NavigationContext:
    stored_current = sess.get(_CURRENT_KEY)
    if stored_current and _path_of(stored_current) == current_path:
        # Reload / re-render of the same page: the page before it is still "previous".
        return NavigationContext(previous_url=sess.get(_PREVIOUS_KEY))
    return NavigationContext(previous_url=stored_current)


def record_navigation(sess: MutableMapping[str, Any], url: str) -> None:
    stored_current = sess.get(_CURRENT_KEY)
    if stored_current and _path_of(stored_current) == _path_of(url):
        sess[_CURRENT_KEY] = url
        return
    if stored_current:
        sess[_PREVIOUS_KEY] = stored_current
    else:
        sess.pop(_PREVIOUS_KEY, None)
    sess[_CURRENT_KEY] = url


def should_record(req: Request, resp: Response) -> bool:
    return (
        req.method == "GET"
        and resp.status_code == 200
        and resp.mimetype == "text/html"
        and not req.path.startswith(("/static/", "/health", "/healthz", "/auth/"))
    )


def compute_back_url(nav: NavigationContext | None, list_path: str) -> str:
    """The previous list URL (filters included) if that is where the visitor came from, else the bare list."""
    if nav and nav.previous_url and _path_of(nav.previous_url) == list_path:
        return nav.previous_url
    return list_path
