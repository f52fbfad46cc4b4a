"""
Single authorization entry point.

Every command asks ``authorize(actor, action, target)``; ``check`` raises
AuthorizationError on deny, which the app turns into a 403. Templates get
the same rule set as ``can(action, target)``.
"""
from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any
from urllib.parse import urlsplit

from flask import g, redirect, request, url_for

from app.ideaboard.errors import AuthorizationError
from app.ideaboard.models import User


def _is_author(actor: User, target: Any) -> bool:
    return getattr(target, "user_id", None) == actor.id


# action -> rule(actor, target). Anonymous actors never reach a rule.
_RULES: dict[str, Callable[[User, Any], bool]] = {
    "idea.create": lambda actor, target: True,
    "idea.vote": lambda actor, target: True,
    "comment.create": lambda actor, target: True,
    "idea.update": _is_author,
    "idea.delete": lambda actor, target: _is_author(actor, target) or actor.is_admin,
    "idea.set_status": lambda actor, target: actor.is_admin,
    "comment.update": _is_author,
}


def authorize(actor: User | None, action: str, target: Any = None) -> bool:
    if not actor or not actor.is_active:
        return False
    rule = _RULES.get(action)
    if rule is None:
        return False
    return bool(rule(actor, target))


def check(actor: User | None, action: str, target: Any = None) -> None:
    if not authorize(actor, action, target):
        raise AuthorizationError(action, target)


def _login_next() -> str | None:
    if request.method == "GET":
        nxt = request.full_path or request.path
        # Avoid trailing '?' from full_path when there is no query string.
        return nxt[:-1] if nxt.endswith("?") else nxt
    # For form posts, come back to the page the form was on.
    ref = request.referrer
    if ref and ref.startswith(request.host_url):
        parts = urlsplit(ref)
        return parts.path + (f"?{parts.query}" if parts.query else "")
    return None


def login_required(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        user: User | None = getattr(g, "current_user", None)
        if not user or not user.is_active:
            return redirect(url_for("auth.login_get", next=_login_next()))
        return fn(*args, **kwargs)

    return wrapped
