from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, redirect, request, url_for

from app.ideaboard.db import db_session
from app.ideaboard.modules.ideas.service import get_idea_by_slug
from app.ideaboard.modules.votes.service import toggle_vote
from app.ideaboard.policy import login_required
from app.ideaboard.signals import vote_toggled
from app.ideaboard.utils import is_local_path, wants_json

bp = Blueprint("votes", __name__)


@bp.post("/ideas/<slug>/vote")
@login_required
def toggle(slug: str):
    s = db_session()
    idea = get_idea_by_slug(s, slug)

    try:
        result = toggle_vote(s, user=g.current_user, idea=idea)
        s.commit()
    except Exception:
        s.rollback()
        raise

    vote_toggled.send(current_app._get_current_object(), idea=idea, user=g.current_user, voted=result.voted)

    if wants_json():
        return jsonify({"voted": result.voted, "votes_count": result.votes_count})
    nxt = (request.form.get("next") or "").strip()
    if is_local_path(nxt):
        return redirect(nxt)
    return redirect(url_for("ideas.show", slug=idea.slug))
