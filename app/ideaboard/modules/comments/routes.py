from __future__ import annotations

from flask import Blueprint, current_app, flash, g, jsonify, redirect, render_template, request, url_for

from app.ideaboard.db import db_session
from app.ideaboard.errors import errors_by_field
from app.ideaboard.modules.comments.service import (
    create_comment,
    get_comment,
    last_page,
    update_comment,
    validate_comment_body,
)
from app.ideaboard.modules.ideas.service import get_idea_by_slug
from app.ideaboard.policy import check, login_required
from app.ideaboard.signals import comment_created, comment_updated
from app.ideaboard.utils import is_local_path, wants_json

bp = Blueprint("comments", __name__)


@bp.post("/ideas/<slug>/comments")
@login_required
def create(slug: str):
    s = db_session()
    idea = get_idea_by_slug(s, slug)
    check(g.current_user, "comment.create", idea)

    body = request.form.get("body") or ""
    errors = validate_comment_body(body)
    if errors:
        if wants_json():
            return jsonify({"errors": errors_by_field(errors)}), 422
        for e in errors:
            flash(e.message, "danger")
        return redirect(url_for("ideas.show", slug=idea.slug, _anchor="comment-form"))

    comment = create_comment(s, idea, body=body, user=g.current_user)
    s.commit()
    comment_created.send(current_app._get_current_object(), comment=comment)

    if wants_json():
        html = render_template("comments/_comment.html", comment=comment, idea=idea)
        return jsonify({"id": comment.id, "html": html}), 201
    flash("Comment was posted!", "success")
    page = last_page(s, idea, per_page=current_app.config["COMMENTS_PER_PAGE"])
    return redirect(url_for("ideas.show", slug=idea.slug, page=page, _anchor=f"comment-{comment.id}"))


@bp.get("/comments/<int:comment_id>/edit")
@login_required
def edit_get(comment_id: int):
    s = db_session()
    comment = get_comment(s, comment_id)
    check(g.current_user, "comment.update", comment)
    return render_template("comments/edit.html", comment=comment, body=comment.body, errors={})


@bp.post("/comments/<int:comment_id>/edit")
@login_required
def edit_post(comment_id: int):
    s = db_session()
    comment = get_comment(s, comment_id)
    # Authorization before validation: a foreign edit is refused whatever it contains.
    check(g.current_user, "comment.update", comment)

    body = request.form.get("body") or ""
    errors = validate_comment_body(body)
    if errors:
        if wants_json():
            return jsonify({"errors": errors_by_field(errors)}), 422
        return render_template("comments/edit.html", comment=comment, body=body, errors=errors_by_field(errors))

    update_comment(s, comment, body=body, user=g.current_user)
    s.commit()
    comment_updated.send(current_app._get_current_object(), comment=comment)

    if wants_json():
        html = render_template("comments/_comment.html", comment=comment, idea=comment.idea)
        return jsonify({"id": comment.id, "body": comment.body, "html": html})
    flash("Comment was updated!", "success")
    nxt = (request.form.get("next") or "").strip()
    if is_local_path(nxt):
        return redirect(nxt)
    return redirect(url_for("ideas.show", slug=comment.idea.slug, _anchor=f"comment-{comment.id}"))
