from __future__ import annotations

from flask import Blueprint, current_app, flash, g, redirect, render_template, request, url_for

from app.ideaboard.constants import ALL_CATEGORIES, ALL_STATUSES
from app.ideaboard.db import db_session
from app.ideaboard.errors import errors_by_field
from app.ideaboard.models import User
from app.ideaboard.modules.comments.service import list_comments
from app.ideaboard.modules.ideas.service import (
    count_votes,
    create_idea,
    delete_idea,
    get_idea_by_slug,
    list_categories,
    list_ideas,
    list_statuses,
    set_idea_status,
    status_counts,
    update_idea,
    validate_idea_payload,
)
from app.ideaboard.modules.votes.service import has_voted
from app.ideaboard.navigation import compute_back_url
from app.ideaboard.policy import check, login_required
from app.ideaboard.signals import idea_created, idea_deleted, idea_status_changed
from app.ideaboard.utils import parse_page

bp = Blueprint("ideas", __name__)


def _current_user() -> User | None:
    return getattr(g, "current_user", None)


def _idea_payload() -> dict:
    return {
        "title": request.form.get("title"),
        "category": request.form.get("category"),
        "description": request.form.get("description"),
    }


# ---------- List ----------
@bp.get("/")
def index():
    s = db_session()
    category_filter = (request.args.get("category") or "").strip() or ALL_CATEGORIES
    status_filter = (request.args.get("status") or "").strip() or ALL_STATUSES
    page = parse_page(request.args.get("page"))

    ideas = list_ideas(
        s,
        category=category_filter,
        status=status_filter,
        page=page,
        per_page=current_app.config["IDEAS_PER_PAGE"],
        viewer=_current_user(),
    )
    return render_template(
        "ideas/index.html",
        ideas=ideas,
        categories=list_categories(s),
        statuses=list_statuses(s),
        status_counts=status_counts(s),
        category_filter=category_filter,
        status_filter=status_filter,
    )


# ---------- Detail ----------
@bp.get("/ideas/<slug>")
def show(slug: str):
    s = db_session()
    idea = get_idea_by_slug(s, slug)
    comments = list_comments(
        s,
        idea,
        page=parse_page(request.args.get("page")),
        per_page=current_app.config["COMMENTS_PER_PAGE"],
    )
    return render_template(
        "ideas/show.html",
        idea=idea,
        votes_count=count_votes(s, idea),
        has_voted=has_voted(s, user=_current_user(), idea=idea),
        comments=comments,
        back_url=compute_back_url(g.navigation, url_for("ideas.index")),
        statuses=list_statuses(s),
    )


# ---------- Create ----------
@bp.get("/ideas/create")
@login_required
def create_get():
    s = db_session()
    return render_template("ideas/create.html", categories=list_categories(s), form={}, errors={})


@bp.post("/ideas/create")
def create_post():
    s = db_session()
    u = _current_user()
    check(u, "idea.create")

    payload = _idea_payload()
    errors = validate_idea_payload(s, payload)
    if errors:
        return render_template(
            "ideas/create.html",
            categories=list_categories(s),
            form=payload,
            errors=errors_by_field(errors),
        )

    try:
        idea = create_idea(s, payload, user=u)
        s.commit()
    except Exception:
        s.rollback()
        current_app.logger.exception("Idea create failed (request_id=%s)", getattr(g, "request_id", None))
        raise

    idea_created.send(current_app._get_current_object(), idea=idea)
    flash("Idea was added successfully.", "success")
    return redirect(url_for("ideas.index"))


# ---------- Edit ----------
@bp.get("/ideas/<slug>/edit")
@login_required
def edit_get(slug: str):
    s = db_session()
    idea = get_idea_by_slug(s, slug)
    check(_current_user(), "idea.update", idea)
    form = {"title": idea.title, "category": str(idea.category_id), "description": idea.description}
    return render_template("ideas/edit.html", idea=idea, categories=list_categories(s), form=form, errors={})


@bp.post("/ideas/<slug>/edit")
def edit_post(slug: str):
    s = db_session()
    u = _current_user()
    idea = get_idea_by_slug(s, slug)
    check(u, "idea.update", idea)

    payload = _idea_payload()
    errors = validate_idea_payload(s, payload)
    if errors:
        return render_template(
            "ideas/edit.html",
            idea=idea,
            categories=list_categories(s),
            form=payload,
            errors=errors_by_field(errors),
        )

    update_idea(s, idea, payload, user=u)
    s.commit()
    flash("Idea was updated successfully.", "success")
    return redirect(url_for("ideas.show", slug=idea.slug))


# ---------- Delete ----------
@bp.post("/ideas/<slug>/delete")
def delete(slug: str):
    s = db_session()
    u = _current_user()
    idea = get_idea_by_slug(s, slug)

    try:
        delete_idea(s, idea, user=u)
        s.commit()
    except Exception:
        s.rollback()
        raise

    idea_deleted.send(current_app._get_current_object(), idea_id=idea.id, slug=slug)
    flash("Idea was deleted successfully.", "success")
    return redirect(url_for("ideas.index"))


# ---------- Status (admin) ----------
@bp.post("/ideas/<slug>/status")
def set_status(slug: str):
    s = db_session()
    u = _current_user()
    idea = get_idea_by_slug(s, slug)
    check(u, "idea.set_status", idea)

    try:
        status_id = int(request.form.get("status") or "")
    except ValueError:
        flash("Please select a status.", "danger")
        return redirect(url_for("ideas.show", slug=slug))
    notify_voters = (request.form.get("notify_voters") or "").strip().lower() in ("1", "on", "true", "yes")

    changed = set_idea_status(s, idea, status_id, user=u)
    s.commit()

    if changed:
        # Sent after commit: listeners (the voter fan-out) read committed data from their own session.
        idea_status_changed.send(current_app._get_current_object(), idea=idea, notify_voters=notify_voters)
        flash("Status was updated successfully.", "success")
    return redirect(url_for("ideas.show", slug=slug))
