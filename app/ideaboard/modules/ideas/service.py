from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.ideaboard.audit import record_event
from app.ideaboard.constants import (
    ALL_CATEGORIES,
    ALL_STATUSES,
    MIN_DESCRIPTION_LENGTH,
    MIN_TITLE_LENGTH,
    RESERVED_SLUGS,
)
from app.ideaboard.errors import NotFoundError, ValidationError
from app.ideaboard.models import User
from app.ideaboard.modules.comments.models import Comment
from app.ideaboard.modules.ideas.models import Category, Idea, Status
from app.ideaboard.modules.votes.models import Vote
from app.ideaboard.policy import check
from app.ideaboard.utils import slugify

logger = logging.getLogger(__name__)

_SLUG_ATTEMPTS = 3


@dataclass(frozen=True)
class IdeaRow:
    idea: Idea
    category_name: str
    status_name: str
    status_classes: str
    comments_count: int
    votes_count: int
    voted_by_viewer: bool


@dataclass(frozen=True)
class IdeaPage:
    rows: list[IdeaRow]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page * self.per_page < self.total

    @property
    def first_item(self) -> int:
        return (self.page - 1) * self.per_page + 1 if self.rows else 0

    @property
    def last_item(self) -> int:
        return (self.page - 1) * self.per_page + len(self.rows)


# ---------- Queries ----------

def _is_filter_set(value: str | None, sentinel: str) -> bool:
    value = (value or "").strip()
    return bool(value) and value != sentinel


def list_ideas(
    s: Session,
    *,
    category: str | None = None,
    status: str | None = None,
    page: int = 1,
    per_page: int = 10,
    viewer: User | None = None,
) -> IdeaPage:
    """
    Filtered, newest-first page of ideas with denormalized counts.

    Empty filters and the "All Categories" / "All Statuses" sentinels impose
    no constraint; anything else must match the category/status name exactly.
    Pages past the end are empty.
    """
    page = max(1, page)
    comments_count = (
        select(func.count(Comment.id)).where(Comment.idea_id == Idea.id).correlate(Idea).scalar_subquery()
    )
    votes_count = select(func.count(Vote.id)).where(Vote.idea_id == Idea.id).correlate(Idea).scalar_subquery()
    if viewer is not None:
        voted = exists().where(Vote.idea_id == Idea.id, Vote.user_id == viewer.id).correlate(Idea)
    else:
        voted = None

    columns: list[Any] = [
        Idea,
        Category.name,
        Status.name,
        Status.classes,
        comments_count.label("comments_count"),
        votes_count.label("votes_count"),
    ]
    if voted is not None:
        columns.append(voted.label("voted"))

    stmt = select(*columns).join(Category, Idea.category_id == Category.id).join(Status, Idea.status_id == Status.id)
    count_stmt = (
        select(func.count(Idea.id))
        .join(Category, Idea.category_id == Category.id)
        .join(Status, Idea.status_id == Status.id)
    )
    if _is_filter_set(category, ALL_CATEGORIES):
        stmt = stmt.where(Category.name == category.strip())
        count_stmt = count_stmt.where(Category.name == category.strip())
    if _is_filter_set(status, ALL_STATUSES):
        stmt = stmt.where(Status.name == status.strip())
        count_stmt = count_stmt.where(Status.name == status.strip())

    total = int(s.execute(count_stmt).scalar_one())
    result = s.execute(
        stmt.order_by(Idea.created_at.desc(), Idea.id.desc()).offset((page - 1) * per_page).limit(per_page)
    ).all()

    rows = [
        IdeaRow(
            idea=r[0],
            category_name=r[1],
            status_name=r[2],
            status_classes=r[3],
            comments_count=int(r[4] or 0),
            votes_count=int(r[5] or 0),
            voted_by_viewer=bool(r[6]) if voted is not None else False,
        )
        for r in result
    ]
    return IdeaPage(rows=rows, page=page, per_page=per_page, total=total)


def status_counts(s: Session) -> dict[str, int]:
    """Ideas per status name, plus the grand total under ``all_statuses``."""
    rows = (
        s.query(Status.name, func.count(Idea.id))
        .outerjoin(Idea, Idea.status_id == Status.id)
        .group_by(Status.id, Status.name)
        .all()
    )
    counts = {name: int(cnt or 0) for name, cnt in rows}
    counts["all_statuses"] = sum(counts.values())
    return counts


def get_idea_by_slug(s: Session, slug: str) -> Idea:
    idea = s.query(Idea).filter(Idea.slug == slug).one_or_none()
    if idea is None:
        raise NotFoundError(f"Idea {slug!r} not found")
    return idea


def count_votes(s: Session, idea: Idea) -> int:
    return int(s.query(func.count(Vote.id)).filter(Vote.idea_id == idea.id).scalar() or 0)


def count_comments(s: Session, idea: Idea) -> int:
    return int(s.query(func.count(Comment.id)).filter(Comment.idea_id == idea.id).scalar() or 0)


def list_categories(s: Session) -> list[Category]:
    return s.query(Category).order_by(Category.id.asc()).all()


def list_statuses(s: Session) -> list[Status]:
    return s.query(Status).order_by(Status.id.asc()).all()


def initial_status(s: Session) -> Status:
    st = s.query(Status).order_by(Status.id.asc()).first()
    if st is None:
        raise RuntimeError("No statuses seeded; run scripts/init_db.py")
    return st


# ---------- Slugs ----------

def unique_slug(s: Session, title: str, *, exclude_id: int | None = None) -> str:
    """slug(title), or slug(title)-N with the first free N >= 2."""
    base = slugify(title)
    q = s.query(Idea.slug).filter((Idea.slug == base) | (Idea.slug.like(f"{base}-%")))
    if exclude_id is not None:
        q = q.filter(Idea.id != exclude_id)
    taken = {row[0] for row in q.all()} | RESERVED_SLUGS
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"


# ---------- Commands ----------

def validate_idea_payload(s: Session, payload: dict[str, Any]) -> list[ValidationError]:
    errs: list[ValidationError] = []
    title = (payload.get("title") or "").strip()
    if not title:
        errs.append(ValidationError("title", "The title field is required."))
    elif len(title) < MIN_TITLE_LENGTH:
        errs.append(ValidationError("title", f"The title must be at least {MIN_TITLE_LENGTH} characters."))

    raw_category = str(payload.get("category") or "").strip()
    if not raw_category:
        errs.append(ValidationError("category", "The category field is required."))
    else:
        try:
            category_id = int(raw_category)
        except ValueError:
            category_id = None
        if category_id is None or s.get(Category, category_id) is None:
            errs.append(ValidationError("category", "The selected category is invalid."))

    description = (payload.get("description") or "").strip()
    if not description:
        errs.append(ValidationError("description", "The description field is required."))
    elif len(description) < MIN_DESCRIPTION_LENGTH:
        errs.append(
            ValidationError("description", f"The description must be at least {MIN_DESCRIPTION_LENGTH} characters.")
        )
    return errs


def create_idea(s: Session, payload: dict[str, Any], *, user: User | None) -> Idea:
    """Create an idea in the initial status. Caller validates and commits."""
    check(user, "idea.create")
    title = (payload.get("title") or "").strip()
    now = datetime.utcnow()
    status = initial_status(s)

    for attempt in range(1, _SLUG_ATTEMPTS + 1):
        idea = Idea(
            user_id=user.id,
            category_id=int(payload["category"]),
            status_id=status.id,
            title=title,
            slug=unique_slug(s, title),
            description=(payload.get("description") or "").strip(),
            created_at=now,
            updated_at=now,
        )
        try:
            with s.begin_nested():
                s.add(idea)
                s.flush()
            break
        except IntegrityError:
            # Another request took the slug between our read and our insert.
            logger.warning("Slug collision for %r (attempt %s)", idea.slug, attempt)
            if attempt == _SLUG_ATTEMPTS:
                raise

    record_event(
        s,
        actor=user,
        action="idea.create",
        entity_type="Idea",
        entity_id=str(idea.id),
        metadata={"slug": idea.slug, "category_id": idea.category_id},
    )
    return idea


def update_idea(s: Session, idea: Idea, payload: dict[str, Any], *, user: User | None) -> Idea:
    """Author-only edit. The slug stays stable so existing links keep working."""
    check(user, "idea.update", idea)
    before = {"title": idea.title, "category_id": idea.category_id, "description": idea.description}
    idea.title = (payload.get("title") or "").strip()
    idea.category_id = int(payload["category"])
    idea.description = (payload.get("description") or "").strip()
    idea.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="idea.update",
        entity_type="Idea",
        entity_id=str(idea.id),
        metadata={
            "before": before,
            "after": {"title": idea.title, "category_id": idea.category_id, "description": idea.description},
        },
    )
    return idea


def delete_idea(s: Session, idea: Idea, *, user: User | None) -> None:
    """
    Author or admin only. Comments and votes go with the idea in the same
    transaction (ORM cascade + ON DELETE CASCADE); nothing is flushed when
    the policy denies.
    """
    check(user, "idea.delete", idea)
    meta = {
        "slug": idea.slug,
        "comments": count_comments(s, idea),
        "votes": count_votes(s, idea),
    }
    idea_id = idea.id
    s.delete(idea)
    s.flush()
    record_event(s, actor=user, action="idea.delete", entity_type="Idea", entity_id=str(idea_id), metadata=meta)


def set_idea_status(s: Session, idea: Idea, status_id: int, *, user: User | None) -> bool:
    """Admin-only status change. Returns True when the status actually changed."""
    check(user, "idea.set_status", idea)
    status = s.get(Status, status_id)
    if status is None:
        raise NotFoundError(f"Status {status_id} not found")
    if status.id == idea.status_id:
        return False
    old_status_id = idea.status_id
    idea.status_id = status.id
    idea.status = status
    idea.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="idea.set_status",
        entity_type="Idea",
        entity_id=str(idea.id),
        metadata={"old_status_id": old_status_id, "new_status_id": status.id},
    )
    return True
