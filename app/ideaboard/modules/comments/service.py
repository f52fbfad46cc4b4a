from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.ideaboard.audit import record_event
from app.ideaboard.constants import MIN_COMMENT_LENGTH
from app.ideaboard.errors import NotFoundError, ValidationError
from app.ideaboard.models import User
from app.ideaboard.modules.comments.models import Comment
from app.ideaboard.modules.ideas.models import Idea
from app.ideaboard.policy import check


@dataclass(frozen=True)
class CommentPage:
    comments: list[Comment]
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


def validate_comment_body(body: str | None) -> list[ValidationError]:
    text = (body or "").strip()
    if not text:
        return [ValidationError("body", "The body field is required.")]
    if len(text) < MIN_COMMENT_LENGTH:
        return [ValidationError("body", f"The body must be at least {MIN_COMMENT_LENGTH} characters.")]
    return []


def list_comments(s: Session, idea: Idea, *, page: int = 1, per_page: int = 15) -> CommentPage:
    """Comments in creation order."""
    page = max(1, page)
    q = s.query(Comment).filter(Comment.idea_id == idea.id)
    total = q.count()
    comments = q.order_by(Comment.created_at.asc(), Comment.id.asc()).offset((page - 1) * per_page).limit(per_page).all()
    return CommentPage(comments=comments, page=page, per_page=per_page, total=total)


def last_page(s: Session, idea: Idea, *, per_page: int) -> int:
    total = int(s.query(func.count(Comment.id)).filter(Comment.idea_id == idea.id).scalar() or 0)
    return max(1, (total + per_page - 1) // per_page)


def get_comment(s: Session, comment_id: int) -> Comment:
    comment = s.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError(f"Comment {comment_id} not found")
    return comment


def create_comment(s: Session, idea: Idea, *, body: str, user: User | None) -> Comment:
    check(user, "comment.create", idea)
    now = datetime.utcnow()
    comment = Comment(idea_id=idea.id, user_id=user.id, body=body.strip(), created_at=now, updated_at=now)
    s.add(comment)
    s.flush()
    record_event(
        s,
        actor=user,
        action="comment.create",
        entity_type="Comment",
        entity_id=str(comment.id),
        metadata={"idea_id": idea.id},
    )
    return comment


def update_comment(s: Session, comment: Comment, *, body: str, user: User | None) -> Comment:
    """Only the comment's author may edit. The idea's author and admins are refused too."""
    check(user, "comment.update", comment)
    before = {"body": comment.body}
    comment.body = body.strip()
    comment.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="comment.update",
        entity_type="Comment",
        entity_id=str(comment.id),
        metadata={"before": before, "after": {"body": comment.body}, "idea_id": comment.idea_id},
    )
    return comment
