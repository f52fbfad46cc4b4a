from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.ideaboard.audit import record_event
from app.ideaboard.models import User
from app.ideaboard.modules.ideas.models import Idea
from app.ideaboard.modules.votes.models import Vote
from app.ideaboard.policy import check

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteResult:
    voted: bool
    votes_count: int


def has_voted(s: Session, *, user: User | None, idea: Idea) -> bool:
    if user is None:
        return False
    stmt = select(Vote.id).where(Vote.user_id == user.id, Vote.idea_id == idea.id)
    return s.execute(stmt).first() is not None


def _votes_count(s: Session, idea: Idea) -> int:
    return int(s.execute(select(func.count(Vote.id)).where(Vote.idea_id == idea.id)).scalar_one())


def toggle_vote(s: Session, *, user: User | None, idea: Idea) -> VoteResult:
    """
    Remove the user's vote if there is one, otherwise add it.

    The delete goes first so an existing vote never needs a read. The insert
    runs in a savepoint; losing a race against a concurrent toggle trips the
    (user_id, idea_id) unique constraint and simply leaves the other
    request's row in place.
    """
    check(user, "idea.vote", idea)
    removed = s.execute(delete(Vote).where(Vote.user_id == user.id, Vote.idea_id == idea.id)).rowcount
    if removed:
        voted = False
    else:
        try:
            with s.begin_nested():
                s.add(Vote(user_id=user.id, idea_id=idea.id))
                s.flush()
        except IntegrityError:
            logger.info("Concurrent vote for idea_id=%s user_id=%s; keeping existing row", idea.id, user.id)
        voted = True

    record_event(
        s,
        actor=user,
        action="vote.create" if voted else "vote.delete",
        entity_type="Idea",
        entity_id=str(idea.id),
    )
    return VoteResult(voted=voted, votes_count=_votes_count(s, idea))
