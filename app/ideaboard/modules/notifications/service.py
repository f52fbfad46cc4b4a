"""
Notify-all-voters fan-out.

``dispatch_notify_all_voters`` only enqueues; the job then resolves the
idea's distinct voters in its own DB session and queues one delivery per
voter. Deliveries are independent: one failing address is logged and the
rest still go out.
"""
from __future__ import annotations

import logging
from typing import Any

from flask import Flask
from sqlalchemy.orm import Session

from app.ideaboard.constants import STATUS_UPDATED_SUBJECT
from app.ideaboard.db import session_scope
from app.ideaboard.errors import DeliveryError
from app.ideaboard.models import User
from app.ideaboard.modules.ideas.models import Idea
from app.ideaboard.modules.notifications.mailer import Mailer, MailMessage, mailer_from_config
from app.ideaboard.modules.notifications.queue import NotificationQueue, queue_from_config
from app.ideaboard.modules.votes.models import Vote
from app.ideaboard.signals import idea_status_changed

logger = logging.getLogger(__name__)


def init_notifications(app: Flask) -> None:
    app.extensions["mailer"] = mailer_from_config(app.config)
    app.extensions["notification_queue"] = queue_from_config(app.config)
    idea_status_changed.connect(_on_idea_status_changed)


def get_mailer(app: Flask) -> Mailer:
    return app.extensions["mailer"]


def get_queue(app: Flask) -> NotificationQueue:
    return app.extensions["notification_queue"]


def distinct_voters(s: Session, idea_id: int) -> list[User]:
    """Voters of an idea, one entry per user id, in vote order."""
    rows = s.query(User).join(Vote, Vote.user_id == User.id).filter(Vote.idea_id == idea_id).order_by(Vote.id.asc()).all()
    seen: set[int] = set()
    voters: list[User] = []
    for user in rows:
        if user.id in seen:
            continue
        seen.add(user.id)
        voters.append(user)
    return voters


def build_status_updated_message(app: Flask, idea: Idea, voter: User) -> MailMessage:
    idea_url = f"{app.config['APP_URL']}/ideas/{idea.slug}"
    body = app.jinja_env.get_template("emails/idea_status_updated.txt").render(
        idea=idea,
        status_name=idea.status.name,
        voter=voter,
        idea_url=idea_url,
    )
    return MailMessage(to=voter.email, subject=STATUS_UPDATED_SUBJECT, body=body)


def _deliver(app: Flask, message: MailMessage) -> None:
    try:
        get_mailer(app).send(message)
    except DeliveryError:
        logger.exception("Status update email to %s failed", message.to)


def notify_all_voters(app: Flask, idea_id: int) -> int:
    """Queue one status-updated email per distinct voter. Returns the number queued."""
    queue = get_queue(app)
    with app.app_context():
        with session_scope(app) as s:
            idea = s.get(Idea, idea_id)
            if idea is None:
                logger.warning("notify_all_voters: idea_id=%s no longer exists", idea_id)
                return 0
            messages = [build_status_updated_message(app, idea, voter) for voter in distinct_voters(s, idea_id)]

    for message in messages:
        queue.submit(_deliver, app, message)
    logger.info("Queued %s status update email(s) for idea_id=%s", len(messages), idea_id)
    return len(messages)


def dispatch_notify_all_voters(app: Flask, idea: Idea) -> None:
    get_queue(app).submit(notify_all_voters, app, idea.id)


def _on_idea_status_changed(sender: Any, idea: Idea, notify_voters: bool = False, **extra: Any) -> None:
    if notify_voters:
        dispatch_notify_all_voters(sender, idea)
