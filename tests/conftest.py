from contextlib import contextmanager
from datetime import datetime, timedelta

import pytest
from flask import template_rendered
from werkzeug.security import generate_password_hash

from app.ideaboard import create_app
from app.ideaboard.constants import DEFAULT_CATEGORIES, DEFAULT_STATUSES
from app.ideaboard.db import session_scope
from app.ideaboard.models import Base, Category, Comment, Idea, Status, User, Vote

CSRF = "test-csrf-token"


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("APP_URL", "http://ideas.test")
    monkeypatch.setenv("MAIL_BACKEND", "memory")
    monkeypatch.setenv("NOTIFY_QUEUE", "sync")
    for k in ("IDEAS_PER_PAGE", "COMMENTS_PER_PAGE", "SMTP_SERVER"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    app.config["TESTING"] = True

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        s.add_all([Category(name=name) for name in DEFAULT_CATEGORIES])
        for name, classes in DEFAULT_STATUSES:
            s.add(Status(name=name, classes=classes))
            s.flush()
        s.add_all(
            [
                User(name="Alice", email="alice@example.com", password_hash=generate_password_hash("pw")),
                User(name="Bob", email="bob@example.com", password_hash=generate_password_hash("pw")),
                User(
                    name="Admin",
                    email="admin@example.com",
                    password_hash=generate_password_hash("pw"),
                    is_admin=True,
                ),
            ]
        )
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def users(app):
    with session_scope(app) as s:
        return {u.name.lower(): u.id for u in s.query(User).all()}


@pytest.fixture()
def make_idea(app):
    """Insert an idea directly; later calls are newer than earlier ones."""
    counter = {"n": 0}

    def _make(title, *, user_id, category="Category 1", status="Open", description="Some description", slug=None):
        counter["n"] += 1
        created = datetime(2024, 1, 1) + timedelta(minutes=counter["n"])
        with session_scope(app) as s:
            cat = s.query(Category).filter(Category.name == category).one()
            st = s.query(Status).filter(Status.name == status).one()
            idea = Idea(
                user_id=user_id,
                category_id=cat.id,
                status_id=st.id,
                title=title,
                slug=slug or f"{title.lower().replace(' ', '-')}-{counter['n']}",
                description=description,
                created_at=created,
                updated_at=created,
            )
            s.add(idea)
            s.flush()
            return idea.id, idea.slug

    return _make


@pytest.fixture()
def add_comment(app):
    def _add(idea_id, user_id, body="A comment body"):
        with session_scope(app) as s:
            c = Comment(idea_id=idea_id, user_id=user_id, body=body)
            s.add(c)
            s.flush()
            return c.id

    return _add


@pytest.fixture()
def add_vote(app):
    def _add(idea_id, user_id):
        with session_scope(app) as s:
            s.add(Vote(idea_id=idea_id, user_id=user_id))

    return _add


def login_as(client, user_id):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["csrf_token"] = CSRF


def logout(client):
    with client.session_transaction() as sess:
        sess.pop("user_id", None)
        sess["csrf_token"] = CSRF


@contextmanager
def captured_templates(app):
    recorded = []

    def record(sender, template, context, **extra):
        recorded.append((template, context))

    template_rendered.connect(record, app)
    try:
        yield recorded
    finally:
        template_rendered.disconnect(record, app)
