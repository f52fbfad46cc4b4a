import pytest

from app.ideaboard.config import load_config
from app.ideaboard.models import User
from app.ideaboard.navigation import NavigationContext, compute_back_url, navigation_from_session, record_navigation
from app.ideaboard.policy import authorize
from app.ideaboard.utils import is_local_path, parse_page, slugify


@pytest.mark.parametrize(
    "title,expected",
    [
        ("My First Idea", "my-first-idea"),
        ("  Dark   mode!! ", "dark-mode"),
        ("Café au lait", "cafe-au-lait"),
        ("???", "idea"),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected


@pytest.mark.parametrize("raw,expected", [(None, 1), ("", 1), ("x", 1), ("0", 1), ("-2", 1), ("3", 3)])
def test_parse_page(raw, expected):
    assert parse_page(raw) == expected


def test_is_local_path():
    assert is_local_path("/ideas/x?page=2")
    assert not is_local_path("//evil.example.com")
    assert not is_local_path("https://evil.example.com/")
    assert not is_local_path("")


class _Owned:
    def __init__(self, user_id):
        self.user_id = user_id


def _user(uid, *, admin=False, active=True):
    return User(id=uid, name=f"u{uid}", email=f"u{uid}@example.com", password_hash="x", is_admin=admin, is_active=active)


def test_policy_matrix():
    author, other, admin = _user(1), _user(2), _user(3, admin=True)
    idea = _Owned(1)
    comment = _Owned(1)

    for action in ("idea.create", "idea.vote", "comment.create"):
        assert authorize(other, action, idea)
        assert not authorize(None, action, idea)

    assert authorize(author, "idea.update", idea)
    assert not authorize(other, "idea.update", idea)
    assert not authorize(admin, "idea.update", idea)

    assert authorize(author, "idea.delete", idea)
    assert authorize(admin, "idea.delete", idea)
    assert not authorize(other, "idea.delete", idea)

    assert authorize(admin, "idea.set_status", idea)
    assert not authorize(author, "idea.set_status", idea)

    assert authorize(author, "comment.update", comment)
    assert not authorize(other, "comment.update", comment)
    assert not authorize(admin, "comment.update", comment)


def test_policy_denies_inactive_and_unknown_actions():
    assert not authorize(_user(1, active=False), "idea.create")
    assert not authorize(_user(1, admin=True), "idea.launch_rockets")


def test_navigation_tracks_previous_distinct_page():
    sess = {}
    record_navigation(sess, "/?status=Open")
    record_navigation(sess, "/ideas/a")
    assert navigation_from_session(sess, "/ideas/a") == NavigationContext(previous_url="/?status=Open")
    assert navigation_from_session(sess, "/ideas/b") == NavigationContext(previous_url="/ideas/a")

    # Same path again (reload or ?page=2) keeps the list as previous.
    record_navigation(sess, "/ideas/a?page=2")
    assert navigation_from_session(sess, "/ideas/a").previous_url == "/?status=Open"


def test_compute_back_url():
    assert compute_back_url(None, "/") == "/"
    assert compute_back_url(NavigationContext(), "/") == "/"
    assert compute_back_url(NavigationContext("/?category=Category%201"), "/") == "/?category=Category%201"
    assert compute_back_url(NavigationContext("/ideas/other"), "/") == "/"


def test_config_defaults(monkeypatch):
    for k in ("IDEAS_PER_PAGE", "COMMENTS_PER_PAGE", "MAIL_BACKEND", "NOTIFY_QUEUE", "NOTIFY_WORKERS", "DATABASE_URL"):
        monkeypatch.delenv(k, raising=False)
    cfg = load_config()
    assert cfg["IDEAS_PER_PAGE"] == 10
    assert cfg["COMMENTS_PER_PAGE"] == 15
    assert cfg["MAIL_BACKEND"] == "console"
    assert cfg["NOTIFY_QUEUE"] == "thread"
    assert cfg["NOTIFY_WORKERS"] == 4
    assert cfg["DATABASE_URL"] == "sqlite:///ideaboard.db"


def test_config_ignores_bad_numbers(monkeypatch):
    monkeypatch.setenv("IDEAS_PER_PAGE", "lots")
    monkeypatch.setenv("COMMENTS_PER_PAGE", "0")
    cfg = load_config()
    assert cfg["IDEAS_PER_PAGE"] == 10
    assert cfg["COMMENTS_PER_PAGE"] == 1
