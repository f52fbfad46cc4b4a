"""Tests for creating, editing, deleting ideas and changing their status."""
from app.ideaboard.db import session_scope
from app.ideaboard.models import AuditEvent, Category, Comment, Idea, Status, Vote
from app.ideaboard.signals import idea_status_changed

from conftest import CSRF, login_as, logout


def _category_id(app, name="Category 2"):
    with session_scope(app) as s:
        return s.query(Category).filter(Category.name == name).one().id


def _status_id(app, name):
    with session_scope(app) as s:
        return s.query(Status).filter(Status.name == name).one().id


def _idea_form(app, **overrides):
    data = {
        "title": "My First Idea",
        "category": str(_category_id(app)),
        "description": "A longer description",
        "csrf_token": CSRF,
    }
    data.update(overrides)
    return data


def _totals(app):
    with session_scope(app) as s:
        return s.query(Idea).count(), s.query(Comment).count(), s.query(Vote).count()


# ---------- Create ----------

def test_create_form_requires_login(client):
    r = client.get("/ideas/create")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]


def test_anonymous_create_is_forbidden(app, client):
    logout(client)
    r = client.post("/ideas/create", data=_idea_form(app))
    assert r.status_code == 403
    assert _totals(app)[0] == 0


def test_create_idea(app, client, users):
    login_as(client, users["alice"])
    r = client.post("/ideas/create", data=_idea_form(app))
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/")

    with session_scope(app) as s:
        idea = s.query(Idea).one()
        assert idea.slug == "my-first-idea"
        assert idea.user_id == users["alice"]
        assert idea.status.name == "Open"
        assert idea.category.name == "Category 2"

    r = client.get("/")
    assert b"Idea was added successfully." in r.data
    assert b"My First Idea" in r.data


def test_same_title_gets_distinct_slugs(app, client, users):
    login_as(client, users["alice"])
    client.post("/ideas/create", data=_idea_form(app, description="First description"))
    client.post("/ideas/create", data=_idea_form(app, description="Second description"))

    with session_scope(app) as s:
        slugs = sorted(i.slug for i in s.query(Idea).all())
    assert slugs == ["my-first-idea", "my-first-idea-2"]

    assert b"First description" in client.get("/ideas/my-first-idea").data
    assert b"Second description" in client.get("/ideas/my-first-idea-2").data


def test_title_matching_a_route_segment_gets_suffixed_slug(app, client, users):
    login_as(client, users["alice"])
    client.post("/ideas/create", data=_idea_form(app, title="Create", description="Reachable description"))

    with session_scope(app) as s:
        assert s.query(Idea).one().slug == "create-2"

    r = client.get("/ideas/create-2")
    assert r.status_code == 200
    assert b"Reachable description" in r.data


def test_create_validation_rerenders_form(app, client, users):
    login_as(client, users["alice"])
    r = client.post("/ideas/create", data=_idea_form(app, title="", category="", description="abc"))
    assert r.status_code == 200
    assert b"The title field is required." in r.data
    assert b"The category field is required." in r.data
    assert b"The description must be at least 4 characters." in r.data
    assert b"abc" in r.data
    assert _totals(app)[0] == 0


def test_create_rejects_unknown_category(app, client, users):
    login_as(client, users["alice"])
    r = client.post("/ideas/create", data=_idea_form(app, category="9999"))
    assert r.status_code == 200
    assert b"The selected category is invalid." in r.data
    assert _totals(app)[0] == 0


# ---------- Edit ----------

def test_author_edits_idea_and_slug_is_stable(app, client, make_idea, users):
    idea_id, slug = make_idea("Old title", user_id=users["alice"])
    login_as(client, users["alice"])

    assert client.get(f"/ideas/{slug}/edit").status_code == 200
    r = client.post(
        f"/ideas/{slug}/edit",
        data=_idea_form(app, title="New title", description="New description"),
    )
    assert r.status_code == 302
    assert r.headers["Location"].endswith(f"/ideas/{slug}")

    with session_scope(app) as s:
        idea = s.get(Idea, idea_id)
        assert (idea.title, idea.slug, idea.description) == ("New title", slug, "New description")


def test_non_author_cannot_edit(app, client, make_idea, users):
    idea_id, slug = make_idea("Old title", user_id=users["alice"])
    for name in ("bob", "admin"):
        login_as(client, users[name])
        assert client.get(f"/ideas/{slug}/edit").status_code == 403
        r = client.post(f"/ideas/{slug}/edit", data=_idea_form(app, title="Hijacked"))
        assert r.status_code == 403

    with session_scope(app) as s:
        assert s.get(Idea, idea_id).title == "Old title"


# ---------- Delete ----------

def test_delete_forbidden_for_other_users(app, client, make_idea, users, add_comment):
    idea_id, slug = make_idea("Keep me", user_id=users["alice"])
    add_comment(idea_id, users["bob"])

    login_as(client, users["bob"])
    r = client.post(f"/ideas/{slug}/delete", data={"csrf_token": CSRF})
    assert r.status_code == 403

    logout(client)
    r = client.post(f"/ideas/{slug}/delete", data={"csrf_token": CSRF})
    assert r.status_code == 403

    assert _totals(app) == (1, 1, 0)


def test_author_delete_cascades(app, client, make_idea, users, add_comment, add_vote):
    doomed_id, slug = make_idea("Doomed", user_id=users["alice"])
    kept_id, _ = make_idea("Kept", user_id=users["alice"])
    for _ in range(3):
        add_comment(doomed_id, users["bob"])
    add_comment(kept_id, users["bob"])
    add_vote(doomed_id, users["alice"])
    add_vote(doomed_id, users["bob"])
    add_vote(kept_id, users["bob"])
    ideas, comments, votes = _totals(app)

    login_as(client, users["alice"])
    r = client.post(f"/ideas/{slug}/delete", data={"csrf_token": CSRF})
    assert r.status_code == 302

    assert _totals(app) == (ideas - 1, comments - 3, votes - 2)
    with session_scope(app) as s:
        assert s.query(Comment).filter(Comment.idea_id == doomed_id).count() == 0
        assert s.query(Vote).filter(Vote.idea_id == doomed_id).count() == 0
        event = s.query(AuditEvent).filter(AuditEvent.action == "idea.delete").one()
        assert event.entity_id == str(doomed_id)

    r = client.get("/")
    assert b"Idea was deleted successfully." in r.data
    assert client.get(f"/ideas/{slug}").status_code == 404


def test_admin_can_delete_any_idea(app, client, make_idea, users):
    _, slug = make_idea("Spam", user_id=users["bob"])
    login_as(client, users["admin"])
    r = client.post(f"/ideas/{slug}/delete", data={"csrf_token": CSRF})
    assert r.status_code == 302
    assert _totals(app)[0] == 0


def test_delete_control_visibility(client, make_idea, users):
    _, slug = make_idea("Visible", user_id=users["alice"])

    assert b"Delete Idea" not in client.get(f"/ideas/{slug}").data

    login_as(client, users["bob"])
    assert b"Delete Idea" not in client.get(f"/ideas/{slug}").data

    login_as(client, users["alice"])
    body = client.get(f"/ideas/{slug}").data
    assert b"Delete Idea" in body
    assert b"Edit Idea" in body

    login_as(client, users["admin"])
    body = client.get(f"/ideas/{slug}").data
    assert b"Delete Idea" in body
    assert b"Edit Idea" not in body


# ---------- Status ----------

def test_set_status_requires_admin(app, client, make_idea, users):
    idea_id, slug = make_idea("Status", user_id=users["alice"])
    login_as(client, users["alice"])
    r = client.post(
        f"/ideas/{slug}/status",
        data={"status": str(_status_id(app, "Closed")), "csrf_token": CSRF},
    )
    assert r.status_code == 403
    with session_scope(app) as s:
        assert s.get(Idea, idea_id).status.name == "Open"


def test_admin_sets_status(app, client, make_idea, users):
    idea_id, slug = make_idea("Status", user_id=users["alice"])
    login_as(client, users["admin"])

    seen = []

    def receiver(sender, idea, notify_voters=False, **extra):
        seen.append((idea.id, notify_voters))

    with idea_status_changed.connected_to(receiver):
        r = client.post(
            f"/ideas/{slug}/status",
            data={"status": str(_status_id(app, "In Progress")), "csrf_token": CSRF},
            follow_redirects=True,
        )
        # Same status again: nothing changes and no signal.
        client.post(
            f"/ideas/{slug}/status",
            data={"status": str(_status_id(app, "In Progress")), "csrf_token": CSRF},
        )

    assert b"Status was updated successfully." in r.data
    assert seen == [(idea_id, False)]
    with session_scope(app) as s:
        assert s.get(Idea, idea_id).status.name == "In Progress"


def test_set_unknown_status_is_404(app, client, make_idea, users):
    _, slug = make_idea("Status", user_id=users["alice"])
    login_as(client, users["admin"])
    r = client.post(f"/ideas/{slug}/status", data={"status": "9999", "csrf_token": CSRF})
    assert r.status_code == 404
