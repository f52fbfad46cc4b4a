"""Tests for the idea list: filters, ordering, pagination and counts."""
import pytest

from conftest import captured_templates, login_as


def _listed(app, client, url):
    with captured_templates(app) as templates:
        r = client.get(url)
    assert r.status_code == 200
    ctx = next(ctx for t, ctx in templates if t.name == "ideas/index.html")
    return ctx


def _titles(ctx):
    return [row.idea.title for row in ctx["ideas"].rows]


@pytest.fixture()
def mixed_ideas(make_idea, users):
    uid = users["alice"]
    make_idea("Idea A", user_id=uid, category="Category 1", status="Open")
    make_idea("Idea B", user_id=uid, category="Category 2", status="Considering")
    make_idea("Idea C", user_id=uid, category="Category 2", status="Open")
    make_idea("Idea D", user_id=uid, category="Category 3", status="Considering")
    make_idea("Idea E", user_id=uid, category="Category 2", status="Considering")


def test_list_newest_first_without_filters(app, client, mixed_ideas):
    ctx = _listed(app, client, "/")
    assert _titles(ctx) == ["Idea E", "Idea D", "Idea C", "Idea B", "Idea A"]
    assert ctx["category_filter"] == "All Categories"
    assert ctx["status_filter"] == "All Statuses"


def test_filter_by_category(app, client, mixed_ideas):
    ctx = _listed(app, client, "/?category=Category%202")
    assert _titles(ctx) == ["Idea E", "Idea C", "Idea B"]


def test_filter_by_status(app, client, mixed_ideas):
    ctx = _listed(app, client, "/?status=Considering")
    assert _titles(ctx) == ["Idea E", "Idea D", "Idea B"]


def test_filter_by_category_and_status(app, client, mixed_ideas):
    ctx = _listed(app, client, "/?category=Category%202&status=Considering")
    assert _titles(ctx) == ["Idea E", "Idea B"]


def test_sentinels_and_empty_values_impose_no_constraint(app, client, mixed_ideas):
    ctx = _listed(app, client, "/?category=All%20Categories&status=All%20Statuses")
    assert len(ctx["ideas"].rows) == 5
    ctx = _listed(app, client, "/?category=&status=")
    assert len(ctx["ideas"].rows) == 5


def test_unknown_category_matches_nothing(app, client, mixed_ideas):
    ctx = _listed(app, client, "/?category=Nope")
    assert ctx["ideas"].rows == []
    assert ctx["ideas"].total == 0


def test_pagination_offsets(app, client, make_idea, users):
    app.config["IDEAS_PER_PAGE"] = 2
    for i in range(5):
        make_idea(f"Paged {i}", user_id=users["alice"])

    assert _titles(_listed(app, client, "/")) == ["Paged 4", "Paged 3"]
    assert _titles(_listed(app, client, "/?page=2")) == ["Paged 2", "Paged 1"]
    assert _titles(_listed(app, client, "/?page=3")) == ["Paged 0"]

    ctx = _listed(app, client, "/?page=4")
    assert ctx["ideas"].rows == []
    assert ctx["ideas"].total == 5


@pytest.mark.parametrize("raw", ["abc", "0", "-3", ""])
def test_invalid_page_clamps_to_first(app, client, make_idea, users, raw):
    make_idea("Only idea", user_id=users["alice"])
    ctx = _listed(app, client, f"/?page={raw}")
    assert ctx["ideas"].page == 1
    assert _titles(ctx) == ["Only idea"]


def test_pagination_summary_and_links_keep_filters(app, client, make_idea, users):
    app.config["IDEAS_PER_PAGE"] = 2
    for i in range(3):
        make_idea(f"Considered {i}", user_id=users["alice"], status="Considering")

    r = client.get("/?status=Considering")
    assert b"Showing 1 to 2 of 3 results" in r.data
    assert b"status=Considering" in r.data
    assert b"page=2" in r.data


def test_rows_carry_counts(app, client, make_idea, users, add_comment, add_vote):
    idea_id, _ = make_idea("Counted", user_id=users["alice"])
    add_comment(idea_id, users["bob"])
    add_comment(idea_id, users["alice"])
    add_vote(idea_id, users["bob"])

    ctx = _listed(app, client, "/")
    row = ctx["ideas"].rows[0]
    assert row.comments_count == 2
    assert row.votes_count == 1
    assert row.status_name == "Open"
    assert row.category_name == "Category 1"

    r = client.get("/")
    assert b"2 comments" in r.data
    assert b'<div class="text-sm font-bold leading-none">1</div>' in r.data


def test_rows_flag_viewer_vote(app, client, make_idea, users, add_vote):
    voted_id, _ = make_idea("Voted", user_id=users["alice"])
    make_idea("Not voted", user_id=users["alice"])
    add_vote(voted_id, users["bob"])

    login_as(client, users["bob"])
    flags = {row.idea.title: row.voted_by_viewer for row in _listed(app, client, "/")["ideas"].rows}
    assert flags == {"Voted": True, "Not voted": False}


def test_status_counts(app, client, mixed_ideas):
    ctx = _listed(app, client, "/")
    counts = ctx["status_counts"]
    assert counts["Open"] == 2
    assert counts["Considering"] == 3
    assert counts["Closed"] == 0
    assert counts["all_statuses"] == 5

    r = client.get("/")
    assert b"All Ideas (5)" in r.data
    assert b"Considering (3)" in r.data
