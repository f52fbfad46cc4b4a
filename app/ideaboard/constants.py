"""
Central constants for the idea board.
"""
from __future__ import annotations

# Filter sentinels: selecting these removes the constraint on that dimension.
ALL_CATEGORIES = "All Categories"
ALL_STATUSES = "All Statuses"

MIN_TITLE_LENGTH = 4
MIN_DESCRIPTION_LENGTH = 4
MIN_COMMENT_LENGTH = 4

STATUS_UPDATED_SUBJECT = "An idea you voted for has a new status"

# Path segments under /ideas/ owned by static routes; an idea may never take one as its slug.
RESERVED_SLUGS = frozenset({"create"})

# Seed data (scripts/init_db.py). Status order matters: the first one is the initial status.
DEFAULT_CATEGORIES = ("Category 1", "Category 2", "Category 3", "Category 4")
DEFAULT_STATUSES = (
    ("Open", "bg-gray-200"),
    ("Considering", "bg-purple text-white"),
    ("In Progress", "bg-yellow text-white"),
    ("Implemented", "bg-green text-white"),
    ("Closed", "bg-red text-white"),
)
