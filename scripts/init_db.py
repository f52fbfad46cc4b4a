import os
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.ideaboard.constants import DEFAULT_CATEGORIES, DEFAULT_STATUSES  # noqa: E402
from app.ideaboard.models import Category, Status, User  # noqa: E402
from scripts._db_utils import script_session  # noqa: E402


def seed_only(*, database_url: str | None = None) -> None:
    """
    Seed categories, statuses and the admin user in an idempotent way.
    Does NOT overwrite an existing admin user's password.
    """
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@example.com").strip().lower()
    admin_name = (os.environ.get("ADMIN_NAME") or "Administrator").strip()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///ideaboard.db").strip()

    with script_session(db_url) as s:
        for name in DEFAULT_CATEGORIES:
            if not s.query(Category).filter(Category.name == name).one_or_none():
                s.add(Category(name=name))

        # Statuses are inserted in order; the lowest id becomes the initial status of new ideas.
        for name, classes in DEFAULT_STATUSES:
            st = s.query(Status).filter(Status.name == name).one_or_none()
            if not st:
                s.add(Status(name=name, classes=classes))
                s.flush()

        user = s.query(User).filter(User.email == admin_email).one_or_none()
        if not user:
            user = User(
                name=admin_name,
                email=admin_email,
                password_hash=generate_password_hash(admin_password),
                is_admin=True,
                is_active=True,
            )
            s.add(user)
        elif not user.is_admin:
            user.is_admin = True

    print("Initialized database (seed_only).")
    print(f"Admin email: {admin_email}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
