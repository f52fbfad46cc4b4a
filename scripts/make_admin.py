#!/usr/bin/env python3
"""Flag a user as admin (idempotent).

Usage:
  python scripts/make_admin.py --email someone@example.com
  python scripts/make_admin.py --email someone@example.com --revoke
"""

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.ideaboard.models import User  # noqa: E402
from scripts._db_utils import script_session  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True, help="User email to flag as admin")
    parser.add_argument("--revoke", action="store_true", help="Remove the admin flag instead")
    args = parser.parse_args()

    db_url = (os.environ.get("DATABASE_URL") or "sqlite:///ideaboard.db").strip()
    with script_session(db_url) as s:
        user = s.query(User).filter(User.email.ilike(args.email)).one_or_none()
        if not user:
            print(f"User not found: {args.email}")
            return
        wanted = not args.revoke
        if user.is_admin == wanted:
            print(f"No change for {args.email} (is_admin={user.is_admin})")
            return
        user.is_admin = wanted
        print(f"{args.email}: is_admin={wanted}")


if __name__ == "__main__":
    main()
