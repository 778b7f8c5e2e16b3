"""Create the first instructor account, or grant admin to an existing one.

    python scripts/seed_db.py admin@school.example s3cret
    python scripts/seed_db.py --grant teacher@school.example
"""
from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from ce_attendance.database.bootstrap import ensure_admin, grant_admin
from ce_attendance.main import load_settings


def main(argv: list[str]) -> int:
    settings = load_settings()
    db_config = dict(settings["DB_CONFIG"])

    if len(argv) == 2 and argv[0] == "--grant":
        if not grant_admin(db_config, email=argv[1]):
            print(f"No change: {argv[1]} has no profile or is already an admin")
            return 1
        print(f"OK: {argv[1]} is now an admin")
        return 0

    email = argv[0] if argv else settings.get("SEED_ADMIN_EMAIL", "")
    password = argv[1] if len(argv) > 1 else settings.get("SEED_ADMIN_PASSWORD", "")
    user_id = ensure_admin(db_config, email=email, password=password)
    print(f"OK: admin {email} ready (user_id={user_id})")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
