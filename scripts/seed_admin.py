import argparse
import sys
from pathlib import Path

from sqlalchemy import select

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.core.config import get_settings
from app.core.security import hash_password
from app.db.session import session_scope
from app.models.admin import Admin


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Create an HTML blocks admin or reset its password.")
    parser.add_argument("--login", default=settings.bootstrap_admin_login)
    parser.add_argument("--password", default=settings.bootstrap_admin_password)
    parser.add_argument("--role", default="admin")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    with session_scope() as db:
        admin = db.scalar(select(Admin).where(Admin.login == args.login))
        action = "updated" if admin else "created"
        if admin is None:
            admin = Admin(login=args.login, role=args.role, password_hash="")
        admin.password_hash = hash_password(args.password)
        admin.role = args.role
        db.add(admin)
    print(f"Admin {args.login} {action}.")


if __name__ == "__main__":
    main()
