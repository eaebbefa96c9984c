"""
Out-of-band user management.

There is no registration endpoint; accounts are created here:

    python -m social_platform.social_platform.social_service.cli create-user \
        --username alice --email alice@example.com --password 's3cret'
"""
import argparse
import logging
import sys

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .auth import hash_password
from .config import get_settings
from .db import build_engine, build_session_factory, init_db
from .models import User

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    pass


def create_user(db: Session, username: str, email: str, password: str) -> User:
    """
    Insert a user with a hashed password.

    Raises:
        DuplicateUserError: If the username or email is already taken
    """
    existing = db.query(User).filter(or_(User.email == email, User.username == username)).first()
    if existing:
        field = "Email" if existing.email == email else "Username"
        raise DuplicateUserError(f"{field} already exists")

    user = User(username=username, email=email, password=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user: user_id=%s username=%s", user.id, user.username)
    return user


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Social service user management")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Create a user account")
    create.add_argument("--username", required=True)
    create.add_argument("--email", required=True)
    create.add_argument("--password", required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    settings = get_settings()
    settings.validate_for_startup()
    engine = build_engine(settings)
    init_db(engine)

    db = build_session_factory(engine)()
    try:
        user = create_user(db, args.username, args.email, args.password)
    except DuplicateUserError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()

    print(f"Created user id={user.id} username={user.username}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
