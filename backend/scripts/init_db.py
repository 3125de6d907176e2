#!/usr/bin/env python3
"""
Initialize the database: create tables and seed the USER and ADMIN roles.

Optionally grants ADMIN to an existing account so the first administrator
can log in to the template builder.

Usage:
    DATABASE_URL="postgresql://..." python scripts/init_db.py

    # Also grant ADMIN to the account with this personal ID
    DATABASE_URL="postgresql://..." python scripts/init_db.py --admin-personal-id A1234

    # Show what would happen without writing
    python scripts/init_db.py --dry-run
"""

import argparse
import logging
import os
import sys
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from app.core.accounts import get_or_create_role, seed_roles  # noqa: E402
from app.core.db_error_handling import DatabaseOperationError  # noqa: E402
from app.core.logging_config import setup_logging  # noqa: E402
from app.models import Base, RoleName, SessionLocal, User, UserRole, engine  # noqa: E402

logger = logging.getLogger("app.scripts.init_db")


def grant_admin(db, personal_id: str) -> bool:
    """Grant ADMIN to the user with this personal ID.

    Returns:
        True if the role was granted, False if the user already had it
    """
    user = db.query(User).filter(User.personal_id == personal_id).first()
    if user is None:
        raise DatabaseOperationError(
            "grant admin role",
            LookupError(personal_id),
            message=f"No user with personal ID {personal_id!r}",
        )

    admin_role = get_or_create_role(db, RoleName.ADMIN)
    if any(user_role.role_id == admin_role.id for user_role in user.roles):
        return False

    db.add(UserRole(user_id=user.id, role_id=admin_role.id))
    db.commit()
    return True


def run(admin_personal_id: Optional[str], dry_run: bool) -> int:
    if dry_run:
        logger.info(f"Would create tables: {', '.join(sorted(Base.metadata.tables))}")
        logger.info(f"Would seed roles: {', '.join(r.value for r in RoleName)}")
        if admin_personal_id:
            logger.info(f"Would grant ADMIN to personal ID {admin_personal_id}")
        return 0

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        raise DatabaseOperationError("create tables", e) from e

    db = SessionLocal()
    try:
        try:
            roles = seed_roles(db)
        except SQLAlchemyError as e:
            db.rollback()
            raise DatabaseOperationError("seed roles", e) from e
        logger.info(f"Roles present: {', '.join(role.name for role in roles)}")

        if admin_personal_id:
            if grant_admin(db, admin_personal_id):
                logger.info(f"Granted ADMIN to personal ID {admin_personal_id}")
            else:
                logger.info(f"Personal ID {admin_personal_id} already has ADMIN")
    finally:
        db.close()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--admin-personal-id",
        help="Grant the ADMIN role to the user with this personal ID",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the planned changes without touching the database",
    )
    args = parser.parse_args()

    setup_logging()
    try:
        return run(args.admin_personal_id, args.dry_run)
    except DatabaseOperationError as e:
        logger.error(e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
