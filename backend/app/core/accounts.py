"""
User accounts and role administration.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.auth import Principal
from app.core.auth.security import hash_password, verify_password
from app.core.error_responses import ErrorMessages
from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from app.models import Role, RoleName, User, UserRole

logger = logging.getLogger(__name__)

ROLE_DESCRIPTIONS = {
    RoleName.USER: "Test-taker",
    RoleName.ADMIN: "Administrator",
}


def get_or_create_role(db: Session, role_name: RoleName) -> Role:
    """Return the named role, inserting it (uncommitted) if missing."""
    role = db.query(Role).filter(Role.name == role_name.value).first()
    if role is None:
        role = Role(name=role_name.value, description=ROLE_DESCRIPTIONS.get(role_name))
        db.add(role)
        db.flush()
    return role


def register_user(
    db: Session,
    *,
    email: str,
    username: str,
    password: str,
    first_name: str,
    last_name: str,
    personal_id: str,
    phone_number: str,
) -> User:
    """
    Create a user account with the USER role.

    Raises:
        ConflictError: If the email, username or personal ID is taken
    """
    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        personal_id=personal_id,
        phone_number=phone_number,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError(ErrorMessages.USER_ALREADY_EXISTS) from None

    user_role = get_or_create_role(db, RoleName.USER)
    db.add(UserRole(user_id=user.id, role_id=user_role.id))
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


def authenticate(db: Session, personal_id: str, password: str) -> Optional[User]:
    """
    Check login credentials.

    Returns:
        The user if the personal ID exists and the password matches, else None
    """
    user = (
        db.query(User)
        .options(joinedload(User.roles).joinedload(UserRole.role))
        .filter(User.personal_id == personal_id)
        .first()
    )
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def list_users(db: Session) -> List[User]:
    """All users with their roles, newest first."""
    return (
        db.query(User)
        .options(joinedload(User.roles).joinedload(UserRole.role))
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


def _get_role_or_404(db: Session, role_name: str) -> Role:
    role = db.query(Role).filter(Role.name == role_name.strip().upper()).first()
    if role is None:
        raise NotFoundError(ErrorMessages.role_not_found(role_name))
    return role


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(ErrorMessages.USER_NOT_FOUND)
    return user


def assign_role(db: Session, user_id: int, role_name: str) -> UserRole:
    """
    Grant a role to a user.

    Raises:
        NotFoundError: If the role or the user does not exist
        ConflictError: If the user already holds the role
    """
    role = _get_role_or_404(db, role_name)
    _get_user_or_404(db, user_id)

    user_role = UserRole(user_id=user_id, role_id=role.id)
    db.add(user_role)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(ErrorMessages.role_already_assigned(role.name)) from None

    logger.info(f"Assigned role {role.name} to user {user_id}")
    return user_role


def revoke_role(db: Session, user_id: int, role_name: str) -> None:
    """
    Remove a role from a user.

    Raises:
        NotFoundError: If the role does not exist or the user does not hold it
    """
    role = _get_role_or_404(db, role_name)
    user_role = (
        db.query(UserRole)
        .filter(UserRole.user_id == user_id, UserRole.role_id == role.id)
        .first()
    )
    if user_role is None:
        raise NotFoundError(ErrorMessages.role_not_assigned(role.name))

    db.delete(user_role)
    db.commit()
    logger.info(f"Revoked role {role.name} from user {user_id}")


def delete_user(db: Session, principal: Principal, user_id: int) -> None:
    """
    Delete a user account together with its roles and attempts.

    Raises:
        PermissionDeniedError: If an admin tries to delete their own account
        NotFoundError: If the user does not exist
    """
    if user_id == principal.user_id:
        raise PermissionDeniedError(ErrorMessages.CANNOT_DELETE_SELF)

    user = _get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} deleted by admin {principal.user_id}")


def seed_roles(db: Session) -> List[Role]:
    """Ensure every RoleName exists. Safe to run repeatedly."""
    roles = [get_or_create_role(db, role_name) for role_name in RoleName]
    db.commit()
    return roles
