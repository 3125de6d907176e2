"""
User and role administration endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core import accounts
from app.core.db_error_handling import handle_db_error
from app.models import get_db
from app.schemas.admin import AssignRoleRequest, MessageResponse
from app.schemas.auth import UserResponse

from ._dependencies import Principal, logger, require_admin

router = APIRouter()


@router.get("/users", response_model=List[UserResponse])
def list_users(
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    List all users with their role names, newest first.
    """
    with handle_db_error(db, "fetch users"):
        return [UserResponse.model_validate(user) for user in accounts.list_users(db)]


@router.post(
    "/assign-role",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def assign_role(
    request: AssignRoleRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Grant a role to a user.

    Raises:
        HTTPException: 404 if the role or user is unknown, 409 if already held
    """
    with handle_db_error(db, "assign role"):
        accounts.assign_role(db, request.user_id, request.role_name)
        return MessageResponse(
            message=f"Role '{request.role_name}' assigned to user {request.user_id}."
        )


@router.delete("/users/{user_id}/roles/{role_name}", response_model=MessageResponse)
def revoke_role(
    user_id: int,
    role_name: str,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Revoke a role from a user.

    Raises:
        HTTPException: 404 if the role is unknown or not held by the user
    """
    with handle_db_error(db, "revoke role"):
        accounts.revoke_role(db, user_id, role_name)
        return MessageResponse(
            message=f"Role {role_name.upper()} revoked from user successfully."
        )


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Delete a user account with its roles and attempts.

    Raises:
        HTTPException: 403 when deleting your own account, 404 if not found
    """
    with handle_db_error(db, "delete user"):
        accounts.delete_user(db, principal, user_id)
        logger.info(f"Admin {principal.user_id} deleted user {user_id}")
        return MessageResponse(message="User deleted successfully.")
