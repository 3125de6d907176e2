"""
Authentication endpoints for user registration and login.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.models import get_db
from app.schemas.auth import UserRegister, UserLogin, Token, UserResponse
from app.core.accounts import authenticate, register_user as create_user_account
from app.core.auth.security import create_access_token
from app.core.db_error_handling import handle_db_error
from app.core.error_responses import ErrorMessages, raise_unauthorized

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
def register_user(user_data: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user account with the USER role.

    Args:
        user_data: User registration data
        db: Database session

    Returns:
        Created user information

    Raises:
        HTTPException: 409 if email, username or personal ID already exists
    """
    with handle_db_error(db, "register user"):
        user = create_user_account(
            db,
            email=user_data.email,
            username=user_data.username,
            password=user_data.password,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            personal_id=user_data.personal_id,
            phone_number=user_data.phone_number,
        )
        return UserResponse.model_validate(user)


@router.post("/login", response_model=Token)
def login_user(credentials: UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate by personal ID and password and return an access token.

    The token carries the user id and role names.

    Raises:
        HTTPException: 401 if credentials are invalid
    """
    user = authenticate(db, credentials.personal_id, credentials.password)
    if user is None:
        logger.info("Rejected login attempt", extra={"user_identifier": credentials.personal_id})
        raise_unauthorized(ErrorMessages.INVALID_CREDENTIALS)

    access_token = create_access_token(user.id, user.role_names)
    return Token(access_token=access_token, token_type="bearer")
