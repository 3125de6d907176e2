"""
Pydantic schemas for authentication endpoints.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List
from datetime import datetime

from app.core.validators import (
    PasswordValidator,
    StringSanitizer,
    EmailValidator,
    IdentifierValidator,
    validate_no_sql_injection,
)


class UserRegister(BaseModel):
    """Schema for user registration request."""

    email: EmailStr = Field(..., description="User email address")
    username: str = Field(..., min_length=3, max_length=100, description="Username")
    password: str = Field(
        ...,
        min_length=PasswordValidator.MIN_LENGTH,
        max_length=PasswordValidator.MAX_LENGTH,
        description=f"User password ({PasswordValidator.MIN_LENGTH}-{PasswordValidator.MAX_LENGTH} characters)",
    )
    first_name: str = Field(
        ..., min_length=1, max_length=100, description="User first name"
    )
    last_name: str = Field(
        ..., min_length=1, max_length=100, description="User last name"
    )
    personal_id: str = Field(
        ..., min_length=4, max_length=50, description="Personal ID used to log in"
    )
    phone_number: str = Field(
        ..., min_length=6, max_length=30, description="Contact phone number"
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate and normalize email."""
        v = EmailValidator.normalize_email(v)
        if not validate_no_sql_injection(v):
            raise ValueError("Invalid email format")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password strength."""
        is_valid, error_message = PasswordValidator.validate(v)
        if not is_valid:
            raise ValueError(error_message)
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def sanitize_name(cls, v: str) -> str:
        """Sanitize name fields."""
        sanitized = StringSanitizer.sanitize_name(v)

        if not sanitized:
            raise ValueError("Name contains invalid characters")

        if not validate_no_sql_injection(sanitized):
            raise ValueError("Name contains invalid characters")

        return sanitized

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return IdentifierValidator.validate_username(v)

    @field_validator("personal_id")
    @classmethod
    def validate_personal_id(cls, v: str) -> str:
        return IdentifierValidator.validate_personal_id(v)

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        return IdentifierValidator.validate_phone_number(v)


class UserLogin(BaseModel):
    """Schema for user login request."""

    personal_id: str = Field(..., min_length=1, description="Personal ID")
    password: str = Field(..., min_length=1, description="User password")


class Token(BaseModel):
    """Schema for token response."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class UserResponse(BaseModel):
    """Schema for user response."""

    id: int = Field(..., description="User ID")
    email: str = Field(..., description="User email address")
    username: str = Field(..., description="Username")
    first_name: str = Field(..., description="User first name")
    last_name: str = Field(..., description="User last name")
    personal_id: str = Field(..., description="Personal ID")
    phone_number: str = Field(..., description="Contact phone number")
    created_at: datetime = Field(..., description="Account creation timestamp")
    roles: List[str] = Field(
        default_factory=list,
        validation_alias="role_names",
        description="Role names granted to the user",
    )

    class Config:
        """Pydantic configuration."""

        from_attributes = True  # Allows conversion from ORM models
        populate_by_name = True
