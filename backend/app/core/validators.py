"""
Input validation and sanitization utilities.
"""

import re
import html
from typing import Optional


class PasswordValidator:
    """
    Password strength validator.

    A password needs at least one lowercase letter, one uppercase letter,
    one digit and one special character.
    """

    MIN_LENGTH = 8
    MAX_LENGTH = 128

    SPECIAL_CHARACTERS = "@$!%*?&#^()_+-=[]{};:'\",.<>/\\|`~"

    # Common weak passwords to reject
    COMMON_PASSWORDS = {
        "password1!",
        "password123!",
        "p@ssw0rd",
        "p@ssword1",
        "qwerty123!",
        "welcome1!",
        "admin123!",
    }

    @classmethod
    def validate(cls, password: str) -> tuple[bool, Optional[str]]:
        """
        Validate password strength.

        Args:
            password: Password to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if len(password) < cls.MIN_LENGTH:
            return False, f"Password must be at least {cls.MIN_LENGTH} characters long"

        if len(password) > cls.MAX_LENGTH:
            return False, f"Password must not exceed {cls.MAX_LENGTH} characters"

        if password.lower() in cls.COMMON_PASSWORDS:
            return False, "Password is too common. Please choose a stronger password"

        if not re.search(r"[a-z]", password):
            return False, "Password must contain at least one lowercase letter"

        if not re.search(r"[A-Z]", password):
            return False, "Password must contain at least one uppercase letter"

        if not re.search(r"\d", password):
            return False, "Password must contain at least one digit"

        if not any(char in cls.SPECIAL_CHARACTERS for char in password):
            return False, "Password must contain at least one special character"

        return True, None


class StringSanitizer:
    """
    String sanitization utilities for preventing XSS and injection attacks.
    """

    # Control characters to strip (except newlines, tabs, carriage returns)
    CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

    @classmethod
    def _base_sanitize(cls, value: str, escape_html: bool = True) -> str:
        """
        Strip control characters and surrounding whitespace, then optionally
        escape HTML entities.
        """
        value = cls.CONTROL_CHARS_PATTERN.sub("", value)
        value = value.strip()

        if escape_html:
            value = html.escape(value)

        return value

    @classmethod
    def sanitize_string(cls, value: str, allow_html: bool = False) -> str:
        """
        Sanitize free-text input (template titles and descriptions).

        Args:
            value: String to sanitize
            allow_html: Whether to allow HTML entities (default: False)

        Returns:
            Sanitized string
        """
        return cls._base_sanitize(value, escape_html=not allow_html)

    @classmethod
    def sanitize_name(cls, name: str) -> str:
        """
        Sanitize name fields (first_name, last_name).

        Args:
            name: Name to sanitize

        Returns:
            Sanitized name
        """
        name = cls._base_sanitize(name, escape_html=False)

        # Allow only letters, spaces, hyphens, and apostrophes
        name = re.sub(r"[^a-zA-ZÀ-ÿ\s\-']", "", name)

        name = re.sub(r"\s+", " ", name)

        return html.escape(name)


class EmailValidator:
    """
    Email normalization utilities.
    """

    @classmethod
    def normalize_email(cls, email: str) -> str:
        """Lowercase an email address and remove all whitespace."""
        return email.lower().strip().replace(" ", "")


class IdentifierValidator:
    """
    Validation for login and contact identifiers.
    """

    USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,100}$")
    PERSONAL_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]{4,50}$")
    PHONE_PATTERN = re.compile(r"^\+?[0-9 ()-]{6,30}$")

    @classmethod
    def validate_username(cls, value: str) -> str:
        value = value.strip()
        if not cls.USERNAME_PATTERN.match(value):
            raise ValueError(
                "Username must be 3-100 characters of letters, digits, '.', '_' or '-'"
            )
        return value

    @classmethod
    def validate_personal_id(cls, value: str) -> str:
        value = value.strip()
        if not cls.PERSONAL_ID_PATTERN.match(value):
            raise ValueError("Personal ID must be 4-50 letters, digits or '-'")
        return value

    @classmethod
    def validate_phone_number(cls, value: str) -> str:
        value = value.strip()
        if not cls.PHONE_PATTERN.match(value):
            raise ValueError("Phone number contains invalid characters")
        return value


class TextValidator:
    """
    Text validation utilities for schema field validation.
    """

    @staticmethod
    def validate_non_empty_text(value: str, field_name: str = "Text") -> str:
        """
        Validate that text is not empty or whitespace-only.

        Args:
            value: Text to validate
            field_name: Name of the field for error messages

        Returns:
            The stripped value if valid

        Raises:
            ValueError: If the text is empty or whitespace-only
        """
        stripped = value.strip()
        if not stripped:
            raise ValueError(f"{field_name} cannot be empty or whitespace-only")
        return stripped


def validate_no_sql_injection(value: str) -> bool:
    """
    Basic SQL injection pattern detection.

    Note: This is a defense-in-depth measure. The primary protection
    against SQL injection is the use of parameterized queries via SQLAlchemy ORM.

    Args:
        value: String to check for SQL injection patterns

    Returns:
        True if safe, False if suspicious patterns detected
    """
    sql_patterns = [
        r"(\b(SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|EXEC|EXECUTE)\b)",
        r"(--|\#|\/\*|\*\/)",  # SQL comments
        r"(\bOR\b.*[\'\"]\s*\d+\s*[\'\"]\s*=\s*[\'\"]\s*\d+)",  # OR '1'='1' patterns
        r"(\bUNION\b.*\bSELECT\b)",
        r"(;.*\b(SELECT|INSERT|UPDATE|DELETE|DROP)\b)",
        r"(\'\s*OR\s*[\'\"])",  # ' OR ' or ' OR "
    ]

    for pattern in sql_patterns:
        if re.search(pattern, value, re.IGNORECASE):
            return False

    return True
