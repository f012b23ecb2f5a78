"""
Account business logic: registration, credential checks and username lookup.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, or_, select

from lexistep.auth.password import hash_password, validate_password_strength, verify_password
from lexistep.config import get_settings
from lexistep.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
USERNAME_MAX_LENGTH = 64


class RegistrationError(ValueError):
    """Raised when registration input is invalid."""


class DuplicateAccountError(RegistrationError):
    """Raised when the email or username is already taken."""


class InvalidCredentialsError(ValueError):
    """Raised when login credentials do not match an account."""


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by username (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.username) == username.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Username
# ---------------------------------------------------------------------------


def validate_username(username: str) -> str:
    """Return the stripped username or raise RegistrationError."""
    username = (username or "").strip()
    minimum = get_settings().username_min_length
    if len(username) < minimum:
        msg = f"Username must be at least {minimum} characters"
        raise RegistrationError(msg)
    if len(username) > USERNAME_MAX_LENGTH:
        msg = f"Username must not exceed {USERNAME_MAX_LENGTH} characters"
        raise RegistrationError(msg)
    if not USERNAME_PATTERN.match(username):
        msg = "Username may only contain letters, digits, '_', '.' and '-'"
        raise RegistrationError(msg)
    return username


async def check_username(db: AsyncSession, username: str) -> tuple[bool, str]:
    """
    Check whether a username can be registered.

    Returns:
        Tuple of (available, message).

    Raises:
        RegistrationError: If the username has an invalid format.
    """
    username = validate_username(username)
    if await get_user_by_username(db, username) is not None:
        return False, "Username is already taken"
    return True, "Username is available"


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    name: str,
    username: str,
    email: str,
    password: str,
    confirm_password: str,
) -> User:
    """
    Register a new user with email + password. Flushes; the caller commits.

    Raises:
        RegistrationError: If a field is missing or malformed.
        PasswordStrengthError: If the password is too short.
        DuplicateAccountError: If the email or username is already registered.
    """
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email:
        msg = "All fields are required"
        raise RegistrationError(msg)
    username = validate_username(username)
    if password != confirm_password:
        msg = "Passwords do not match"
        raise RegistrationError(msg)
    validate_password_strength(password)

    if await get_user_by_email(db, email) is not None:
        msg = "Email already registered"
        raise DuplicateAccountError(msg)
    if await get_user_by_username(db, username) is not None:
        msg = "Username is already taken"
        raise DuplicateAccountError(msg)

    user = User(
        email=email,
        username=username,
        name=name,
        password_hash=hash_password(password),
        is_pro=False,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, username=username)
    return user


async def authenticate_user(db: AsyncSession, identifier: str, password: str) -> User:
    """
    Authenticate by email or username.

    Raises:
        InvalidCredentialsError: If no account matches or the password is wrong.
    """
    identifier = (identifier or "").strip().lower()
    result = await db.execute(
        select(User).where(
            or_(func.lower(User.email) == identifier, func.lower(User.username) == identifier)
        )
    )
    user = result.scalars().first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", identifier=identifier)
        msg = "Invalid credentials"
        raise InvalidCredentialsError(msg)
    return user
