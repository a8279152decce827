"""
Password hashing, access tokens and credential validation
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
import logging
import re
import secrets

import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError

from blog_service.config import settings
from blog_service.domain.exceptions import HashingError, InvalidTokenError, NoTokenError

logger = logging.getLogger(__name__)

# Patterns are applied with fullmatch; ASCII keeps \w and \d to [A-Za-z0-9_]
EMAIL_REGEX = re.compile(r"\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+", re.ASCII)
PASSWORD_REGEX = re.compile(
    r"(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).{%d,%d}"
    % (settings.PASSWORD_MIN_LENGTH, settings.PASSWORD_MAX_LENGTH),
    re.ASCII,
)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72

ID_ALPHABET = "_-0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_id(size: int = 21) -> str:
    """URL-safe random identifier"""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(size))


def hash_password(password: str) -> str:
    """Hash a password with a random salt"""
    try:
        salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
    except (ValueError, TypeError) as e:
        logger.error(f"Failed to hash password: {e}")
        raise HashingError()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Raises:
        HashingError: the stored hash is malformed
    """
    plain = plain_password.encode("utf-8")
    if len(plain) > BCRYPT_MAX_PASSWORD_BYTES:
        # Hashed passwords pass validation, so they are never this long
        return False

    try:
        return bcrypt.checkpw(plain, hashed_password.encode("utf-8"))
    except (ValueError, TypeError) as e:
        logger.error(f"Stored password hash is malformed: {e}")
        raise HashingError()


def validate_email(email: str) -> bool:
    return bool(EMAIL_REGEX.fullmatch(email))


def validate_password_strength(password: str) -> Tuple[bool, Optional[str]]:
    """
    Check password shape

    Returns:
        Tuple of (is_valid, error_message)
    """
    password = password or ""
    if (
        not PASSWORD_REGEX.fullmatch(password)
        or len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES
    ):
        return False, (
            "Please enter a valid password. It must contain at least one digit, "
            "one lowercase letter, one uppercase letter, and be "
            f"{settings.PASSWORD_MIN_LENGTH} to {settings.PASSWORD_MAX_LENGTH} characters long."
        )
    return True, None


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token for a user"""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"id": user_id, "type": "access", "iat": now, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate an access token

    Raises:
        InvalidTokenError: bad signature, structure, type or expired
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise InvalidTokenError("Access token has expired")
    except JWTError:
        raise InvalidTokenError()

    if payload.get("type") != "access" or not payload.get("id"):
        raise InvalidTokenError()
    return payload


def verify_access_token(token: Optional[str]) -> str:
    """Return the user id carried by a valid token"""
    if not token:
        raise NoTokenError()
    return decode_token(token)["id"]
