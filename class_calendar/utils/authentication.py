from typing import Optional
from datetime import timedelta
from jose import jwt
import os
from dotenv import load_dotenv

from class_calendar.utils.time_utils import get_school_time

load_dotenv()

# Constants
SECRET_KEY = os.getenv("SECRET_KEY", "default-fallback-key")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

WRITE_ROLES = ("Superadmin", "Admin")


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    user_type: str = None,
    user_id: int = None,
):
    """Create a JWT access token with user type and ID.

    Tokens are normally minted by the identity provider in front of this
    service; this helper exists for tooling and tests.
    """
    to_encode = data.copy()

    if expires_delta:
        expire = get_school_time() + expires_delta
    else:
        expire = get_school_time() + timedelta(minutes=15)

    to_encode.update({"exp": expire})
    if user_type:
        to_encode.update({"user_type": user_type})
    if user_id:
        to_encode.update({"user_id": user_id})

    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and verify a token. Raises jose.JWTError when invalid or expired."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
