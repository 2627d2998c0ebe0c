from __future__ import annotations

import datetime as dt

import bcrypt
import jwt

from volmatch.config import Settings
from volmatch.domain.errors import AuthenticationError


ALGORITHM = "HS256"


def hash_password(plain: str) -> str:
    # returns a utf-8 str like "$2b$12$..."
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_token(settings: Settings, user_id: int) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + dt.timedelta(minutes=settings.ACCESS_TOKEN_EXPIRES_MIN),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(settings: Settings, token: str) -> int:
    """Return the user id carried by ``token``."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.PyJWTError as e:
        raise AuthenticationError("Not authorized, token failed") from e
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise AuthenticationError("Not authorized, token failed") from e
