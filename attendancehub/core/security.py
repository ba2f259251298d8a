"""Password hashing and the bearer tokens handed out by ``/api/auth/login``."""

import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from attendancehub.core.config import settings

ACCESS_TOKEN_TYPE = "access"


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def issue_access_token(
    user_id: uuid.UUID,
    role: str,
    employee_id: uuid.UUID | None = None,
    lifetime: timedelta | None = None,
) -> tuple[str, int]:
    """
    Sign an access token for a login account.

    Claims: ``sub`` (user id), ``role``, ``emp`` (linked employee id, when
    any), ``type`` and ``exp``. Returns (token, lifetime in seconds).
    """
    lifetime = lifetime if lifetime is not None else timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    claims: dict = {
        "sub": str(user_id),
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    if employee_id is not None:
        claims["emp"] = str(employee_id)
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return token, int(lifetime.total_seconds())


def read_access_token(token: str) -> uuid.UUID | None:
    """User id of a valid, unexpired access token; None for anything else."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if claims.get("type") != ACCESS_TOKEN_TYPE:
        return None
    try:
        return uuid.UUID(str(claims.get("sub")))
    except ValueError:
        return None
