from datetime import datetime, timedelta, timezone

import jwt

from shared.config import settings
from shared.exceptions import AuthenticationError


def create_token(actor_id: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": actor_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> str:
    """Return the actor id carried by a bearer token.

    Accounts live outside this service; the ``sub`` claim is treated as an
    opaque actor id.
    """
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")

    actor_id = payload.get("sub")
    if not actor_id:
        raise AuthenticationError("Token has no subject")
    return actor_id
