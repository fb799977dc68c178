from datetime import datetime, timedelta, timezone

import jwt
import pytest

from auth.application.services import create_token, verify_token
from shared.config import settings
from shared.exceptions import AuthenticationError


def test_create_token_carries_actor_id():
    token = create_token("writer-alice")
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == "writer-alice"
    assert "exp" in payload


def test_verify_valid_token():
    assert verify_token(create_token("u1")) == "u1"


def test_verify_invalid_token():
    with pytest.raises(AuthenticationError, match="Invalid or expired token"):
        verify_token("garbage.token.here")


def test_verify_expired_token():
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {"sub": "u1", "iat": past, "exp": past + timedelta(minutes=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(AuthenticationError):
        verify_token(token)


def test_verify_token_without_subject():
    token = jwt.encode({"scope": "drafts"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(AuthenticationError, match="no subject"):
        verify_token(token)
