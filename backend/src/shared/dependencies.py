from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.application.services import verify_token
from drafts.domain.repository import DraftBroadcaster
from drafts.infrastructure.broadcaster import get_broadcaster as _get_broadcaster
from shared.infrastructure.database import async_session

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    return verify_token(credentials.credentials)


async def get_optional_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security),
) -> str | None:
    """Actor id when a bearer token is sent, ``None`` for anonymous readers."""
    if credentials is None:
        return None
    return verify_token(credentials.credentials)


def get_broadcaster() -> DraftBroadcaster:
    return _get_broadcaster()
