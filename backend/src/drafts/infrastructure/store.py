from sqlalchemy.ext.asyncio import AsyncSession

from drafts.infrastructure.comment_repository import DbCommentRepository
from drafts.infrastructure.draft_repository import DbDraftRepository
from drafts.infrastructure.revision_repository import DbRevisionRepository


class DbDraftStore:
    """Draft, revision and comment repositories sharing one session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.drafts = DbDraftRepository(session)
        self.revisions = DbRevisionRepository(session)
        self.comments = DbCommentRepository(session)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
