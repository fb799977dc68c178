from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from drafts.domain.entities import CommentPlacement, WorkspaceComment
from drafts.infrastructure.models import CommentModel


class DbCommentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, comment: WorkspaceComment) -> WorkspaceComment:
        next_seq = await self.session.execute(
            select(func.coalesce(func.max(CommentModel.seq), 0))
            .where(CommentModel.draft_id == comment.draft_id)
        )
        model = CommentModel(
            draft_id=comment.draft_id,
            author_id=comment.author_id,
            body=comment.body,
            placement=comment.placement.value,
            quote=comment.quote,
            seq=next_seq.scalar_one() + 1,
        )
        self.session.add(model)
        await self.session.flush()
        return _to_entity(model)

    async def list_for(self, draft_id: UUID) -> list[WorkspaceComment]:
        result = await self.session.execute(
            select(CommentModel)
            .where(CommentModel.draft_id == draft_id)
            .order_by(CommentModel.created_at.asc(), CommentModel.seq.asc())
            .execution_options(populate_existing=True)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def delete_for(self, draft_id: UUID) -> None:
        await self.session.execute(
            delete(CommentModel).where(CommentModel.draft_id == draft_id)
        )


def _to_entity(model: CommentModel) -> WorkspaceComment:
    return WorkspaceComment(
        id=model.id,
        draft_id=model.draft_id,
        author_id=model.author_id,
        body=model.body,
        placement=CommentPlacement(model.placement),
        quote=model.quote,
        created_at=model.created_at,
    )
