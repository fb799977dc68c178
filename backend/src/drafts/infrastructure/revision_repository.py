from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from drafts.domain.entities import Revision
from drafts.infrastructure.models import DraftModel, RevisionModel


class DbRevisionRepository:
    """Append-only revision ledger, one ordered log per draft."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, revision: Revision) -> Revision:
        model = RevisionModel(
            draft_id=revision.draft_id,
            author_id=revision.author_id,
            title_snapshot=revision.title_snapshot,
            content=revision.content,
            autosave=revision.autosave,
            note=revision.note,
            seq=await self.get_next_seq(revision.draft_id),
        )
        self.session.add(model)
        await self.session.flush()

        await self.session.execute(
            update(DraftModel)
            .where(DraftModel.id == revision.draft_id)
            .values(latest_revision_id=model.id)
        )
        return _to_entity(model)

    async def list_for(self, draft_id: UUID) -> list[Revision]:
        result = await self.session.execute(
            select(RevisionModel)
            .where(RevisionModel.draft_id == draft_id)
            .order_by(RevisionModel.created_at.asc(), RevisionModel.seq.asc())
            .execution_options(populate_existing=True)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def get_by_id(self, revision_id: UUID) -> Revision | None:
        result = await self.session.execute(
            select(RevisionModel).where(RevisionModel.id == revision_id)
        )
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def get_next_seq(self, draft_id: UUID) -> int:
        result = await self.session.execute(
            select(func.coalesce(func.max(RevisionModel.seq), 0))
            .where(RevisionModel.draft_id == draft_id)
        )
        return result.scalar_one() + 1

    async def delete_for(self, draft_id: UUID) -> None:
        await self.session.execute(
            delete(RevisionModel).where(RevisionModel.draft_id == draft_id)
        )


def _to_entity(model: RevisionModel) -> Revision:
    return Revision(
        id=model.id,
        draft_id=model.draft_id,
        author_id=model.author_id,
        title_snapshot=model.title_snapshot,
        content=model.content,
        autosave=model.autosave,
        note=model.note,
        seq=model.seq,
        created_at=model.created_at,
    )
