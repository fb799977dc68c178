from collections import defaultdict
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from drafts.domain.entities import Attachment, Draft, DraftVisibility
from drafts.infrastructure.models import AttachmentModel, DraftModel
from shared.exceptions import ConflictError


class DbDraftRepository:
    """Draft records and their attachments.

    Writes are flushed, not committed; the owning ``DbDraftStore`` commits the
    draft together with the ledger rows written in the same unit of work.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, draft_id: UUID) -> Draft | None:
        result = await self.session.execute(
            select(DraftModel)
            .where(DraftModel.id == draft_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        if not model:
            return None
        attachments = await self._attachments_for([model.id])
        return _to_entity(model, attachments[model.id])

    async def list_all(self) -> list[Draft]:
        result = await self.session.execute(
            select(DraftModel)
            .order_by(DraftModel.updated_at.desc())
            .execution_options(populate_existing=True)
        )
        models = result.scalars().all()
        attachments = await self._attachments_for([m.id for m in models])
        return [_to_entity(m, attachments[m.id]) for m in models]

    async def create(self, draft: Draft) -> Draft:
        model = DraftModel(
            owner_id=draft.owner_id,
            title=draft.title,
            content=draft.content,
            visibility=draft.visibility.value,
            shared_with=list(draft.shared_with),
            preview=draft.preview,
        )
        if draft.created_at is not None:
            model.created_at = draft.created_at
            model.updated_at = draft.updated_at or draft.created_at
        self.session.add(model)
        await self.session.flush()
        for attachment in draft.attachments:
            self.session.add(_attachment_model(model.id, attachment))
        await self.session.flush()
        return await self.get_by_id(model.id)

    async def update(self, draft: Draft, expected_version: int) -> Draft:
        result = await self.session.execute(
            update(DraftModel)
            .where(
                DraftModel.id == draft.id,
                DraftModel.version == expected_version,
            )
            .values(
                title=draft.title,
                content=draft.content,
                visibility=draft.visibility.value,
                shared_with=list(draft.shared_with),
                preview=draft.preview,
                updated_at=draft.updated_at,
                version=expected_version + 1,
            )
        )
        if result.rowcount == 0:
            raise ConflictError("Draft was modified by another user")

        await self._sync_attachments(draft)
        await self.session.flush()
        return await self.get_by_id(draft.id)

    async def delete(self, draft_id: UUID) -> None:
        await self.session.execute(
            delete(AttachmentModel).where(AttachmentModel.draft_id == draft_id)
        )
        await self.session.execute(delete(DraftModel).where(DraftModel.id == draft_id))
        await self.session.flush()

    async def _sync_attachments(self, draft: Draft) -> None:
        result = await self.session.execute(
            select(AttachmentModel.id).where(AttachmentModel.draft_id == draft.id)
        )
        stored_ids = set(result.scalars().all())
        wanted_ids = {a.id for a in draft.attachments}

        removed = stored_ids - wanted_ids
        if removed:
            await self.session.execute(
                delete(AttachmentModel).where(
                    AttachmentModel.draft_id == draft.id,
                    AttachmentModel.id.in_(removed),
                )
            )
        for attachment in draft.attachments:
            if attachment.id not in stored_ids:
                self.session.add(_attachment_model(draft.id, attachment))

    async def _attachments_for(self, draft_ids: list[UUID]) -> dict[UUID, list[Attachment]]:
        grouped: dict[UUID, list[Attachment]] = defaultdict(list)
        if not draft_ids:
            return grouped
        result = await self.session.execute(
            select(AttachmentModel)
            .where(AttachmentModel.draft_id.in_(draft_ids))
            .order_by(AttachmentModel.uploaded_at.asc(), AttachmentModel.id.asc())
        )
        for model in result.scalars().all():
            grouped[model.draft_id].append(_attachment_to_entity(model))
        return grouped


def _attachment_model(draft_id: UUID, attachment: Attachment) -> AttachmentModel:
    model = AttachmentModel(
        id=attachment.id,
        draft_id=draft_id,
        filename=attachment.filename,
        content_type=attachment.content_type,
        size=attachment.size,
        data_url=attachment.data_url,
        checksum=attachment.checksum,
    )
    if attachment.uploaded_at is not None:
        model.uploaded_at = attachment.uploaded_at
    return model


def _attachment_to_entity(model: AttachmentModel) -> Attachment:
    return Attachment(
        id=model.id,
        filename=model.filename,
        content_type=model.content_type,
        size=model.size,
        data_url=model.data_url,
        checksum=model.checksum,
        uploaded_at=model.uploaded_at,
    )


def _to_entity(model: DraftModel, attachments: list[Attachment]) -> Draft:
    return Draft(
        id=model.id,
        owner_id=model.owner_id,
        title=model.title,
        content=model.content,
        visibility=DraftVisibility(model.visibility),
        shared_with=list(model.shared_with or []),
        attachments=attachments,
        preview=model.preview,
        latest_revision_id=model.latest_revision_id,
        version=model.version,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
