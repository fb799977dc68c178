from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from drafts.application.services import (
    add_comment,
    compare_revisions,
    create_draft,
    delete_draft,
    flatten_buckets,
    get_attachment,
    get_draft,
    list_comments,
    list_drafts_for_viewer,
    list_revisions,
    update_draft,
)
from drafts.domain.repository import DraftBroadcaster
from drafts.infrastructure.store import DbDraftStore
from drafts.interfaces.schemas import (
    CommentResponse,
    CreateCommentRequest,
    CreateDraftRequest,
    DraftComparisonResponse,
    DraftListResponse,
    DraftWorkspaceResponse,
    RevisionResponse,
    UpdateDraftRequest,
)
from notifications.infrastructure.notification_repository import DbNotificationRepository
from shared.dependencies import get_broadcaster, get_current_actor, get_db, get_optional_actor

router = APIRouter(prefix="/api/drafts", tags=["drafts"])


@router.post("/", response_model=DraftWorkspaceResponse, status_code=201)
async def create(
    body: CreateDraftRequest,
    actor_id: str = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    broadcaster: DraftBroadcaster = Depends(get_broadcaster),
):
    store = DbDraftStore(db)
    return await create_draft(
        store,
        broadcaster,
        owner_id=actor_id,
        title=body.title,
        content=body.content,
        visibility=body.visibility,
        shared_with=body.shared_with,
        attachments=[a.to_input() for a in body.attachments],
        note=body.note,
    )


@router.get("/", response_model=DraftListResponse)
async def list_all(
    actor_id: str | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    buckets = await list_drafts_for_viewer(DbDraftStore(db), actor_id)
    return {"drafts": flatten_buckets(buckets), "buckets": buckets}


@router.get("/{draft_id}", response_model=DraftWorkspaceResponse)
async def get_one(
    draft_id: UUID,
    actor_id: str | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    return await get_draft(DbDraftStore(db), draft_id, actor_id)


@router.patch("/{draft_id}", response_model=DraftWorkspaceResponse)
async def update(
    draft_id: UUID,
    body: UpdateDraftRequest,
    actor_id: str = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    broadcaster: DraftBroadcaster = Depends(get_broadcaster),
):
    store = DbDraftStore(db)
    return await update_draft(store, broadcaster, draft_id, actor_id, body.to_patch())


@router.delete("/{draft_id}", status_code=204)
async def delete(
    draft_id: UUID,
    actor_id: str = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await delete_draft(DbDraftStore(db), draft_id, actor_id)


@router.get("/{draft_id}/revisions", response_model=list[RevisionResponse])
async def revisions(
    draft_id: UUID,
    actor_id: str | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    return await list_revisions(DbDraftStore(db), draft_id, actor_id)


@router.get("/{draft_id}/compare", response_model=DraftComparisonResponse)
async def compare(
    draft_id: UUID,
    base: UUID,
    target: UUID,
    actor_id: str | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    return await compare_revisions(DbDraftStore(db), draft_id, base, target, actor_id)


@router.get("/{draft_id}/comments", response_model=list[CommentResponse])
async def comments(
    draft_id: UUID,
    actor_id: str | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    return await list_comments(DbDraftStore(db), draft_id, actor_id)


@router.post("/{draft_id}/comments", response_model=CommentResponse, status_code=201)
async def comment(
    draft_id: UUID,
    body: CreateCommentRequest,
    actor_id: str = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    broadcaster: DraftBroadcaster = Depends(get_broadcaster),
):
    return await add_comment(
        DbDraftStore(db),
        broadcaster,
        DbNotificationRepository(db),
        draft_id,
        actor_id,
        body=body.body,
        placement=body.placement,
        quote=body.quote,
    )


@router.get("/{draft_id}/attachments/{attachment_id}")
async def download_attachment(
    draft_id: UUID,
    attachment_id: str,
    actor_id: str | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    attachment, data = await get_attachment(DbDraftStore(db), draft_id, attachment_id, actor_id)
    return Response(
        content=data,
        media_type=attachment.content_type,
        headers={"Content-Disposition": _content_disposition(attachment.filename)},
    )


def _content_disposition(filename: str) -> str:
    # Headers are latin-1; anything else goes through RFC 5987 encoding
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'
