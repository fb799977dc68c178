import logging
from datetime import datetime, timezone
from uuid import UUID

from drafts.application.locks import KeyedLock
from drafts.domain.access import can_edit, can_view
from drafts.domain.diff import compare
from drafts.domain.entities import (
    Attachment,
    AttachmentInput,
    CommentPlacement,
    Draft,
    DraftBuckets,
    DraftComparison,
    DraftPatch,
    DraftVisibility,
    DraftWorkspace,
    Revision,
    WorkspaceComment,
)
from drafts.domain.events import DraftCommented, DraftUpdated
from drafts.domain.repository import DraftBroadcaster, DraftStore
from drafts.domain.text import strip_html_to_preview
from drafts.infrastructure.blob_storage import build_attachment, read_attachment
from notifications.domain.entities import Notification, NotificationType
from notifications.domain.repository import NotificationSink
from shared.config import settings
from shared.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidInputError,
    InvalidReferenceError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

UNTITLED_DRAFT = "Untitled draft"
INITIAL_REVISION_NOTE = "Initial draft"
AUTOSAVE_REVISION_NOTE = "Autosave"

# Mutations of a single draft run one at a time within this process.
draft_locks = KeyedLock()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def sanitise_visibility(value: DraftVisibility | str | None) -> DraftVisibility:
    if not value:
        return DraftVisibility.PRIVATE
    try:
        return DraftVisibility(value)
    except ValueError:
        return DraftVisibility.PRIVATE


def sanitise_shared_with(shared_with: list[str] | None, owner_id: str) -> list[str]:
    return list(dict.fromkeys(uid for uid in shared_with or [] if uid and uid != owner_id))


def render_preview(content: str) -> str:
    return strip_html_to_preview(content, settings.PREVIEW_LENGTH)


def _build_attachments(uploads: list[AttachmentInput] | None, now: datetime) -> list[Attachment]:
    return [build_attachment(u, now, settings.MAX_ATTACHMENT_BYTES) for u in uploads or []]


async def _require_draft(store: DraftStore, draft_id: UUID) -> Draft:
    draft = await store.drafts.get_by_id(draft_id)
    if not draft:
        raise NotFoundError("Draft", str(draft_id))
    return draft


async def _require_viewable(store: DraftStore, draft_id: UUID, viewer_id: str | None, action: str) -> Draft:
    draft = await _require_draft(store, draft_id)
    if not can_view(draft, viewer_id):
        logger.warning("Denied %s on draft %s for %s", action, draft_id, viewer_id)
        raise AuthorizationError(f"Not authorised to {action}")
    return draft


async def _load_workspace(store: DraftStore, draft_id: UUID) -> DraftWorkspace:
    draft = await _require_draft(store, draft_id)
    return DraftWorkspace(
        draft=draft,
        revisions=await store.revisions.list_for(draft_id),
        comments=await store.comments.list_for(draft_id),
    )


async def create_draft(
    store: DraftStore,
    broadcaster: DraftBroadcaster,
    owner_id: str,
    title: str,
    content: str | None = None,
    visibility: DraftVisibility | str | None = None,
    shared_with: list[str] | None = None,
    attachments: list[AttachmentInput] | None = None,
    note: str | None = None,
) -> DraftWorkspace:
    if not owner_id:
        raise AuthorizationError("An owner is required to create a draft")

    content = content or ""
    now = _now()
    draft = Draft(
        title=(title or "").strip() or UNTITLED_DRAFT,
        owner_id=owner_id,
        content=content,
        visibility=sanitise_visibility(visibility),
        shared_with=sanitise_shared_with(shared_with, owner_id),
        attachments=_build_attachments(attachments, now),
        preview=render_preview(content),
        created_at=now,
        updated_at=now,
    )

    try:
        created = await store.drafts.create(draft)
        await store.revisions.append(
            Revision(
                draft_id=created.id,
                author_id=owner_id,
                title_snapshot=created.title,
                content=content,
                autosave=False,
                note=note or INITIAL_REVISION_NOTE,
            )
        )
        await store.commit()
    except Exception:
        await store.rollback()
        raise

    workspace = await _load_workspace(store, created.id)
    logger.info("Draft %s created by %s", created.id, owner_id)
    await broadcaster.publish(DraftUpdated(workspace=workspace))
    return workspace


async def get_draft(store: DraftStore, draft_id: UUID, viewer_id: str | None) -> DraftWorkspace:
    await _require_viewable(store, draft_id, viewer_id, "view this draft")
    return await _load_workspace(store, draft_id)


def _apply_patch(draft: Draft, patch: DraftPatch, now: datetime) -> bool:
    """Mutate ``draft`` in place. Returns whether the content changed."""
    if patch.title is not None and patch.title.strip() and patch.title.strip() != draft.title:
        draft.title = patch.title.strip()

    content_changed = False
    if patch.content is not None and patch.content != draft.content:
        draft.content = patch.content
        draft.preview = render_preview(patch.content)
        content_changed = True

    if patch.attachments_to_add:
        draft.attachments = draft.attachments + _build_attachments(patch.attachments_to_add, now)

    if patch.remove_attachment_ids:
        to_remove = set(patch.remove_attachment_ids)
        draft.attachments = [a for a in draft.attachments if a.id not in to_remove]

    if patch.visibility:
        draft.visibility = sanitise_visibility(patch.visibility)
    if patch.shared_with is not None:
        draft.shared_with = sanitise_shared_with(patch.shared_with, draft.owner_id)

    draft.updated_at = now
    return content_changed


async def update_draft(
    store: DraftStore,
    broadcaster: DraftBroadcaster,
    draft_id: UUID,
    actor_id: str | None,
    patch: DraftPatch,
) -> DraftWorkspace:
    async with draft_locks.hold(draft_id):
        draft = await _require_draft(store, draft_id)
        if not can_edit(draft, actor_id):
            logger.warning("Denied update on draft %s for %s", draft_id, actor_id)
            raise AuthorizationError("Not authorised to modify this draft")
        if (
            patch.expected_revision_id is not None
            and patch.expected_revision_id != draft.latest_revision_id
        ):
            logger.warning("Stale save on draft %s from %s", draft_id, actor_id)
            raise ConflictError("Draft has newer revisions than the one being edited")

        expected_version = draft.version
        content_changed = _apply_patch(draft, patch, _now())

        try:
            await store.drafts.update(draft, expected_version)
            if content_changed or patch.autosave:
                note = patch.note
                if not note and not content_changed:
                    note = AUTOSAVE_REVISION_NOTE
                await store.revisions.append(
                    Revision(
                        draft_id=draft.id,
                        author_id=actor_id,
                        title_snapshot=draft.title,
                        content=draft.content,
                        autosave=patch.autosave,
                        note=note,
                    )
                )
            await store.commit()
        except Exception:
            await store.rollback()
            raise

        workspace = await _load_workspace(store, draft_id)
        logger.info(
            "Draft %s updated by %s (content_changed=%s, autosave=%s)",
            draft_id, actor_id, content_changed, patch.autosave,
        )
        await broadcaster.publish(DraftUpdated(workspace=workspace))
        return workspace


async def delete_draft(store: DraftStore, draft_id: UUID, actor_id: str | None) -> None:
    async with draft_locks.hold(draft_id):
        draft = await _require_draft(store, draft_id)
        if not actor_id or draft.owner_id != actor_id:
            logger.warning("Denied delete on draft %s for %s", draft_id, actor_id)
            raise AuthorizationError("Only the owner can delete a draft")

        try:
            await store.comments.delete_for(draft_id)
            await store.revisions.delete_for(draft_id)
            await store.drafts.delete(draft_id)
            await store.commit()
        except Exception:
            await store.rollback()
            raise
        logger.info("Draft %s deleted by %s", draft_id, actor_id)


def _by_updated_desc(drafts: list[Draft]) -> list[Draft]:
    return sorted(drafts, key=lambda d: d.updated_at, reverse=True)


async def list_drafts_for_viewer(store: DraftStore, viewer_id: str | None) -> DraftBuckets:
    buckets = DraftBuckets()
    for draft in await store.drafts.list_all():
        if viewer_id and draft.owner_id == viewer_id:
            buckets.owned.append(draft)
        elif can_edit(draft, viewer_id):
            buckets.collaborating.append(draft)
        elif draft.visibility == DraftVisibility.PUBLIC:
            buckets.public.append(draft)

    return DraftBuckets(
        owned=_by_updated_desc(buckets.owned),
        collaborating=_by_updated_desc(buckets.collaborating),
        public=_by_updated_desc(buckets.public),
    )


def flatten_buckets(buckets: DraftBuckets) -> list[Draft]:
    """Every draft in the buckets, newest first: the viewer's accessible drafts."""
    return _by_updated_desc(buckets.owned + buckets.collaborating + buckets.public)


async def list_accessible_drafts(store: DraftStore, viewer_id: str | None) -> list[Draft]:
    drafts = await store.drafts.list_all()
    return _by_updated_desc([d for d in drafts if can_view(d, viewer_id)])


async def list_revisions(store: DraftStore, draft_id: UUID, viewer_id: str | None) -> list[Revision]:
    await _require_viewable(store, draft_id, viewer_id, "inspect revisions")
    return await store.revisions.list_for(draft_id)


async def compare_revisions(
    store: DraftStore,
    draft_id: UUID,
    base_revision_id: UUID,
    target_revision_id: UUID,
    viewer_id: str | None,
) -> DraftComparison:
    await _require_viewable(store, draft_id, viewer_id, "compare revisions")

    base = await store.revisions.get_by_id(base_revision_id)
    target = await store.revisions.get_by_id(target_revision_id)
    if not base or not target or base.draft_id != draft_id or target.draft_id != draft_id:
        raise InvalidReferenceError("Revisions do not belong to the requested draft")

    return DraftComparison(
        base=base,
        target=target,
        segments=compare(base.content, target.content),
    )


async def list_comments(
    store: DraftStore, draft_id: UUID, viewer_id: str | None
) -> list[WorkspaceComment]:
    await _require_viewable(store, draft_id, viewer_id, "view comments")
    return await store.comments.list_for(draft_id)


async def add_comment(
    store: DraftStore,
    broadcaster: DraftBroadcaster,
    notifier: NotificationSink,
    draft_id: UUID,
    actor_id: str | None,
    body: str,
    placement: CommentPlacement | str = CommentPlacement.SIDEBAR,
    quote: str | None = None,
) -> WorkspaceComment:
    async with draft_locks.hold(draft_id):
        draft = await _require_draft(store, draft_id)
        if not actor_id or not can_view(draft, actor_id):
            logger.warning("Denied comment on draft %s for %s", draft_id, actor_id)
            raise AuthorizationError("Not authorised to discuss this draft")

        trimmed_body = (body or "").strip()
        if not trimmed_body:
            raise InvalidInputError("Comment body is required")
        try:
            placement = CommentPlacement(placement)
        except ValueError:
            raise InvalidInputError(f"Unknown comment placement: {placement}")

        try:
            comment = await store.comments.append(
                WorkspaceComment(
                    draft_id=draft_id,
                    author_id=actor_id,
                    body=trimmed_body,
                    placement=placement,
                    quote=quote.strip() if quote and quote.strip() else None,
                )
            )
            # The notification commits with the comment or not at all
            if actor_id != draft.owner_id:
                await notifier.record(
                    Notification(
                        type=NotificationType.COMMENT,
                        recipient_id=draft.owner_id,
                        actor_id=actor_id,
                        subject_id=draft_id,
                        summary=f"{actor_id} commented on draft {draft.title}",
                        created_at=comment.created_at,
                    )
                )
            await store.commit()
        except Exception:
            await store.rollback()
            raise

        logger.info("Comment %s added to draft %s by %s", comment.id, draft_id, actor_id)
        await broadcaster.publish(DraftCommented(draft_id=draft_id, comment=comment))
        return comment


async def get_attachment(
    store: DraftStore, draft_id: UUID, attachment_id: str, viewer_id: str | None
) -> tuple[Attachment, bytes]:
    draft = await _require_viewable(store, draft_id, viewer_id, "download attachments")
    attachment = next((a for a in draft.attachments if a.id == attachment_id), None)
    if not attachment:
        raise NotFoundError("Attachment", attachment_id)
    return attachment, read_attachment(attachment)
