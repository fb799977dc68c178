from collections.abc import Awaitable, Callable
from typing import Any, Protocol
from uuid import UUID

from drafts.domain.entities import Draft, Revision, WorkspaceComment
from drafts.domain.events import DraftCommented, DraftUpdated


class DraftRepository(Protocol):
    async def get_by_id(self, draft_id: UUID) -> Draft | None: ...

    async def list_all(self) -> list[Draft]: ...

    async def create(self, draft: Draft) -> Draft: ...

    async def update(self, draft: Draft, expected_version: int) -> Draft: ...

    async def delete(self, draft_id: UUID) -> None: ...


class RevisionLedger(Protocol):
    async def append(self, revision: Revision) -> Revision: ...

    async def list_for(self, draft_id: UUID) -> list[Revision]: ...

    async def get_by_id(self, revision_id: UUID) -> Revision | None: ...

    async def delete_for(self, draft_id: UUID) -> None: ...


class CommentLedger(Protocol):
    async def append(self, comment: WorkspaceComment) -> WorkspaceComment: ...

    async def list_for(self, draft_id: UUID) -> list[WorkspaceComment]: ...

    async def delete_for(self, draft_id: UUID) -> None: ...


class DraftStore(Protocol):
    """Unit of work over the draft record and its two ledgers."""

    drafts: DraftRepository
    revisions: RevisionLedger
    comments: CommentLedger

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


EventCallback = Callable[[DraftUpdated | DraftCommented], Awaitable[None]]


class DraftBroadcaster(Protocol):
    async def publish(self, event: DraftUpdated | DraftCommented) -> None: ...

    async def subscribe(self, draft_id: UUID, callback: EventCallback) -> Any: ...

    async def unsubscribe(self, subscription: Any) -> None: ...
