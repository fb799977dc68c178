from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class DraftVisibility(StrEnum):
    PRIVATE = "private"
    SHARED = "shared"
    PUBLIC = "public"


class CommentPlacement(StrEnum):
    INLINE = "inline"
    SIDEBAR = "sidebar"


class AccessDecision(StrEnum):
    NO_ACCESS = "no-access"
    VIEW_ONLY = "view-only"
    VIEW_AND_EDIT = "view-and-edit"


class DiffSegmentType(StrEnum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


@dataclass
class Attachment:
    filename: str
    content_type: str
    size: int
    data_url: str
    checksum: str
    id: str | None = field(default=None)
    uploaded_at: datetime | None = field(default=None)


@dataclass
class Draft:
    title: str
    owner_id: str
    content: str = ""
    visibility: DraftVisibility = DraftVisibility.PRIVATE
    shared_with: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    preview: str = ""
    latest_revision_id: UUID | None = field(default=None)
    version: int = 1
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)


@dataclass
class Revision:
    draft_id: UUID
    author_id: str
    title_snapshot: str
    content: str
    autosave: bool = False
    note: str | None = None
    seq: int | None = field(default=None)
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)


@dataclass
class WorkspaceComment:
    draft_id: UUID
    author_id: str
    body: str
    placement: CommentPlacement = CommentPlacement.SIDEBAR
    quote: str | None = None
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)


@dataclass
class DraftWorkspace:
    """A draft together with its full revision and comment history."""

    draft: Draft
    revisions: list[Revision] = field(default_factory=list)
    comments: list[WorkspaceComment] = field(default_factory=list)


@dataclass
class DraftBuckets:
    owned: list[Draft] = field(default_factory=list)
    collaborating: list[Draft] = field(default_factory=list)
    public: list[Draft] = field(default_factory=list)


@dataclass
class DiffSegment:
    type: DiffSegmentType
    text: str


@dataclass
class DraftComparison:
    base: Revision
    target: Revision
    segments: list[DiffSegment] = field(default_factory=list)


@dataclass
class AttachmentInput:
    filename: str
    content_type: str
    base64_data: str


@dataclass
class DraftPatch:
    """Partial update for a draft. ``None`` means "leave unchanged"."""

    title: str | None = None
    content: str | None = None
    visibility: DraftVisibility | str | None = None
    shared_with: list[str] | None = None
    attachments_to_add: list[AttachmentInput] | None = None
    remove_attachment_ids: list[str] | None = None
    autosave: bool = False
    note: str | None = None
    expected_revision_id: UUID | None = None
