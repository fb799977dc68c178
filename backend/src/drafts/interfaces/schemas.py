from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from drafts.domain.entities import (
    AttachmentInput,
    CommentPlacement,
    DiffSegmentType,
    DraftPatch,
    DraftVisibility,
)


class AttachmentUpload(BaseModel):
    filename: str
    content_type: str = "application/octet-stream"
    base64_data: str

    def to_input(self) -> AttachmentInput:
        return AttachmentInput(
            filename=self.filename,
            content_type=self.content_type,
            base64_data=self.base64_data,
        )


class CreateDraftRequest(BaseModel):
    title: str = ""
    content: str = ""
    visibility: str | None = None
    shared_with: list[str] = Field(default_factory=list)
    attachments: list[AttachmentUpload] = Field(default_factory=list)
    note: str | None = None


class UpdateDraftRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    visibility: str | None = None
    shared_with: list[str] | None = None
    attachments_to_add: list[AttachmentUpload] | None = None
    remove_attachment_ids: list[str] | None = None
    autosave: bool = False
    note: str | None = None
    expected_revision_id: UUID | None = None

    def to_patch(self) -> DraftPatch:
        return DraftPatch(
            title=self.title,
            content=self.content,
            visibility=self.visibility,
            shared_with=self.shared_with,
            attachments_to_add=(
                [a.to_input() for a in self.attachments_to_add]
                if self.attachments_to_add
                else None
            ),
            remove_attachment_ids=self.remove_attachment_ids,
            autosave=self.autosave,
            note=self.note,
            expected_revision_id=self.expected_revision_id,
        )


class CreateCommentRequest(BaseModel):
    body: str
    placement: CommentPlacement = CommentPlacement.SIDEBAR
    quote: str | None = None


class AttachmentResponse(BaseModel):
    id: str
    filename: str
    content_type: str
    size: int
    checksum: str
    uploaded_at: datetime | None = None


class DraftSummaryResponse(BaseModel):
    id: UUID
    title: str
    owner_id: str
    visibility: DraftVisibility
    shared_with: list[str]
    preview: str
    attachments: list[AttachmentResponse]
    latest_revision_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DraftResponse(DraftSummaryResponse):
    content: str
    version: int


class RevisionResponse(BaseModel):
    id: UUID
    draft_id: UUID
    author_id: str
    title_snapshot: str
    content: str
    autosave: bool
    note: str | None = None
    created_at: datetime | None = None


class CommentResponse(BaseModel):
    id: UUID
    draft_id: UUID
    author_id: str
    body: str
    placement: CommentPlacement
    quote: str | None = None
    created_at: datetime | None = None


class DraftWorkspaceResponse(BaseModel):
    draft: DraftResponse
    revisions: list[RevisionResponse]
    comments: list[CommentResponse]


class DraftBucketsResponse(BaseModel):
    owned: list[DraftSummaryResponse]
    collaborating: list[DraftSummaryResponse]
    public: list[DraftSummaryResponse]


class DraftListResponse(BaseModel):
    drafts: list[DraftSummaryResponse]
    buckets: DraftBucketsResponse


class DiffSegmentResponse(BaseModel):
    type: DiffSegmentType
    text: str


class DraftComparisonResponse(BaseModel):
    base: RevisionResponse
    target: RevisionResponse
    segments: list[DiffSegmentResponse]
