from dataclasses import dataclass
from typing import Annotated, Literal
from uuid import UUID

from pydantic import Field

from drafts.domain.entities import DraftWorkspace, WorkspaceComment


@dataclass
class DraftUpdated:
    workspace: DraftWorkspace
    kind: Literal["draft-updated"] = "draft-updated"

    @property
    def draft_id(self) -> UUID:
        return self.workspace.draft.id


@dataclass
class DraftCommented:
    draft_id: UUID
    comment: WorkspaceComment
    kind: Literal["draft-commented"] = "draft-commented"


DraftEvent = Annotated[DraftUpdated | DraftCommented, Field(discriminator="kind")]
