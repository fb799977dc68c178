"""Access rules for drafts.

Public drafts are readable by anyone, including anonymous viewers, but only the
owner and shared collaborators may edit. ``shared_with`` only grants rights
while the draft's visibility is ``shared``.
"""

from drafts.domain.entities import AccessDecision, Draft, DraftVisibility


def _is_collaborator(draft: Draft, actor_id: str) -> bool:
    return draft.visibility == DraftVisibility.SHARED and actor_id in draft.shared_with


def can_view(draft: Draft, actor_id: str | None) -> bool:
    if draft.visibility == DraftVisibility.PUBLIC:
        return True
    if not actor_id:
        return False
    return draft.owner_id == actor_id or _is_collaborator(draft, actor_id)


def can_edit(draft: Draft, actor_id: str | None) -> bool:
    if not actor_id:
        return False
    return draft.owner_id == actor_id or _is_collaborator(draft, actor_id)


def evaluate_access(draft: Draft, actor_id: str | None) -> AccessDecision:
    if can_edit(draft, actor_id):
        return AccessDecision.VIEW_AND_EDIT
    if can_view(draft, actor_id):
        return AccessDecision.VIEW_ONLY
    return AccessDecision.NO_ACCESS
