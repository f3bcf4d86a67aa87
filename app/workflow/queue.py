"""
Staff work queue: everything an actor can act on right now
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from app.workflow.authority import qualifying_roles, roles_awaiting
from app.workflow.types import (
    ActorContext, ApprovalTarget, DocumentStatus, FormStatus, ItemKind
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _open_role(actor, target, votes):
    """First role the actor qualifies for that is currently offered a vote"""
    offered = roles_awaiting(target.item_type, votes)
    for role in qualifying_roles(actor, target):
        if role in offered:
            return role
    return None


def _sort_key(entry: Dict[str, Any]) -> datetime:
    submitted = entry['_submitted']
    if submitted is None:
        return _EPOCH
    if submitted.tzinfo is None:
        return submitted.replace(tzinfo=timezone.utc)
    return submitted


def pending_items(actor: ActorContext, cases: Iterable, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    List forms and documents waiting for this actor's vote, oldest first

    A form is listed only when one of the roles currently offered a vote is
    a role the actor qualifies for, so a school officer does not see a New
    Clearance form until the deputy registrar has approved it.
    """
    entries = []
    for case in cases:
        for form_type, record in case.forms.items():
            if record.status is not FormStatus.SUBMITTED:
                continue
            target = ApprovalTarget(ItemKind.FORM, form_type, case.student_department)
            role = _open_role(actor, target, record.approvals)
            if role is None:
                continue
            entries.append({
                'student_id': case.student_id,
                'student_department': case.student_department,
                'item_kind': ItemKind.FORM.value,
                'item_type': form_type.value,
                'role': role.value,
                '_submitted': record.submitted_at,
            })

        for document_type, record in case.documents.items():
            if record.status is not DocumentStatus.UPLOADED:
                continue
            target = ApprovalTarget(ItemKind.DOCUMENT, document_type, record.owner_department)
            role = _open_role(actor, target, record.approvals)
            if role is None:
                continue
            entries.append({
                'student_id': case.student_id,
                'student_department': case.student_department,
                'item_kind': ItemKind.DOCUMENT.value,
                'item_type': document_type.value,
                'role': role.value,
                'title': record.title,
                '_submitted': record.uploaded_at,
            })

    entries.sort(key=_sort_key)
    if limit is not None:
        entries = entries[:limit]
    for entry in entries:
        submitted = entry.pop('_submitted')
        entry['submitted_at'] = submitted.isoformat() if submitted else None
    return entries
