"""
Document gate

Ties document uploads to the case unlock state and runs document decisions
through the same authorization and voting rules as forms, with exactly one
required approver per document.
"""

from datetime import datetime, timezone
from typing import List, Optional

from app.utils.exceptions import AlreadySubmitted, NotFound, NotSubmitted, NotUnlocked
from app.workflow.authority import required_roles
from app.workflow.dependencies import is_unlocked
from app.workflow.events import ClearanceEvent, EventKind
from app.workflow.types import (
    ActorContext, ApprovalTarget, ApprovalVote, Decision, DocumentRecord,
    DocumentStatus, DocumentType, ItemKind
)
from app.workflow.voting import cast_vote, coerce_decision, resolve_role

OPEN_FOR_UPLOAD = (DocumentStatus.NOT_UPLOADED, DocumentStatus.REJECTED)


def get_record(case, document_type) -> DocumentRecord:
    try:
        return case.documents[DocumentType(document_type)]
    except (KeyError, ValueError):
        raise NotFound(f"Unknown document type '{document_type}'")


def can_upload(document_type: DocumentType, case) -> bool:
    """Unlocked, and nothing is currently uploaded or approved for this type"""
    try:
        record = case.documents[DocumentType(document_type)]
    except (KeyError, ValueError):
        return False
    if record.status is DocumentStatus.REJECTED and not case.allow_resubmission:
        return False
    return is_unlocked(record.document_type, case) and record.status in OPEN_FOR_UPLOAD


def document_event(case, record: DocumentRecord, kind: EventKind, actor_id: Optional[str],
                   now: datetime, vote: Optional[ApprovalVote] = None) -> ClearanceEvent:
    return ClearanceEvent(
        case_id=case.student_id,
        item_kind=ItemKind.DOCUMENT.value,
        item_type=record.document_type.value,
        kind=kind,
        new_status=record.status.value,
        actor_id=actor_id,
        timestamp=now,
        role=vote.required_role.value if vote else None,
        comments=vote.comments if vote else '',
    )


def upload(case, document_type: DocumentType, actor_id: str, title: str = '',
           description: str = '', file_name: str = '',
           now: Optional[datetime] = None) -> List[ClearanceEvent]:
    """
    Register an uploaded document for review

    File storage happens elsewhere; only the metadata reaches the engine.

    Raises:
        NotFound: Unknown document type
        NotUnlocked: New Clearance not approved yet, or a rejected upload is final
        AlreadySubmitted: A document of this type is under review or approved
    """
    record = get_record(case, document_type)
    if record.status in (DocumentStatus.UPLOADED, DocumentStatus.APPROVED):
        raise AlreadySubmitted(f"{record.document_type.value} has already been uploaded")
    if not is_unlocked(record.document_type, case):
        raise NotUnlocked(f"{record.document_type.value} is locked until New Clearance is approved")
    if record.status is DocumentStatus.REJECTED and not case.allow_resubmission:
        raise NotUnlocked(f"{record.document_type.value} was rejected and cannot be re-uploaded")

    now = now or datetime.now(timezone.utc)
    if record.status is DocumentStatus.REJECTED:
        record.archive_round()

    record.status = DocumentStatus.UPLOADED
    record.title = title or record.document_type.value
    record.description = description or ''
    record.file_name = file_name or ''
    record.uploaded_at = now
    record.approvals = [ApprovalVote(required_role=role) for role in required_roles(record.document_type)]
    return [document_event(case, record, EventKind.UPLOADED, actor_id, now)]


def decide(case, document_type: DocumentType, actor: ActorContext, decision,
           comments: str = '', role=None, now: Optional[datetime] = None) -> List[ClearanceEvent]:
    """
    Approve or reject an uploaded document

    Raises:
        NotFound, NotSubmitted, Unauthorized, DuplicateVote, CommentRequired
    """
    record = get_record(case, document_type)
    decision = coerce_decision(decision)
    if record.status is not DocumentStatus.UPLOADED:
        raise NotSubmitted(f"{record.document_type.value} is not awaiting review")

    target = ApprovalTarget(ItemKind.DOCUMENT, record.document_type, record.owner_department)
    role = resolve_role(actor, target, record.approvals, role)
    now = now or datetime.now(timezone.utc)
    votes, verdict = cast_vote(
        record.approvals, required_roles(record.document_type), role,
        actor.user_id, decision, comments, now
    )

    record.approvals = votes
    vote = record.vote_for(role)
    if verdict is Decision.APPROVED:
        record.status = DocumentStatus.APPROVED
        kind = EventKind.APPROVED
    else:
        record.status = DocumentStatus.REJECTED
        kind = EventKind.REJECTED
    record.decided_at = now
    return [document_event(case, record, kind, actor.user_id, now, vote)]
