"""
Clearance case state machine

One ClearanceCase per student holds every form and document record. Its
methods are the only way to change them, and each method either applies
all of its changes or raises before touching anything.

Form lifecycle::

    locked -> unlocked -> submitted -> approved
                  ^                 \\-> rejected --(re-submit)--^
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from app.utils.exceptions import (
    AlreadySubmitted, NotFound, NotSubmitted, NotUnlocked, ValidationError
)
from app.workflow import documents as document_gate
from app.workflow.authority import approver_label, required_roles, roles_awaiting
from app.workflow.dependencies import is_unlocked, unlocked_items
from app.workflow.events import ClearanceEvent, EventKind
from app.workflow.payloads import PAYLOAD_TYPES
from app.workflow.types import (
    ActorContext, ApprovalTarget, ApprovalVote, ClearanceItem, Decision,
    DocumentRecord, DocumentStatus, DocumentType, FormRecord, FormStatus,
    FormType, ItemKind, REQUIRED_DOCUMENTS
)
from app.workflow.voting import cast_vote, coerce_decision, resolve_role

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ClearanceCase:
    student_id: str
    student_department: str
    forms: Dict[FormType, FormRecord] = field(default_factory=dict)
    documents: Dict[DocumentType, DocumentRecord] = field(default_factory=dict)
    allow_resubmission: bool = True

    @classmethod
    def open(cls, student_id: str, student_department: str,
             allow_resubmission: bool = True) -> 'ClearanceCase':
        """Create a fresh case: everything locked except New Clearance"""
        case = cls(
            student_id=student_id,
            student_department=student_department,
            allow_resubmission=allow_resubmission,
        )
        for form_type in FormType:
            case.forms[form_type] = FormRecord(form_type=form_type)
        for document_type in DocumentType:
            case.documents[document_type] = DocumentRecord(
                document_type=document_type,
                owner_id=student_id,
                owner_department=student_department,
            )
        case.forms[FormType.NEW_CLEARANCE].status = FormStatus.UNLOCKED
        return case

    def form(self, form_type) -> FormRecord:
        try:
            return self.forms[FormType(form_type)]
        except (KeyError, ValueError):
            raise NotFound(f"Unknown form type '{form_type}'")

    def document(self, document_type) -> DocumentRecord:
        return document_gate.get_record(self, document_type)

    def _event(self, record: FormRecord, kind: EventKind, actor_id: Optional[str],
               now: datetime, vote: Optional[ApprovalVote] = None) -> ClearanceEvent:
        return ClearanceEvent(
            case_id=self.student_id,
            item_kind=ItemKind.FORM.value,
            item_type=record.form_type.value,
            kind=kind,
            new_status=record.status.value,
            actor_id=actor_id,
            timestamp=now,
            role=vote.required_role.value if vote else None,
            comments=vote.comments if vote else '',
        )

    def submit(self, form_type, payload, actor_id: str,
               now: Optional[datetime] = None) -> List[ClearanceEvent]:
        """
        Submit a form for approval

        Args:
            form_type: Form being submitted
            payload: Typed payload for that form
            actor_id: Submitting user
            now: Timestamp to record (defaults to current UTC time)

        Returns:
            Events produced by the submission

        Raises:
            NotFound: Unknown form type
            AlreadySubmitted: Form is under review or approved
            NotUnlocked: Prerequisite not approved, or a rejected form is final
            ValidationError: Payload belongs to a different form
        """
        record = self.form(form_type)
        if record.status in (FormStatus.SUBMITTED, FormStatus.APPROVED):
            raise AlreadySubmitted(f"{record.form_type.value} has already been submitted")
        if record.status is FormStatus.LOCKED or not is_unlocked(record.form_type, self):
            raise NotUnlocked(f"{record.form_type.value} is locked until New Clearance is approved")
        if record.status is FormStatus.REJECTED and not self.allow_resubmission:
            raise NotUnlocked(f"{record.form_type.value} was rejected and cannot be re-submitted")
        if not isinstance(payload, PAYLOAD_TYPES[record.form_type]):
            raise ValidationError(f"Payload does not match form type {record.form_type.value}")

        now = now or _utcnow()
        if record.status is FormStatus.REJECTED:
            record.archive_round()

        record.status = FormStatus.SUBMITTED
        record.payload = payload
        record.submitted_at = now
        record.decided_at = None
        record.approvals = [ApprovalVote(required_role=role) for role in required_roles(record.form_type)]
        logger.debug("Case %s: %s submitted by %s", self.student_id, record.form_type.value, actor_id)
        return [self._event(record, EventKind.SUBMITTED, actor_id, now)]

    def decide(self, form_type, actor: ActorContext, decision, comments: str = '',
               role=None, now: Optional[datetime] = None) -> List[ClearanceEvent]:
        """
        Record one approver's decision on a submitted form

        Args:
            form_type: Form being decided
            actor: Deciding staff member
            decision: 'approved' or 'rejected'
            comments: Mandatory when rejecting
            role: Approval role to vote as; first open qualifying role if omitted
            now: Timestamp to record

        Returns:
            Events produced, including any unlock cascade

        Raises:
            NotFound, NotSubmitted, Unauthorized, DuplicateVote, CommentRequired
        """
        record = self.form(form_type)
        decision = coerce_decision(decision)
        if record.status is not FormStatus.SUBMITTED:
            raise NotSubmitted(f"{record.form_type.value} is not awaiting a decision")

        target = ApprovalTarget(ItemKind.FORM, record.form_type, self.student_department)
        role = resolve_role(actor, target, record.approvals, role)
        now = now or _utcnow()
        votes, verdict = cast_vote(
            record.approvals, required_roles(record.form_type), role,
            actor.user_id, decision, comments, now
        )

        record.approvals = votes
        vote = record.vote_for(role)
        if verdict is Decision.PENDING:
            return [self._event(record, EventKind.VOTE_RECORDED, actor.user_id, now, vote)]

        record.status = FormStatus.APPROVED if verdict is Decision.APPROVED else FormStatus.REJECTED
        record.decided_at = now
        kind = EventKind.APPROVED if verdict is Decision.APPROVED else EventKind.REJECTED
        events = [
            self._event(record, EventKind.VOTE_RECORDED, actor.user_id, now, vote),
            self._event(record, kind, actor.user_id, now, vote),
        ]
        logger.debug("Case %s: %s %s", self.student_id, record.form_type.value, record.status.value)

        if record.status is FormStatus.APPROVED:
            events.extend(self.recompute_locks(actor.user_id, now))
        return events

    def upload_document(self, document_type, actor_id: str, title: str = '',
                        description: str = '', file_name: str = '',
                        now: Optional[datetime] = None) -> List[ClearanceEvent]:
        return document_gate.upload(self, document_type, actor_id, title, description, file_name, now)

    def decide_document(self, document_type, actor: ActorContext, decision, comments: str = '',
                        role=None, now: Optional[datetime] = None) -> List[ClearanceEvent]:
        return document_gate.decide(self, document_type, actor, decision, comments, role, now)

    def can_upload(self, document_type) -> bool:
        return document_gate.can_upload(document_type, self)

    def recompute_locks(self, actor_id: Optional[str] = None,
                        now: Optional[datetime] = None) -> List[ClearanceEvent]:
        """
        Bring stored lock state in line with the dependency graph

        Returns:
            UNLOCKED events for every form and document that became reachable
        """
        now = now or _utcnow()
        events = []
        for record in self.forms.values():
            reachable = is_unlocked(record.form_type, self)
            if record.status is FormStatus.LOCKED and reachable:
                record.status = FormStatus.UNLOCKED
                events.append(self._event(record, EventKind.UNLOCKED, actor_id, now))
            elif record.status is FormStatus.UNLOCKED and not reachable:
                record.status = FormStatus.LOCKED
        if events:
            for record in self.documents.values():
                if is_unlocked(record.document_type, self):
                    events.append(document_gate.document_event(self, record, EventKind.UNLOCKED, actor_id, now))
        return events

    def list_unlocked(self) -> Set[ClearanceItem]:
        return unlocked_items(self)

    @property
    def is_cleared(self) -> bool:
        forms_done = all(r.status is FormStatus.APPROVED for r in self.forms.values())
        documents_done = all(
            self.documents[d].status is DocumentStatus.APPROVED for d in REQUIRED_DOCUMENTS
        )
        return forms_done and documents_done

    def to_dict(self) -> Dict[str, Any]:
        """Full projection used to render lock state"""
        unlocked = self.list_unlocked()
        forms = {}
        for form_type, record in self.forms.items():
            data = record.to_dict()
            data['unlocked'] = form_type in unlocked
            data['approver'] = approver_label(form_type)
            data['required_roles'] = [role.value for role in required_roles(form_type)]
            data['awaiting_roles'] = (
                [role.value for role in roles_awaiting(form_type, record.approvals)]
                if record.status is FormStatus.SUBMITTED else []
            )
            forms[form_type.value] = data
        documents = {}
        for document_type, record in self.documents.items():
            data = record.to_dict()
            data['unlocked'] = document_type in unlocked
            data['can_upload'] = self.can_upload(document_type)
            data['required'] = document_type in REQUIRED_DOCUMENTS
            data['approver'] = approver_label(document_type)
            documents[document_type.value] = data
        return {
            'student_id': self.student_id,
            'student_department': self.student_department,
            'cleared': self.is_cleared,
            'forms': forms,
            'documents': documents,
            'unlocked': sorted(item.value for item in unlocked),
        }
