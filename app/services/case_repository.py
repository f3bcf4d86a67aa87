"""
Persistence for clearance cases

Maps ClearanceCase aggregates to and from the clearance_* tables. Stored
timestamps are naive UTC; the engine works with timezone-aware values.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_

from app.models import (
    db, ClearanceCaseModel, FormRecordModel, DocumentRecordModel, ApprovalVoteModel
)
from app.workflow.case import ClearanceCase
from app.workflow.payloads import PAYLOAD_TYPES
from app.workflow.types import (
    ApprovalRound, ApprovalVote, Decision, DocumentRecord, DocumentStatus,
    DocumentType, FormRecord, FormStatus, FormType, Role
)


def _to_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    return _from_db(datetime.fromisoformat(value)) if value else None


def _vote_from_row(row: ApprovalVoteModel) -> ApprovalVote:
    return ApprovalVote(
        required_role=Role(row.required_role),
        decision=Decision(row.decision),
        actor_id=row.actor_id,
        comments=row.comments or '',
        decided_at=_from_db(row.decided_at),
    )


def _vote_from_json(data: Dict[str, Any]) -> ApprovalVote:
    return ApprovalVote(
        required_role=Role(data['required_role']),
        decision=Decision(data['decision']),
        actor_id=data.get('actor_id'),
        comments=data.get('comments') or '',
        decided_at=_parse_iso(data.get('decided_at')),
    )


def _history_from_json(rounds: Optional[List[Dict[str, Any]]]) -> List[ApprovalRound]:
    return [
        ApprovalRound(
            status=data['status'],
            approvals=[_vote_from_json(v) for v in data.get('approvals', [])],
            submitted_at=_parse_iso(data.get('submitted_at')),
            decided_at=_parse_iso(data.get('decided_at')),
        )
        for data in rounds or []
    ]


def _sync_votes(row, votes: List[ApprovalVote]) -> None:
    """Update vote rows in place, replacing them when the role layout changed"""
    existing = list(row.approvals)
    if [r.required_role for r in existing] != [v.required_role.value for v in votes]:
        row.approvals = [ApprovalVoteModel(position=i) for i in range(len(votes))]
        existing = list(row.approvals)
    for position, (vote_row, vote) in enumerate(zip(existing, votes)):
        vote_row.position = position
        vote_row.required_role = vote.required_role.value
        vote_row.decision = vote.decision.value
        vote_row.actor_id = vote.actor_id
        vote_row.comments = vote.comments
        vote_row.decided_at = _to_db(vote.decided_at)


class CaseRepository:
    """Load and store ClearanceCase aggregates"""

    @staticmethod
    def get_model(student_id: str) -> Optional[ClearanceCaseModel]:
        return ClearanceCaseModel.query.filter_by(student_id=student_id).first()

    @staticmethod
    def to_case(model: ClearanceCaseModel, allow_resubmission: bool = True) -> ClearanceCase:
        """Rebuild the engine aggregate from its rows"""
        case = ClearanceCase(
            student_id=model.student_id,
            student_department=model.student_department,
            allow_resubmission=allow_resubmission,
        )
        for row in model.forms:
            form_type = FormType(row.form_type)
            payload = PAYLOAD_TYPES[form_type].from_dict(row.payload) if row.payload else None
            case.forms[form_type] = FormRecord(
                form_type=form_type,
                status=FormStatus(row.status),
                payload=payload,
                approvals=[_vote_from_row(v) for v in row.approvals],
                submitted_at=_from_db(row.submitted_at),
                decided_at=_from_db(row.decided_at),
                history=_history_from_json(row.history),
            )
        for row in model.documents:
            document_type = DocumentType(row.document_type)
            case.documents[document_type] = DocumentRecord(
                document_type=document_type,
                owner_id=row.owner_id,
                owner_department=row.owner_department,
                status=DocumentStatus(row.status),
                approvals=[_vote_from_row(v) for v in row.approvals],
                title=row.title or '',
                description=row.description or '',
                file_name=row.file_name or '',
                uploaded_at=_from_db(row.uploaded_at),
                decided_at=_from_db(row.decided_at),
                history=_history_from_json(row.history),
            )
        return case

    @staticmethod
    def create(student_id: str, student_department: str,
               allow_resubmission: bool = True) -> Tuple[ClearanceCaseModel, ClearanceCase]:
        """Open a new case and stage its rows in the session"""
        case = ClearanceCase.open(student_id, student_department, allow_resubmission)
        model = ClearanceCaseModel(student_id=student_id, student_department=student_department)
        db.session.add(model)
        CaseRepository.write(model, case)
        return model, case

    @staticmethod
    def write(model: ClearanceCaseModel, case: ClearanceCase) -> None:
        """Copy the aggregate state onto its rows; the caller commits"""
        forms = {row.form_type: row for row in model.forms}
        for form_type, record in case.forms.items():
            row = forms.get(form_type.value)
            if row is None:
                row = FormRecordModel(form_type=form_type.value)
                model.forms.append(row)
            row.status = record.status.value
            row.payload = record.payload.to_dict() if record.payload is not None else None
            row.submitted_at = _to_db(record.submitted_at)
            row.decided_at = _to_db(record.decided_at)
            row.history = [r.to_dict() for r in record.history]
            _sync_votes(row, record.approvals)

        documents = {row.document_type: row for row in model.documents}
        for document_type, record in case.documents.items():
            row = documents.get(document_type.value)
            if row is None:
                row = DocumentRecordModel(document_type=document_type.value)
                model.documents.append(row)
            row.owner_id = record.owner_id
            row.owner_department = record.owner_department
            row.status = record.status.value
            row.title = record.title
            row.description = record.description
            row.file_name = record.file_name
            row.uploaded_at = _to_db(record.uploaded_at)
            row.decided_at = _to_db(record.decided_at)
            row.history = [r.to_dict() for r in record.history]
            _sync_votes(row, record.approvals)

        # Always dirty the case row so the version check covers child changes
        model.updated_at = datetime.utcnow()

    @staticmethod
    def pending_models() -> List[ClearanceCaseModel]:
        """Cases with at least one form or document waiting for a decision"""
        return ClearanceCaseModel.query.filter(or_(
            ClearanceCaseModel.forms.any(status=FormStatus.SUBMITTED.value),
            ClearanceCaseModel.documents.any(status=DocumentStatus.UPLOADED.value),
        )).all()
