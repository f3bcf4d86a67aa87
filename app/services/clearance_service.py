"""
Clearance service

Runs every clearance operation as one transaction: take the per-case lock,
load the case, apply the engine operation, store, commit, and only then
publish the resulting events.
"""

import threading
import weakref
from typing import Any, Callable, Dict, List, Optional

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from app.models import db, Student
from app.services.case_repository import CaseRepository
from app.utils.exceptions import ConcurrencyConflict, NotFound, Unauthorized, ValidationError
from app.utils.helpers import log_info
from app.utils.validators import validate_file_extension
from app.workflow.case import ClearanceCase
from app.workflow.events import ClearanceEvent, EventBus
from app.workflow.payloads import parse_payload
from app.workflow.queue import pending_items
from app.workflow.summary import summarize
from app.workflow.types import AccountRole, ActorContext, DocumentType, FormType


class CaseLocks:
    """
    One lock per case id, so writes to a case never interleave in-process

    Entries only live while some caller holds the lock object, so the
    registry does not grow with every case ever touched.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = weakref.WeakValueDictionary()

    def get(self, case_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(case_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[case_id] = lock
            return lock

    def __len__(self) -> int:
        return len(self._locks)


case_locks = CaseLocks()


def get_event_bus() -> EventBus:
    return current_app.extensions['clearance_events']


def _form_type(value) -> FormType:
    try:
        return FormType(value)
    except ValueError:
        raise NotFound(f"Unknown form type '{value}'")


def _document_type(value) -> DocumentType:
    try:
        return DocumentType(value)
    except ValueError:
        raise NotFound(f"Unknown document type '{value}'")


def _role(value) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return value


class ClearanceService:
    """Clearance service class"""

    @staticmethod
    def _allow_resubmission() -> bool:
        return current_app.config.get('CLEARANCE_ALLOW_RESUBMISSION', True)

    @staticmethod
    def _require_owner(actor: ActorContext, student_id: str) -> None:
        if actor.is_admin:
            return
        if actor.role is not AccountRole.STUDENT or actor.user_id != student_id:
            raise Unauthorized("Only the student who owns this case can do that")

    @staticmethod
    def _require_viewer(actor: ActorContext, student_id: str) -> None:
        if actor.is_staff:
            return
        if actor.user_id != student_id:
            raise Unauthorized("Not allowed to view this clearance case")

    @staticmethod
    def _load(student_id: str, create: bool = True):
        """Fetch the case, opening it on first access unless create is False"""
        model = CaseRepository.get_model(student_id)
        if model is not None:
            return model, CaseRepository.to_case(model, ClearanceService._allow_resubmission())
        if not create:
            raise NotFound(f"No clearance case for '{student_id}'")

        student = Student.query.filter_by(student_id=student_id).first()
        if not student:
            raise NotFound(f"No student with id '{student_id}'")
        log_info(f"Opening clearance case for {student_id}")
        return CaseRepository.create(student_id, student.department,
                                     ClearanceService._allow_resubmission())

    @staticmethod
    def _mutate(student_id: str, operation: Callable[[ClearanceCase], List[ClearanceEvent]],
                create: bool = True) -> Dict[str, Any]:
        with case_locks.get(student_id):
            try:
                model, case = ClearanceService._load(student_id, create)
                events = operation(case)
                CaseRepository.write(model, case)
                db.session.commit()
            except StaleDataError:
                db.session.rollback()
                raise ConcurrencyConflict("Clearance case was changed by someone else, reload and try again")
            except Exception:
                db.session.rollback()
                raise

        get_event_bus().publish(events)
        return {
            'case': case.to_dict(),
            'events': [event.to_dict() for event in events],
        }

    @staticmethod
    def get_case(actor: ActorContext, student_id: str) -> Dict[str, Any]:
        """Case projection with lock state; opens the case on first access"""
        ClearanceService._require_viewer(actor, student_id)
        with case_locks.get(student_id):
            created = CaseRepository.get_model(student_id) is None
            _, case = ClearanceService._load(student_id)
            if created:
                db.session.commit()
        return case.to_dict()

    @staticmethod
    def get_summary(actor: ActorContext, student_id: str) -> Dict[str, Any]:
        ClearanceService._require_viewer(actor, student_id)
        model = CaseRepository.get_model(student_id)
        if model is not None:
            return summarize(CaseRepository.to_case(model, ClearanceService._allow_resubmission()))

        # Nothing stored yet: summarize the case as it would be opened
        student = Student.query.filter_by(student_id=student_id).first()
        if not student:
            raise NotFound(f"No student with id '{student_id}'")
        return summarize(ClearanceCase.open(student_id, student.department))

    @staticmethod
    def submit_form(actor: ActorContext, student_id: str, form_type: str,
                    data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Submit one of the student's forms

        Args:
            actor: Logged-in user
            student_id: Case owner
            form_type: Form being submitted
            data: Raw form fields

        Returns:
            Updated case projection and the events produced
        """
        ClearanceService._require_owner(actor, student_id)
        form_type = _form_type(form_type)
        payload = parse_payload(form_type, data)
        return ClearanceService._mutate(
            student_id, lambda case: case.submit(form_type, payload, actor.user_id)
        )

    @staticmethod
    def decide_form(actor: ActorContext, student_id: str, form_type: str, decision: str,
                    comments: str = '', role: Optional[str] = None) -> Dict[str, Any]:
        """Record an approver's decision on a submitted form"""
        form_type = _form_type(form_type)
        return ClearanceService._mutate(
            student_id,
            lambda case: case.decide(form_type, actor, decision, comments or '', _role(role)),
            create=False
        )

    @staticmethod
    def upload_document(actor: ActorContext, student_id: str, document_type: str,
                        data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Register an uploaded document's metadata for review"""
        ClearanceService._require_owner(actor, student_id)
        document_type = _document_type(document_type)
        data = data or {}
        file_name = (data.get('file_name') or '').strip()
        if file_name:
            allowed = current_app.config.get('ALLOWED_EXTENSIONS', set())
            if not validate_file_extension(file_name, allowed):
                raise ValidationError(f"File type not allowed. Allowed: {', '.join(sorted(allowed))}")
        return ClearanceService._mutate(
            student_id,
            lambda case: case.upload_document(
                document_type, actor.user_id,
                title=(data.get('title') or '').strip(),
                description=(data.get('description') or '').strip(),
                file_name=file_name,
            )
        )

    @staticmethod
    def decide_document(actor: ActorContext, student_id: str, document_type: str, decision: str,
                        comments: str = '', role: Optional[str] = None) -> Dict[str, Any]:
        """Approve or reject an uploaded document"""
        document_type = _document_type(document_type)
        return ClearanceService._mutate(
            student_id,
            lambda case: case.decide_document(document_type, actor, decision, comments or '', _role(role)),
            create=False
        )

    @staticmethod
    def pending_for(actor: ActorContext, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Staff work queue across all cases"""
        if not actor.is_staff:
            raise Unauthorized("Staff access required")
        if limit is None:
            limit = current_app.config.get('STAFF_QUEUE_LIMIT')
        allow = ClearanceService._allow_resubmission()
        cases = [CaseRepository.to_case(model, allow) for model in CaseRepository.pending_models()]
        return pending_items(actor, cases, limit)
