"""
Core types for the clearance workflow engine
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional, Union


class FormType(str, enum.Enum):
    """The five clearance forms, in the order students see them"""
    NEW_CLEARANCE = 'newClearance'
    PROV_ADMISSION = 'provAdmission'
    PERSONAL_RECORD = 'personalRecord'
    PERSONAL_RECORD_2 = 'personalRecord2'
    AFFIDAVIT = 'affidavit'


class DocumentType(str, enum.Enum):
    """Supporting document categories"""
    ADMISSION_LETTER = 'Admission Letter'
    JAMB_RESULT = 'JAMB Result'
    JAMB_ADMISSION = 'JAMB Admission'
    WAEC = 'WAEC'
    BIRTH_CERTIFICATE = 'Birth Certificate'
    PAYMENT_RECEIPT = 'Payment Receipt'
    MEDICAL_REPORT = 'Medical Report'
    PASSPORT = 'Passport'
    TRANSCRIPT = 'Transcript'


# Documents a student must have approved to be cleared. Transcript is optional.
REQUIRED_DOCUMENTS = tuple(d for d in DocumentType if d is not DocumentType.TRANSCRIPT)

JAMB_WAEC_FAMILY = frozenset({
    DocumentType.JAMB_RESULT,
    DocumentType.JAMB_ADMISSION,
    DocumentType.WAEC,
})


class ItemKind(str, enum.Enum):
    FORM = 'form'
    DOCUMENT = 'document'


class FormStatus(str, enum.Enum):
    LOCKED = 'locked'
    UNLOCKED = 'unlocked'
    SUBMITTED = 'submitted'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class DocumentStatus(str, enum.Enum):
    NOT_UPLOADED = 'not_uploaded'
    UPLOADED = 'uploaded'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class Decision(str, enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class Role(str, enum.Enum):
    """Approval roles a staff member can vote as"""
    DEPUTY_REGISTRAR = 'deputyRegistrar'
    SCHOOL_OFFICER = 'schoolOfficer'
    DEPARTMENT_HEAD = 'departmentHead'
    STUDENT_SUPPORT = 'studentSupport'
    FINANCE = 'finance'
    LIBRARY = 'library'
    HEALTH = 'health'
    LEGAL = 'legal'


class AccountRole(str, enum.Enum):
    STUDENT = 'student'
    STAFF = 'staff'
    ADMIN = 'admin'


class Department:
    """Names of the non-academic departments"""
    REGISTRAR = 'Registrar'
    STUDENT_SUPPORT = 'Student Support'
    FINANCE = 'Finance'
    HEALTH_SERVICES = 'Health Services'
    LIBRARY = 'Library'
    LEGAL = 'Legal'

    # Marker in an academic department name that identifies its head's office
    HOD_MARKER = 'HOD'


SERVICE_DEPARTMENTS = frozenset({
    Department.REGISTRAR,
    Department.STUDENT_SUPPORT,
    Department.FINANCE,
    Department.HEALTH_SERVICES,
    Department.LIBRARY,
    Department.LEGAL,
})


ClearanceItem = Union[FormType, DocumentType]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class ActorContext:
    """
    Who is performing an operation.

    Supplied by the authentication layer on every call; the engine never
    looks at sessions or credentials itself.
    """
    user_id: str
    department: str = ''
    role: AccountRole = AccountRole.STAFF
    managed_departments: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, 'role', AccountRole(self.role))
        object.__setattr__(self, 'managed_departments', frozenset(self.managed_departments or ()))

    @property
    def is_admin(self) -> bool:
        return self.role is AccountRole.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in (AccountRole.STAFF, AccountRole.ADMIN)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'department': self.department,
            'role': self.role.value,
            'managed_departments': sorted(self.managed_departments),
        }


@dataclass(frozen=True)
class ApprovalTarget:
    """The item an approval decision is about"""
    kind: ItemKind
    item_type: ClearanceItem
    owner_department: str


@dataclass
class ApprovalVote:
    required_role: Role
    decision: Decision = Decision.PENDING
    actor_id: Optional[str] = None
    comments: str = ''
    decided_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'required_role': self.required_role.value,
            'decision': self.decision.value,
            'actor_id': self.actor_id,
            'comments': self.comments,
            'decided_at': _iso(self.decided_at),
        }


@dataclass
class ApprovalRound:
    """A finished submission round kept after the item is re-submitted"""
    status: str
    approvals: List[ApprovalVote]
    submitted_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status,
            'approvals': [vote.to_dict() for vote in self.approvals],
            'submitted_at': _iso(self.submitted_at),
            'decided_at': _iso(self.decided_at),
        }


@dataclass
class FormRecord:
    form_type: FormType
    status: FormStatus = FormStatus.LOCKED
    payload: Any = None
    approvals: List[ApprovalVote] = field(default_factory=list)
    submitted_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None
    history: List[ApprovalRound] = field(default_factory=list)

    def vote_for(self, role: Role) -> Optional[ApprovalVote]:
        for vote in self.approvals:
            if vote.required_role is role:
                return vote
        return None

    def archive_round(self) -> None:
        """Move the finished round into history and reopen the form"""
        self.history.append(ApprovalRound(
            status=self.status.value,
            approvals=self.approvals,
            submitted_at=self.submitted_at,
            decided_at=self.decided_at,
        ))
        self.status = FormStatus.UNLOCKED
        self.approvals = []
        self.submitted_at = None
        self.decided_at = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'form_type': self.form_type.value,
            'status': self.status.value,
            'payload': self.payload.to_dict() if self.payload is not None else None,
            'approvals': [vote.to_dict() for vote in self.approvals],
            'submitted_at': _iso(self.submitted_at),
            'decided_at': _iso(self.decided_at),
            'history': [round_.to_dict() for round_ in self.history],
        }


@dataclass
class DocumentRecord:
    document_type: DocumentType
    owner_id: str
    owner_department: str
    status: DocumentStatus = DocumentStatus.NOT_UPLOADED
    approvals: List[ApprovalVote] = field(default_factory=list)
    title: str = ''
    description: str = ''
    file_name: str = ''
    uploaded_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None
    history: List[ApprovalRound] = field(default_factory=list)

    def vote_for(self, role: Role) -> Optional[ApprovalVote]:
        for vote in self.approvals:
            if vote.required_role is role:
                return vote
        return None

    def archive_round(self) -> None:
        self.history.append(ApprovalRound(
            status=self.status.value,
            approvals=self.approvals,
            submitted_at=self.uploaded_at,
            decided_at=self.decided_at,
        ))
        self.status = DocumentStatus.NOT_UPLOADED
        self.approvals = []
        self.uploaded_at = None
        self.decided_at = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'document_type': self.document_type.value,
            'status': self.status.value,
            'owner_id': self.owner_id,
            'owner_department': self.owner_department,
            'title': self.title,
            'description': self.description,
            'file_name': self.file_name,
            'approvals': [vote.to_dict() for vote in self.approvals],
            'uploaded_at': _iso(self.uploaded_at),
            'decided_at': _iso(self.decided_at),
            'history': [round_.to_dict() for round_ in self.history],
        }
