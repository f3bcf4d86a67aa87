"""
Role-authority resolver

Single policy table deciding which staff member may approve which form or
document. Every screen and service asks this module; none re-implements it.
The table is fixed and is not user-configurable.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from app.workflow.types import (
    ActorContext, ApprovalTarget, ApprovalVote, ClearanceItem, Decision,
    Department, DocumentType, FormType, ItemKind, JAMB_WAEC_FAMILY, Role,
    SERVICE_DEPARTMENTS
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApprovalPolicy:
    """Required roles for one item type"""
    roles: Tuple[Role, ...]
    # Sequential policies offer each role only after every earlier role approved
    sequential: bool = False


FORM_POLICIES: Dict[FormType, ApprovalPolicy] = {
    FormType.NEW_CLEARANCE: ApprovalPolicy(
        roles=(Role.DEPUTY_REGISTRAR, Role.SCHOOL_OFFICER),
        sequential=True,
    ),
    FormType.PROV_ADMISSION: ApprovalPolicy(
        roles=(
            Role.DEPUTY_REGISTRAR,
            Role.DEPARTMENT_HEAD,
            Role.STUDENT_SUPPORT,
            Role.FINANCE,
            Role.LIBRARY,
            Role.HEALTH,
        ),
    ),
    FormType.PERSONAL_RECORD: ApprovalPolicy(roles=(Role.STUDENT_SUPPORT,)),
    FormType.PERSONAL_RECORD_2: ApprovalPolicy(roles=(Role.DEPUTY_REGISTRAR,)),
    FormType.AFFIDAVIT: ApprovalPolicy(roles=(Role.LEGAL,)),
}

DOCUMENT_ROLES: Dict[DocumentType, Role] = {
    DocumentType.ADMISSION_LETTER: Role.DEPUTY_REGISTRAR,
    DocumentType.BIRTH_CERTIFICATE: Role.STUDENT_SUPPORT,
    DocumentType.PASSPORT: Role.STUDENT_SUPPORT,
    DocumentType.PAYMENT_RECEIPT: Role.FINANCE,
    DocumentType.MEDICAL_REPORT: Role.HEALTH,
    DocumentType.TRANSCRIPT: Role.DEPARTMENT_HEAD,
    DocumentType.JAMB_RESULT: Role.SCHOOL_OFFICER,
    DocumentType.JAMB_ADMISSION: Role.SCHOOL_OFFICER,
    DocumentType.WAEC: Role.SCHOOL_OFFICER,
}

ROLE_DEPARTMENTS: Dict[Role, str] = {
    Role.DEPUTY_REGISTRAR: Department.REGISTRAR,
    Role.STUDENT_SUPPORT: Department.STUDENT_SUPPORT,
    Role.FINANCE: Department.FINANCE,
    Role.LIBRARY: Department.LIBRARY,
    Role.HEALTH: Department.HEALTH_SERVICES,
    Role.LEGAL: Department.LEGAL,
}

FORM_LABELS = {
    FormType.NEW_CLEARANCE: 'Deputy Registrar, then School Officer',
    FormType.PROV_ADMISSION: 'Various departmental roles',
    FormType.PERSONAL_RECORD: 'Student Support Department',
    FormType.PERSONAL_RECORD_2: 'Registrar Department',
    FormType.AFFIDAVIT: 'Legal Department',
}

DOCUMENT_LABELS = {
    DocumentType.ADMISSION_LETTER: 'Registrar Department',
    DocumentType.BIRTH_CERTIFICATE: 'Student Support Department',
    DocumentType.PASSPORT: 'Student Support Department',
    DocumentType.PAYMENT_RECEIPT: 'Finance Department',
    DocumentType.MEDICAL_REPORT: 'Health Services Department',
    DocumentType.TRANSCRIPT: 'Head of Department (HOD)',
    DocumentType.JAMB_RESULT: "School Officer (managing student's department)",
    DocumentType.JAMB_ADMISSION: "School Officer (managing student's department)",
    DocumentType.WAEC: "School Officer (managing student's department)",
}


def is_hod(department: str) -> bool:
    return bool(department) and Department.HOD_MARKER in department


def is_academic(department: str) -> bool:
    """Academic offices are everything but HODs and service departments"""
    return bool(department) and not is_hod(department) and department not in SERVICE_DEPARTMENTS


def role_for_department(department: str) -> Role:
    """
    Default approval role of a staff member's department

    Args:
        department: Staff department

    Returns:
        The role that department normally votes as
    """
    for role, role_department in ROLE_DEPARTMENTS.items():
        if role_department == department:
            return role
    return Role.DEPARTMENT_HEAD if is_hod(department) else Role.SCHOOL_OFFICER


def required_roles(item_type: ClearanceItem) -> Tuple[Role, ...]:
    """Roles that must each cast one vote on the item, in offer order"""
    if isinstance(item_type, FormType):
        return FORM_POLICIES[item_type].roles
    return (DOCUMENT_ROLES[item_type],)


def roles_awaiting(item_type: ClearanceItem, votes: Sequence[ApprovalVote]) -> List[Role]:
    """
    Roles currently offered a vote

    For sequential policies only the first undecided role is offered, and
    only while every earlier role has approved. Parallel policies offer
    every undecided role.
    """
    decided = {vote.required_role: vote.decision for vote in votes}
    sequential = isinstance(item_type, FormType) and FORM_POLICIES[item_type].sequential
    offered = []
    for role in required_roles(item_type):
        decision = decided.get(role, Decision.PENDING)
        if decision is Decision.PENDING:
            offered.append(role)
            if sequential:
                break
        elif sequential and decision is not Decision.APPROVED:
            break
    return offered


def _manages(actor: ActorContext, owner_department: str) -> bool:
    return owner_department in actor.managed_departments


def _qualifies(actor: ActorContext, role: Role, owner_department: str) -> bool:
    department = actor.department or ''
    if role is Role.DEPARTMENT_HEAD:
        return is_hod(department)
    if role is Role.SCHOOL_OFFICER:
        return is_academic(department) and (
            department == owner_department or _manages(actor, owner_department)
        )
    return ROLE_DEPARTMENTS.get(role) == department


DocumentRule = Callable[[ActorContext, str], bool]


def _department_rule(department: str) -> DocumentRule:
    return lambda actor, owner_department: actor.department == department


def _hod_rule(actor: ActorContext, owner_department: str) -> bool:
    return is_hod(actor.department)


def _managed_rule(actor: ActorContext, owner_department: str) -> bool:
    return _manages(actor, owner_department)


DOCUMENT_RULES: Dict[DocumentType, DocumentRule] = {
    DocumentType.ADMISSION_LETTER: _department_rule(Department.REGISTRAR),
    DocumentType.BIRTH_CERTIFICATE: _department_rule(Department.STUDENT_SUPPORT),
    DocumentType.PASSPORT: _department_rule(Department.STUDENT_SUPPORT),
    DocumentType.PAYMENT_RECEIPT: _department_rule(Department.FINANCE),
    DocumentType.MEDICAL_REPORT: _department_rule(Department.HEALTH_SERVICES),
    DocumentType.TRANSCRIPT: _hod_rule,
}
DOCUMENT_RULES.update({document_type: _managed_rule for document_type in JAMB_WAEC_FAMILY})


def can_approve(actor: Optional[ActorContext], item: Optional[ApprovalTarget],
                role: Optional[Role] = None) -> bool:
    """
    Decide whether an actor may approve an item

    Args:
        actor: Who is acting
        item: Form or document being decided, with its owner's department
        role: Approval role the actor claims; any required role when omitted

    Returns:
        True if the actor may cast that vote. Never raises.
    """
    if actor is None or item is None:
        return False

    try:
        roles = required_roles(item.item_type)
        if role is not None:
            role = Role(role)
    except (KeyError, ValueError):
        logger.debug("No approval policy for %r as %r", item.item_type, role)
        return False

    if role is not None and role not in roles:
        return False
    if actor.is_admin:
        return True
    if not actor.is_staff:
        return False

    if item.kind is ItemKind.DOCUMENT:
        return DOCUMENT_RULES[item.item_type](actor, item.owner_department)

    candidates = roles if role is None else (role,)
    return any(_qualifies(actor, candidate, item.owner_department) for candidate in candidates)


def qualifying_roles(actor: ActorContext, item: ApprovalTarget) -> List[Role]:
    """Required roles of the item that the actor may vote as"""
    try:
        roles = required_roles(item.item_type)
    except KeyError:
        return []
    return [role for role in roles if can_approve(actor, item, role)]


def approver_label(item_type: ClearanceItem) -> str:
    """Human readable description of who approves an item"""
    if isinstance(item_type, FormType):
        return FORM_LABELS.get(item_type, 'Unknown')
    return DOCUMENT_LABELS.get(item_type, 'Unknown Department')
