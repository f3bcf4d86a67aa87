"""
Clearance workflow and approval-routing engine
"""

from app.workflow.types import (
    FormType, DocumentType, ItemKind, FormStatus, DocumentStatus, Decision,
    Role, AccountRole, Department, ActorContext, ApprovalTarget, ApprovalVote,
    FormRecord, DocumentRecord, REQUIRED_DOCUMENTS, JAMB_WAEC_FAMILY
)
from app.workflow.payloads import parse_payload
from app.workflow.authority import can_approve, required_roles, roles_awaiting, role_for_department
from app.workflow.aggregator import derive_status
from app.workflow.dependencies import is_unlocked
from app.workflow.events import ClearanceEvent, EventBus, EventKind
from app.workflow.case import ClearanceCase
from app.workflow.documents import can_upload
from app.workflow.summary import summarize
from app.workflow.queue import pending_items

__all__ = [
    'FormType', 'DocumentType', 'ItemKind', 'FormStatus', 'DocumentStatus', 'Decision',
    'Role', 'AccountRole', 'Department', 'ActorContext', 'ApprovalTarget', 'ApprovalVote',
    'FormRecord', 'DocumentRecord', 'REQUIRED_DOCUMENTS', 'JAMB_WAEC_FAMILY',
    'parse_payload', 'can_approve', 'required_roles', 'roles_awaiting', 'role_for_department',
    'derive_status', 'is_unlocked', 'ClearanceEvent', 'EventBus', 'EventKind',
    'ClearanceCase', 'can_upload', 'summarize', 'pending_items'
]
