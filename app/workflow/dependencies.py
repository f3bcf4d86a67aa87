"""
Form dependency graph

The graph is deliberately flat: New Clearance has no prerequisite, and
every other form and every document depends on New Clearance alone. The
four later forms unlock together, not one after another.
"""

from typing import Dict, Optional, Set

from app.workflow.types import ClearanceItem, DocumentType, FormStatus, FormType

PREREQUISITES: Dict[ClearanceItem, Optional[FormType]] = {
    FormType.NEW_CLEARANCE: None,
}
PREREQUISITES.update({
    form_type: FormType.NEW_CLEARANCE
    for form_type in FormType
    if form_type is not FormType.NEW_CLEARANCE
})
PREREQUISITES.update({document_type: FormType.NEW_CLEARANCE for document_type in DocumentType})


def prerequisite_of(item: ClearanceItem) -> Optional[FormType]:
    """Form that must be approved before ``item`` is reachable"""
    return PREREQUISITES[item]


def is_unlocked(item: ClearanceItem, case) -> bool:
    """
    Whether a form or document is currently reachable for a case

    Args:
        item: Form type or document type
        case: ClearanceCase to check against

    Returns:
        True if the item's prerequisite (if any) is approved
    """
    prerequisite = prerequisite_of(item)
    if prerequisite is None:
        return True
    return case.forms[prerequisite].status is FormStatus.APPROVED


def unlocked_items(case) -> Set[ClearanceItem]:
    return {item for item in PREREQUISITES if is_unlocked(item, case)}
