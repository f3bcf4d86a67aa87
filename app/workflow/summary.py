"""
Clearance progress summary shown on the student dashboard
"""

from typing import Any, Dict

from app.workflow.types import DocumentStatus, FormStatus, REQUIRED_DOCUMENTS

SUBMITTED_FORM_STATES = (FormStatus.SUBMITTED, FormStatus.APPROVED, FormStatus.REJECTED)
UPLOADED_DOCUMENT_STATES = (DocumentStatus.UPLOADED, DocumentStatus.APPROVED, DocumentStatus.REJECTED)


def completion_percentage(stats: Dict[str, Dict[str, int]]) -> int:
    """
    Forms and documents weigh half each. Within each half, submitting counts
    for a third and approval for the remaining two thirds.
    """
    forms = stats['forms']
    documents = stats['documents']

    form_percent = (
        forms['submitted'] / forms['total'] * 100 / 3
        + forms['approved'] / forms['total'] * 100 * 2 / 3
    ) * 0.5
    document_percent = (
        documents['uploaded'] / documents['total'] * 100 / 3
        + documents['approved'] / documents['total'] * 100 * 2 / 3
    ) * 0.5
    return int(round(form_percent + document_percent))


def summarize(case) -> Dict[str, Any]:
    """
    Build the progress summary for a case

    Args:
        case: ClearanceCase to summarize

    Returns:
        Counts, completion flags and overall completion percentage
    """
    forms = list(case.forms.values())
    documents = [case.documents[d] for d in REQUIRED_DOCUMENTS]

    stats = {
        'forms': {
            'total': len(forms),
            'submitted': sum(1 for f in forms if f.status in SUBMITTED_FORM_STATES),
            'approved': sum(1 for f in forms if f.status is FormStatus.APPROVED),
        },
        'documents': {
            'total': len(documents),
            'uploaded': sum(1 for d in documents if d.status in UPLOADED_DOCUMENT_STATES),
            'approved': sum(1 for d in documents if d.status is DocumentStatus.APPROVED),
        },
    }
    all_forms_submitted = stats['forms']['submitted'] == stats['forms']['total']
    all_forms_approved = stats['forms']['approved'] == stats['forms']['total']
    all_documents_approved = stats['documents']['approved'] == stats['documents']['total']

    return {
        'student_id': case.student_id,
        'stats': stats,
        'all_forms_submitted': all_forms_submitted,
        'all_forms_approved': all_forms_approved,
        'all_documents_approved': all_documents_approved,
        'clearance_complete': all_forms_approved and all_documents_approved,
        'completion_percentage': completion_percentage(stats),
    }
