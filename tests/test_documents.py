import pytest

from conftest import STUDENT_ID, at

from app.utils.exceptions import (
    AlreadySubmitted, CommentRequired, NotFound, NotSubmitted, NotUnlocked, Unauthorized
)
from app.workflow.events import EventKind
from app.workflow.types import ActorContext, Decision, DocumentStatus, DocumentType, Role


def test_documents_locked_until_new_clearance_approved(case):
    assert not case.can_upload(DocumentType.PASSPORT)
    with pytest.raises(NotUnlocked):
        case.upload_document(DocumentType.PASSPORT, STUDENT_ID)


def test_upload_opens_a_single_review_slot(unlocked_case):
    events = unlocked_case.upload_document(
        DocumentType.MEDICAL_REPORT, STUDENT_ID, title='Medical report',
        file_name='medical.pdf', now=at(10)
    )
    record = unlocked_case.documents[DocumentType.MEDICAL_REPORT]
    assert record.status is DocumentStatus.UPLOADED
    assert record.uploaded_at == at(10)
    assert [v.required_role for v in record.approvals] == [Role.HEALTH]
    assert [e.kind for e in events] == [EventKind.UPLOADED]
    assert not unlocked_case.can_upload(DocumentType.MEDICAL_REPORT)


def test_title_defaults_to_document_type(unlocked_case):
    unlocked_case.upload_document(DocumentType.WAEC, STUDENT_ID)
    assert unlocked_case.documents[DocumentType.WAEC].title == 'WAEC'


def test_cannot_upload_while_under_review(unlocked_case):
    unlocked_case.upload_document(DocumentType.PASSPORT, STUDENT_ID)
    with pytest.raises(AlreadySubmitted):
        unlocked_case.upload_document(DocumentType.PASSPORT, STUDENT_ID)


def test_unknown_document_type(unlocked_case):
    with pytest.raises(NotFound):
        unlocked_case.upload_document('Diploma', STUDENT_ID)


def test_finance_cannot_decide_medical_report(unlocked_case, actors):
    unlocked_case.upload_document(DocumentType.MEDICAL_REPORT, STUDENT_ID)
    with pytest.raises(Unauthorized):
        unlocked_case.decide_document(DocumentType.MEDICAL_REPORT, actors['finance'], 'approved')
    assert unlocked_case.documents[DocumentType.MEDICAL_REPORT].status is DocumentStatus.UPLOADED


def test_health_services_approves_medical_report(unlocked_case, actors):
    unlocked_case.upload_document(DocumentType.MEDICAL_REPORT, STUDENT_ID)
    events = unlocked_case.decide_document(DocumentType.MEDICAL_REPORT, actors['health'], 'approved', now=at(20))

    record = unlocked_case.documents[DocumentType.MEDICAL_REPORT]
    assert record.status is DocumentStatus.APPROVED
    assert record.decided_at == at(20)
    assert record.approvals[0].actor_id == 'HS01'
    assert [e.kind for e in events] == [EventKind.APPROVED]
    with pytest.raises(AlreadySubmitted):
        unlocked_case.upload_document(DocumentType.MEDICAL_REPORT, STUDENT_ID)


def test_decide_needs_an_upload(unlocked_case, actors):
    with pytest.raises(NotSubmitted):
        unlocked_case.decide_document(DocumentType.PASSPORT, actors['support'], 'approved')


def test_rejected_document_can_be_uploaded_again(unlocked_case, actors):
    unlocked_case.upload_document(DocumentType.PAYMENT_RECEIPT, STUDENT_ID, file_name='receipt.jpg')
    with pytest.raises(CommentRequired):
        unlocked_case.decide_document(DocumentType.PAYMENT_RECEIPT, actors['finance'], 'rejected')

    unlocked_case.decide_document(DocumentType.PAYMENT_RECEIPT, actors['finance'], 'rejected',
                                  comments='Amount does not match')
    record = unlocked_case.documents[DocumentType.PAYMENT_RECEIPT]
    assert record.status is DocumentStatus.REJECTED
    assert unlocked_case.can_upload(DocumentType.PAYMENT_RECEIPT)

    unlocked_case.upload_document(DocumentType.PAYMENT_RECEIPT, STUDENT_ID, file_name='receipt2.jpg')
    assert record.status is DocumentStatus.UPLOADED
    assert record.approvals[0].decision is Decision.PENDING
    assert record.history[0].approvals[0].comments == 'Amount does not match'


def test_rejected_document_is_final_when_resubmission_disabled(unlocked_case, actors):
    unlocked_case.allow_resubmission = False
    unlocked_case.upload_document(DocumentType.PASSPORT, STUDENT_ID)
    unlocked_case.decide_document(DocumentType.PASSPORT, actors['support'], 'rejected', comments='Expired')
    assert not unlocked_case.can_upload(DocumentType.PASSPORT)
    with pytest.raises(NotUnlocked):
        unlocked_case.upload_document(DocumentType.PASSPORT, STUDENT_ID)


def test_jamb_documents_follow_managed_departments(unlocked_case, actors):
    unlocked_case.upload_document(DocumentType.JAMB_RESULT, STUDENT_ID)
    with pytest.raises(Unauthorized):
        unlocked_case.decide_document(DocumentType.JAMB_RESULT, actors['maths_officer'], 'approved')

    covering = ActorContext('SO03', 'Mathematics', managed_departments={'Mathematics', 'Computer Science'})
    unlocked_case.decide_document(DocumentType.JAMB_RESULT, covering, 'approved')
    assert unlocked_case.documents[DocumentType.JAMB_RESULT].status is DocumentStatus.APPROVED


def test_overlapping_managers_first_decision_wins(unlocked_case, actors):
    unlocked_case.upload_document(DocumentType.WAEC, STUDENT_ID)
    other = ActorContext('SO04', 'Physics', managed_departments={'Computer Science'})
    unlocked_case.decide_document(DocumentType.WAEC, actors['officer'], 'approved')
    with pytest.raises(NotSubmitted):
        unlocked_case.decide_document(DocumentType.WAEC, other, 'rejected', comments='Too late')


def test_transcript_goes_to_head_of_department(unlocked_case, actors):
    unlocked_case.upload_document(DocumentType.TRANSCRIPT, STUDENT_ID)
    with pytest.raises(Unauthorized):
        unlocked_case.decide_document(DocumentType.TRANSCRIPT, actors['registrar'], 'approved')
    unlocked_case.decide_document(DocumentType.TRANSCRIPT, actors['hod'], 'approved')
    assert unlocked_case.documents[DocumentType.TRANSCRIPT].status is DocumentStatus.APPROVED
