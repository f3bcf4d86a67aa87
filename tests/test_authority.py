import pytest

from app.workflow.authority import (
    can_approve, qualifying_roles, required_roles, role_for_department, roles_awaiting
)
from app.workflow.types import (
    ApprovalTarget, ApprovalVote, Decision, DocumentType, FormType, ItemKind, Role
)

CS = 'Computer Science'


def form(form_type, owner=CS):
    return ApprovalTarget(ItemKind.FORM, form_type, owner)


def document(document_type, owner=CS):
    return ApprovalTarget(ItemKind.DOCUMENT, document_type, owner)


@pytest.mark.parametrize('actor_key, item, expected', [
    ('registrar', form(FormType.PERSONAL_RECORD_2), True),
    ('support', form(FormType.PERSONAL_RECORD), True),
    ('legal', form(FormType.AFFIDAVIT), True),
    ('finance', form(FormType.AFFIDAVIT), False),
    ('library', form(FormType.PROV_ADMISSION), True),
    ('hod', form(FormType.PROV_ADMISSION), True),
    ('legal', form(FormType.PROV_ADMISSION), False),
    ('health', document(DocumentType.MEDICAL_REPORT), True),
    ('finance', document(DocumentType.MEDICAL_REPORT), False),
    ('finance', document(DocumentType.PAYMENT_RECEIPT), True),
    ('registrar', document(DocumentType.ADMISSION_LETTER), True),
    ('support', document(DocumentType.PASSPORT), True),
    ('hod', document(DocumentType.TRANSCRIPT), True),
    ('hod', document(DocumentType.PASSPORT), False),
    ('officer', document(DocumentType.WAEC), True),
    ('maths_officer', document(DocumentType.WAEC), False),
    ('student', form(FormType.NEW_CLEARANCE), False),
    ('student', document(DocumentType.PASSPORT), False),
])
def test_can_approve_policy_table(actors, actor_key, item, expected):
    assert can_approve(actors[actor_key], item) is expected


def test_school_officer_must_belong_to_or_manage_student_department(actors):
    target = form(FormType.NEW_CLEARANCE)
    assert can_approve(actors['officer'], target, Role.SCHOOL_OFFICER)
    assert not can_approve(actors['maths_officer'], target, Role.SCHOOL_OFFICER)
    assert can_approve(actors['maths_officer'], form(FormType.NEW_CLEARANCE, 'Mathematics'),
                       Role.SCHOOL_OFFICER)


def test_registrar_cannot_claim_school_officer_role(actors):
    target = form(FormType.NEW_CLEARANCE)
    assert can_approve(actors['registrar'], target, Role.DEPUTY_REGISTRAR)
    assert not can_approve(actors['registrar'], target, Role.SCHOOL_OFFICER)


def test_admin_may_vote_as_any_required_role(actors):
    target = form(FormType.PROV_ADMISSION)
    for role in required_roles(FormType.PROV_ADMISSION):
        assert can_approve(actors['admin'], target, role)
    assert not can_approve(actors['admin'], target, Role.LEGAL)


def test_can_approve_never_raises_on_bad_input(actors):
    assert can_approve(None, form(FormType.AFFIDAVIT)) is False
    assert can_approve(actors['legal'], None) is False
    assert can_approve(actors['legal'], form(FormType.AFFIDAVIT), 'notARole') is False


def test_qualifying_roles_for_provisional_admission(actors):
    assert qualifying_roles(actors['finance'], form(FormType.PROV_ADMISSION)) == [Role.FINANCE]
    assert qualifying_roles(actors['officer'], form(FormType.PROV_ADMISSION)) == []


def test_sequential_policy_offers_one_role_at_a_time():
    votes = [ApprovalVote(Role.DEPUTY_REGISTRAR), ApprovalVote(Role.SCHOOL_OFFICER)]
    assert roles_awaiting(FormType.NEW_CLEARANCE, votes) == [Role.DEPUTY_REGISTRAR]

    votes[0].decision = Decision.APPROVED
    assert roles_awaiting(FormType.NEW_CLEARANCE, votes) == [Role.SCHOOL_OFFICER]

    votes[0].decision = Decision.REJECTED
    assert roles_awaiting(FormType.NEW_CLEARANCE, votes) == []


def test_parallel_policy_offers_every_undecided_role():
    votes = [ApprovalVote(role) for role in required_roles(FormType.PROV_ADMISSION)]
    votes[3].decision = Decision.APPROVED
    offered = roles_awaiting(FormType.PROV_ADMISSION, votes)
    assert len(offered) == 5
    assert Role.FINANCE not in offered


@pytest.mark.parametrize('department, role', [
    ('Registrar', Role.DEPUTY_REGISTRAR),
    ('Health Services', Role.HEALTH),
    ('Computer Science HOD', Role.DEPARTMENT_HEAD),
    ('Computer Science', Role.SCHOOL_OFFICER),
])
def test_role_for_department(department, role):
    assert role_for_department(department) is role
