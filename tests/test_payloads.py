from datetime import date

import pytest

from conftest import FORM_DATA

from app.utils.exceptions import ValidationError
from app.workflow.payloads import (
    AffidavitPayload, NewClearancePayload, PersonalRecord2Payload, PersonalRecordPayload,
    parse_payload
)
from app.workflow.types import FormType


def test_new_clearance_payload():
    payload = parse_payload(FormType.NEW_CLEARANCE, FORM_DATA[FormType.NEW_CLEARANCE])
    assert isinstance(payload, NewClearancePayload)
    assert payload.jamb_reg_no == '12345678AB'
    assert payload.o_level_qualification is True
    assert payload.change_of_course is False


def test_flags_accept_form_strings():
    data = dict(FORM_DATA[FormType.NEW_CLEARANCE], changeOfCourse='on', uploadOLevel='false')
    payload = parse_payload('newClearance', data)
    assert payload.change_of_course is True
    assert payload.upload_o_level is False


def test_personal_record_parses_date_of_birth():
    payload = parse_payload(FormType.PERSONAL_RECORD, FORM_DATA[FormType.PERSONAL_RECORD])
    assert isinstance(payload, PersonalRecordPayload)
    assert payload.date_of_birth == date(2004, 5, 1)
    assert payload.to_dict()['dateOfBirth'] == '2004-05-01'


def test_personal_record_2_education_history():
    payload = parse_payload(FormType.PERSONAL_RECORD_2, FORM_DATA[FormType.PERSONAL_RECORD_2])
    assert isinstance(payload, PersonalRecord2Payload)
    assert payload.education_history[0].school_name == 'Federal Government College'


def test_affidavit_round_trips_through_its_dict_form():
    payload = parse_payload(FormType.AFFIDAVIT, FORM_DATA[FormType.AFFIDAVIT])
    assert isinstance(payload, AffidavitPayload)
    assert parse_payload(FormType.AFFIDAVIT, payload.to_dict()) == payload


@pytest.mark.parametrize('data', [None, {}, [], 'text'])
def test_missing_data(data):
    with pytest.raises(ValidationError, match='No form data provided'):
        parse_payload(FormType.NEW_CLEARANCE, data)


@pytest.mark.parametrize('form_type, field, value', [
    (FormType.NEW_CLEARANCE, 'jambRegNo', ''),
    (FormType.PROV_ADMISSION, 'course', None),
    (FormType.PERSONAL_RECORD, 'gender', 'Other'),
    (FormType.PERSONAL_RECORD, 'maritalStatus', 'Divorced'),
    (FormType.PERSONAL_RECORD, 'dateOfBirth', '01/05/2004'),
    (FormType.PERSONAL_RECORD_2, 'parentGuardianPhone', '12'),
    (FormType.PERSONAL_RECORD_2, 'parentGuardianEmail', 'not-an-email'),
    (FormType.PERSONAL_RECORD_2, 'educationHistory', 'Primary school'),
    (FormType.AFFIDAVIT, 'signature', '   '),
    (FormType.AFFIDAVIT, 'studentName', 42),
])
def test_invalid_fields(form_type, field, value):
    data = dict(FORM_DATA[form_type])
    data[field] = value
    with pytest.raises(ValidationError):
        parse_payload(form_type, data)
