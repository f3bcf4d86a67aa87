"""
Typed form payloads

Each form type has its own payload class. ``parse_payload`` picks the class
from the form type and validates the submitted JSON; the engine itself only
checks that the payload belongs to the form it is submitted with.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Union

from app.utils.exceptions import ValidationError
from app.utils.validators import (
    validate_required, validate_choice, parse_date,
    validate_phone_number, validate_email
)
from app.workflow.types import FormType


def _text(data: Dict[str, Any], key: str, label: str, required: bool = True) -> str:
    value = data.get(key)
    if required:
        validate_required(value, label)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")
    return value.strip()


def _flag(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if isinstance(value, str):
        return value.strip().lower() in ['true', 'on', '1', 'yes']
    return bool(value)


def _optional_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class NewClearancePayload:
    form_type = FormType.NEW_CLEARANCE

    student_name: str
    jamb_reg_no: str
    o_level_qualification: bool = False
    change_of_course: bool = False
    change_of_institution: bool = False
    upload_o_level: bool = False
    jamb_admission_letter: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NewClearancePayload':
        return cls(
            student_name=_text(data, 'studentName', 'Student name'),
            jamb_reg_no=_text(data, 'jambRegNo', 'JAMB registration number'),
            o_level_qualification=_flag(data, 'oLevelQualification'),
            change_of_course=_flag(data, 'changeOfCourse'),
            change_of_institution=_flag(data, 'changeOfInstitution'),
            upload_o_level=_flag(data, 'uploadOLevel'),
            jamb_admission_letter=_flag(data, 'jambAdmissionLetter'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentName': self.student_name,
            'jambRegNo': self.jamb_reg_no,
            'oLevelQualification': self.o_level_qualification,
            'changeOfCourse': self.change_of_course,
            'changeOfInstitution': self.change_of_institution,
            'uploadOLevel': self.upload_o_level,
            'jambAdmissionLetter': self.jamb_admission_letter,
        }


@dataclass(frozen=True)
class ProvAdmissionPayload:
    form_type = FormType.PROV_ADMISSION

    student_name: str
    department: str
    course: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProvAdmissionPayload':
        return cls(
            student_name=_text(data, 'studentName', 'Student name'),
            department=_text(data, 'department', 'Department'),
            course=_text(data, 'course', 'Course'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentName': self.student_name,
            'department': self.department,
            'course': self.course,
        }


@dataclass(frozen=True)
class PersonalRecordPayload:
    form_type = FormType.PERSONAL_RECORD

    full_name: str
    school_faculty: str
    department: str
    course: str
    gender: str
    date_of_birth: date
    marital_status: str
    state_of_origin: str
    nationality: str
    home_address: str
    next_of_kin: str
    matric_no: str = ''
    religion: str = ''
    church: str = ''
    blood_group: str = ''
    home_town: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersonalRecordPayload':
        gender = _text(data, 'gender', 'Gender')
        validate_choice(gender, ['Male', 'Female'], 'Gender')
        marital_status = _text(data, 'maritalStatus', 'Marital status')
        validate_choice(marital_status, ['Single', 'Married'], 'Marital status')
        return cls(
            full_name=_text(data, 'fullName', 'Full name'),
            school_faculty=_text(data, 'schoolFaculty', 'School/Faculty'),
            department=_text(data, 'department', 'Department'),
            course=_text(data, 'course', 'Course'),
            gender=gender,
            date_of_birth=parse_date(data.get('dateOfBirth'), 'Date of birth'),
            marital_status=marital_status,
            state_of_origin=_text(data, 'stateOfOrigin', 'State of origin'),
            nationality=_text(data, 'nationality', 'Nationality'),
            home_address=_text(data, 'homeAddress', 'Home address'),
            next_of_kin=_text(data, 'nextOfKin', 'Next of kin'),
            matric_no=_text(data, 'matricNo', 'Matric number', required=False),
            religion=_text(data, 'religion', 'Religion', required=False),
            church=_text(data, 'church', 'Church', required=False),
            blood_group=_text(data, 'bloodGroup', 'Blood group', required=False),
            home_town=_text(data, 'homeTown', 'Home town', required=False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fullName': self.full_name,
            'matricNo': self.matric_no,
            'schoolFaculty': self.school_faculty,
            'department': self.department,
            'course': self.course,
            'gender': self.gender,
            'dateOfBirth': _optional_date(self.date_of_birth),
            'maritalStatus': self.marital_status,
            'religion': self.religion,
            'church': self.church,
            'bloodGroup': self.blood_group,
            'homeTown': self.home_town,
            'stateOfOrigin': self.state_of_origin,
            'nationality': self.nationality,
            'homeAddress': self.home_address,
            'nextOfKin': self.next_of_kin,
        }


@dataclass(frozen=True)
class EducationEntry:
    school_name: str
    school_address: str = ''
    start_date: str = ''
    end_date: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EducationEntry':
        if not isinstance(data, dict):
            raise ValidationError("Education history entries must be objects")
        return cls(
            school_name=_text(data, 'schoolName', 'School name'),
            school_address=_text(data, 'schoolAddress', 'School address', required=False),
            start_date=_text(data, 'startDate', 'Start date', required=False),
            end_date=_text(data, 'endDate', 'End date', required=False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schoolName': self.school_name,
            'schoolAddress': self.school_address,
            'startDate': self.start_date,
            'endDate': self.end_date,
        }


@dataclass(frozen=True)
class PersonalRecord2Payload:
    form_type = FormType.PERSONAL_RECORD_2

    parent_guardian_name: str
    parent_guardian_address: str
    parent_guardian_origin: str
    parent_guardian_country: str
    parent_guardian_phone: str
    parent_guardian_email: str = ''
    father_name: str = ''
    father_address: str = ''
    father_phone: str = ''
    father_occupation: str = ''
    mother_name: str = ''
    mother_address: str = ''
    mother_phone: str = ''
    mother_occupation: str = ''
    education_history: List[EducationEntry] = field(default_factory=list)
    qualifications: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersonalRecord2Payload':
        phone = _text(data, 'parentGuardianPhone', 'Parent/guardian phone')
        if not validate_phone_number(phone):
            raise ValidationError("Parent/guardian phone must be a valid phone number")
        email = _text(data, 'parentGuardianEmail', 'Parent/guardian email', required=False)
        if email and not validate_email(email):
            raise ValidationError("Parent/guardian email is not a valid email address")
        history = data.get('educationHistory') or []
        if not isinstance(history, list):
            raise ValidationError("Education history must be a list")
        return cls(
            parent_guardian_name=_text(data, 'parentGuardianName', 'Parent/guardian name'),
            parent_guardian_address=_text(data, 'parentGuardianAddress', 'Parent/guardian address'),
            parent_guardian_origin=_text(data, 'parentGuardianOrigin', 'Parent/guardian state of origin'),
            parent_guardian_country=_text(data, 'parentGuardianCountry', 'Parent/guardian country'),
            parent_guardian_phone=phone,
            parent_guardian_email=email,
            father_name=_text(data, 'fatherName', 'Father name', required=False),
            father_address=_text(data, 'fatherAddress', 'Father address', required=False),
            father_phone=_text(data, 'fatherPhone', 'Father phone', required=False),
            father_occupation=_text(data, 'fatherOccupation', 'Father occupation', required=False),
            mother_name=_text(data, 'motherName', 'Mother name', required=False),
            mother_address=_text(data, 'motherAddress', 'Mother address', required=False),
            mother_phone=_text(data, 'motherPhone', 'Mother phone', required=False),
            mother_occupation=_text(data, 'motherOccupation', 'Mother occupation', required=False),
            education_history=[EducationEntry.from_dict(entry) for entry in history],
            qualifications=_text(data, 'qualifications', 'Qualifications', required=False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parentGuardianName': self.parent_guardian_name,
            'parentGuardianAddress': self.parent_guardian_address,
            'parentGuardianOrigin': self.parent_guardian_origin,
            'parentGuardianCountry': self.parent_guardian_country,
            'parentGuardianPhone': self.parent_guardian_phone,
            'parentGuardianEmail': self.parent_guardian_email,
            'fatherName': self.father_name,
            'fatherAddress': self.father_address,
            'fatherPhone': self.father_phone,
            'fatherOccupation': self.father_occupation,
            'motherName': self.mother_name,
            'motherAddress': self.mother_address,
            'motherPhone': self.mother_phone,
            'motherOccupation': self.mother_occupation,
            'educationHistory': [entry.to_dict() for entry in self.education_history],
            'qualifications': self.qualifications,
        }


@dataclass(frozen=True)
class AffidavitPayload:
    form_type = FormType.AFFIDAVIT

    student_name: str
    faculty: str
    department: str
    course: str
    agreement_date: date
    signature: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AffidavitPayload':
        return cls(
            student_name=_text(data, 'studentName', 'Student name'),
            faculty=_text(data, 'faculty', 'Faculty'),
            department=_text(data, 'department', 'Department'),
            course=_text(data, 'course', 'Course'),
            agreement_date=parse_date(data.get('agreementDate'), 'Agreement date'),
            signature=_text(data, 'signature', 'Signature'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentName': self.student_name,
            'faculty': self.faculty,
            'department': self.department,
            'course': self.course,
            'agreementDate': _optional_date(self.agreement_date),
            'signature': self.signature,
        }


FormPayload = Union[
    NewClearancePayload,
    ProvAdmissionPayload,
    PersonalRecordPayload,
    PersonalRecord2Payload,
    AffidavitPayload,
]

PAYLOAD_TYPES = {
    FormType.NEW_CLEARANCE: NewClearancePayload,
    FormType.PROV_ADMISSION: ProvAdmissionPayload,
    FormType.PERSONAL_RECORD: PersonalRecordPayload,
    FormType.PERSONAL_RECORD_2: PersonalRecord2Payload,
    FormType.AFFIDAVIT: AffidavitPayload,
}


def parse_payload(form_type: FormType, data: Optional[Dict[str, Any]]) -> FormPayload:
    """
    Build the typed payload for a form submission

    Args:
        form_type: Form being submitted
        data: Submitted JSON object

    Returns:
        Payload instance matching the form type

    Raises:
        ValidationError: If data is missing or invalid
    """
    if not isinstance(data, dict) or not data:
        raise ValidationError("No form data provided")
    return PAYLOAD_TYPES[FormType(form_type)].from_dict(data)
