"""
Shared fixtures: engine actors and payloads, plus a Flask app on in-memory SQLite
"""

from datetime import datetime, timedelta, timezone

import pytest

from app import create_app
from app.models import db, Student, Staff
from app.workflow.case import ClearanceCase
from app.workflow.payloads import parse_payload
from app.workflow.types import AccountRole, ActorContext, FormType

STUDENT_ID = 'CSC/2021/001'
STUDENT_DEPARTMENT = 'Computer Science'
PASSWORD = 'password123'

T0 = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)


def at(minutes):
    return T0 + timedelta(minutes=minutes)


FORM_DATA = {
    FormType.NEW_CLEARANCE: {
        'studentName': 'Ada Obi',
        'jambRegNo': '12345678AB',
        'oLevelQualification': True,
    },
    FormType.PROV_ADMISSION: {
        'studentName': 'Ada Obi',
        'department': STUDENT_DEPARTMENT,
        'course': 'B.Sc. Computer Science',
    },
    FormType.PERSONAL_RECORD: {
        'fullName': 'Ada Obi',
        'schoolFaculty': 'Science',
        'department': STUDENT_DEPARTMENT,
        'course': 'B.Sc. Computer Science',
        'gender': 'Female',
        'dateOfBirth': '2004-05-01',
        'maritalStatus': 'Single',
        'stateOfOrigin': 'Enugu',
        'nationality': 'Nigerian',
        'homeAddress': '12 Palm Avenue, Enugu',
        'nextOfKin': 'Chidi Obi',
    },
    FormType.PERSONAL_RECORD_2: {
        'parentGuardianName': 'Chidi Obi',
        'parentGuardianAddress': '12 Palm Avenue, Enugu',
        'parentGuardianOrigin': 'Enugu',
        'parentGuardianCountry': 'Nigeria',
        'parentGuardianPhone': '+234 803 123 4567',
        'educationHistory': [{'schoolName': 'Federal Government College'}],
    },
    FormType.AFFIDAVIT: {
        'studentName': 'Ada Obi',
        'faculty': 'Science',
        'department': STUDENT_DEPARTMENT,
        'course': 'B.Sc. Computer Science',
        'agreementDate': '2025-01-10',
        'signature': 'A. Obi',
    },
}


def payload_for(form_type):
    return parse_payload(form_type, FORM_DATA[form_type])


@pytest.fixture
def actors():
    """Staff contexts as the auth layer would build them"""
    return {
        'registrar': ActorContext('REG01', 'Registrar'),
        'officer': ActorContext('SO01', STUDENT_DEPARTMENT, managed_departments={STUDENT_DEPARTMENT}),
        'maths_officer': ActorContext('SO02', 'Mathematics', managed_departments={'Mathematics'}),
        'hod': ActorContext('HOD01', 'Computer Science HOD'),
        'support': ActorContext('SS01', 'Student Support'),
        'finance': ActorContext('FIN01', 'Finance'),
        'library': ActorContext('LIB01', 'Library'),
        'health': ActorContext('HS01', 'Health Services'),
        'legal': ActorContext('LEG01', 'Legal'),
        'admin': ActorContext('ADM01', 'Registrar', role=AccountRole.ADMIN),
        'student': ActorContext(STUDENT_ID, STUDENT_DEPARTMENT, role=AccountRole.STUDENT),
    }


@pytest.fixture
def case():
    return ClearanceCase.open(STUDENT_ID, STUDENT_DEPARTMENT)


@pytest.fixture
def unlocked_case(case, actors):
    """Case whose New Clearance form is approved"""
    case.submit(FormType.NEW_CLEARANCE, payload_for(FormType.NEW_CLEARANCE), STUDENT_ID, now=at(0))
    case.decide(FormType.NEW_CLEARANCE, actors['registrar'], 'approved', now=at(1))
    case.decide(FormType.NEW_CLEARANCE, actors['officer'], 'approved', now=at(2))
    return case


STAFF = [
    ('REG01', 'registrar@uni.edu', 'Registrar', 'staff', 'Approved'),
    ('SO01', 'officer@uni.edu', STUDENT_DEPARTMENT, 'staff', 'Approved'),
    ('HOD01', 'hod@uni.edu', 'Computer Science HOD', 'staff', 'Approved'),
    ('FIN01', 'finance@uni.edu', 'Finance', 'staff', 'Approved'),
    ('HS01', 'health@uni.edu', 'Health Services', 'staff', 'Approved'),
    ('ADM01', 'admin@uni.edu', 'Registrar', 'admin', 'Approved'),
    ('NEW01', 'newbie@uni.edu', 'Library', 'staff', 'Pending'),
]


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        student = Student(
            student_id=STUDENT_ID, first_name='Ada', last_name='Obi',
            email='ada@uni.edu', department=STUDENT_DEPARTMENT
        )
        student.set_password(PASSWORD)
        other = Student(
            student_id='MTH/2021/002', first_name='Bola', last_name='Ade',
            email='bola@uni.edu', department='Mathematics'
        )
        other.set_password(PASSWORD)
        db.session.add_all([student, other])
        for staff_id, email, department, role, status in STAFF:
            staff = Staff(
                staff_id=staff_id, first_name=staff_id, last_name='Staff', email=email,
                department=department, role=role, status=status
            )
            staff.set_password(PASSWORD)
            db.session.add(staff)
        db.session.commit()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def login(app):
    """Return a test client logged in as the given email"""
    def _login(email):
        client = app.test_client()
        response = client.post('/api/auth/login', json={'email': email, 'password': PASSWORD})
        assert response.status_code == 200, response.get_json()
        return client
    return _login
