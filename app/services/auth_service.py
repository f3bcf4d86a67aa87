"""
Authentication service
"""

from typing import Optional, Tuple, Dict, Any
from flask import session
from app.models import Student, Staff
from app.utils.validators import validate_email, validate_password
from app.utils.exceptions import ValidationError, AuthenticationError
from app.workflow.types import AccountRole, ActorContext


class AuthService:
    """Authentication service class"""

    @staticmethod
    def authenticate_user(email: str, password: str) -> Tuple[bool, str, Dict[str, Any]]:
        """
        Authenticate user (student or staff)

        Args:
            email: User email
            password: User password

        Returns:
            Tuple of (success, user_type, user_data)
        """
        if not validate_email(email):
            raise ValidationError("Invalid email format")

        if not validate_password(password):
            raise ValidationError("Password must be at least 6 characters")

        email = email.lower().strip()

        student = Student.query.filter_by(email=email).first()
        if student and student.check_password(password):
            session.clear()
            session['user_type'] = AccountRole.STUDENT.value
            session['user_id'] = student.student_id
            session.permanent = True
            return True, 'student', student.to_dict()

        staff = Staff.query.filter_by(email=email).first()
        if staff and staff.check_password(password):
            if staff.status != 'Approved':
                raise AuthenticationError("Account not approved yet. Please wait for admin approval.")

            session.clear()
            session['user_type'] = staff.role or AccountRole.STAFF.value
            session['user_id'] = staff.staff_id
            session.permanent = True
            return True, 'staff', staff.to_dict()

        raise AuthenticationError("Invalid email or password")

    @staticmethod
    def logout_user() -> bool:
        """Logout current user"""
        session.clear()
        return True

    @staticmethod
    def get_current_user() -> Optional[Dict[str, Any]]:
        """Get current logged-in user"""
        user_id = session.get('user_id')
        if not user_id:
            return None

        if session.get('user_type') == AccountRole.STUDENT.value:
            student = Student.query.filter_by(student_id=user_id).first()
            if student:
                return {'type': 'student', 'data': student.to_dict()}
            return None

        staff = Staff.query.filter_by(staff_id=user_id).first()
        if staff and staff.status == 'Approved':
            return {'type': 'staff', 'data': staff.to_dict()}
        return None

    @staticmethod
    def require_actor() -> ActorContext:
        """
        Build the acting user's context from the session

        Raises:
            AuthenticationError: Nobody is logged in
        """
        user = AuthService.get_current_user()
        if not user:
            raise AuthenticationError("Authentication required")

        data = user['data']
        if user['type'] == 'student':
            return ActorContext(
                user_id=data['student_id'],
                department=data['department'],
                role=AccountRole.STUDENT,
            )
        return ActorContext(
            user_id=data['staff_id'],
            department=data['department'],
            role=AccountRole(data['role'] or AccountRole.STAFF.value),
            managed_departments=frozenset(data['managed_departments']),
        )
