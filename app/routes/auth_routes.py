"""
Authentication routes
"""

from flask import Blueprint, request, jsonify
from app.services import AuthService
from app.utils import (
    ValidationError, AuthenticationError, log_error, create_response, get_department_dashboard
)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Handle user login"""
    try:
        form = request.get_json(silent=True) or request.form
        email = (form.get('email') or '').strip().lower()
        password = form.get('password') or ''

        if not email or not password:
            return jsonify(create_response(False, "Please enter both email and password.")), 400

        _, user_type, user_data = AuthService.authenticate_user(email, password)

        if user_type == 'student':
            redirect_url = "/student_dashboard.html"
        else:
            redirect_url = get_department_dashboard(user_data.get('department', ''), user_data.get('role', 'staff'))

        return jsonify(create_response(True, "Login successful", {"redirect": redirect_url, "user": user_data}))

    except ValidationError as e:
        return jsonify(create_response(False, str(e))), 400
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Login error", e)
        return jsonify(create_response(False, "Login failed. Please try again.")), 500


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Handle user logout"""
    try:
        AuthService.logout_user()
        return jsonify(create_response(True, "Logged out successfully"))
    except Exception as e:
        log_error("Logout error", e)
        return jsonify(create_response(False, "Logout failed")), 500


@auth_bp.route('/current-user', methods=['GET'])
def get_current_user():
    """Get current logged-in user"""
    try:
        user = AuthService.get_current_user()
        if user:
            return jsonify(create_response(True, "User found", user))
        return jsonify(create_response(False, "No user logged in")), 401
    except Exception as e:
        log_error("Get current user error", e)
        return jsonify(create_response(False, "Failed to get user info")), 500
