"""
Helper utilities
"""

import logging
from typing import Optional, Dict, Any, Tuple
from flask import current_app
from app.utils.exceptions import ClearanceError


def setup_logging() -> None:
    """Setup application logging"""
    if not current_app.debug:
        # Production logging
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s %(levelname)s %(name)s %(message)s'
        )
    else:
        # Development logging
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s %(levelname)s %(name)s %(message)s'
        )


def log_error(message: str, exception: Optional[Exception] = None) -> None:
    """
    Log error message

    Args:
        message: Error message
        exception: Exception object
    """
    if exception:
        current_app.logger.error(f"{message}: {str(exception)}")
    else:
        current_app.logger.error(message)


def log_info(message: str) -> None:
    """
    Log info message

    Args:
        message: Info message
    """
    current_app.logger.info(message)


def get_department_dashboard(department: str, role: str = 'staff') -> str:
    """
    Get dashboard URL based on department

    Args:
        department: Department name
        role: Account role (staff or admin)

    Returns:
        Dashboard URL
    """
    if role == 'admin':
        return '/Admin_Dashboard.html'
    if department and 'HOD' in department:
        return '/HOD_Dashboard.html'
    dashboard_map = {
        'Registrar': '/Registrar_Dashboard.html',
        'Student Support': '/StudentSupport_Dashboard.html',
        'Finance': '/Finance_Dashboard.html',
        'Health Services': '/HealthServices_Dashboard.html',
        'Library': '/Library_Dashboard.html',
        'Legal': '/Legal_Dashboard.html',
    }
    return dashboard_map.get(department, '/SchoolOfficer_Dashboard.html')


def create_response(success: bool, message: str, data: Optional[Any] = None) -> Dict[str, Any]:
    """
    Create standardized API response

    Args:
        success: Whether operation was successful
        message: Response message
        data: Optional data to include

    Returns:
        Standardized response dictionary
    """
    response = {
        'ok': success,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return response


def create_error_response(error: ClearanceError) -> Tuple[Dict[str, Any], int]:
    """
    Create API response for a clearance policy violation

    Args:
        error: The raised clearance error

    Returns:
        Tuple of (response dictionary, HTTP status code)
    """
    response = create_response(False, str(error) or error.kind)
    response.update(error.to_dict())
    return response, error.status_code
