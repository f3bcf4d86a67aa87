"""
Utilities package initialization
"""

from app.utils.exceptions import (
    iClearException, ValidationError, AuthenticationError,
    AuthorizationError, EmailError, ClearanceError,
    NotFound, NotUnlocked, AlreadySubmitted, NotSubmitted, Unauthorized,
    DuplicateVote, CommentRequired, ConcurrencyConflict
)
from app.utils.validators import (
    validate_email, validate_password, validate_required,
    validate_choice, parse_date,
    validate_phone_number, validate_file_extension
)
from app.utils.helpers import (
    setup_logging, log_error, log_info, get_department_dashboard,
    create_response, create_error_response
)

__all__ = [
    'iClearException', 'ValidationError', 'AuthenticationError',
    'AuthorizationError', 'EmailError', 'ClearanceError',
    'NotFound', 'NotUnlocked', 'AlreadySubmitted', 'NotSubmitted', 'Unauthorized',
    'DuplicateVote', 'CommentRequired', 'ConcurrencyConflict',
    'validate_email', 'validate_password', 'validate_required',
    'validate_choice', 'parse_date',
    'validate_phone_number', 'validate_file_extension',
    'setup_logging', 'log_error', 'log_info', 'get_department_dashboard',
    'create_response', 'create_error_response'
]
