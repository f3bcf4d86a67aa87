"""
Custom exceptions for the iClear application
"""

class iClearException(Exception):
    """Base exception for iClear application"""
    pass

class ValidationError(iClearException):
    """Validation error"""
    pass

class AuthenticationError(iClearException):
    """Authentication error"""
    pass

class AuthorizationError(iClearException):
    """Authorization error"""
    pass


class EmailError(iClearException):
    """Email service error"""
    pass


class ClearanceError(iClearException):
    """
    Base class for clearance workflow policy violations.

    None of these are retryable. ``refetch`` tells the client its copy of
    the case is out of date and should be reloaded before trying again.
    """
    kind = 'ClearanceError'
    status_code = 409
    refetch = True

    def to_dict(self):
        return {'error': self.kind, 'refetch': self.refetch}

class NotFound(ClearanceError):
    """Case, form or document does not exist"""
    kind = 'NotFound'
    status_code = 404

class NotUnlocked(ClearanceError):
    """Item is locked by an unmet prerequisite"""
    kind = 'NotUnlocked'

class AlreadySubmitted(ClearanceError):
    """Item has already been submitted or approved"""
    kind = 'AlreadySubmitted'

class NotSubmitted(ClearanceError):
    """Item is not awaiting a decision"""
    kind = 'NotSubmitted'

class Unauthorized(ClearanceError, AuthorizationError):
    """Actor may not decide on this item"""
    kind = 'Unauthorized'
    status_code = 403
    refetch = False

class DuplicateVote(ClearanceError):
    """Role has already voted on this item"""
    kind = 'DuplicateVote'

class CommentRequired(ClearanceError):
    """Rejections must carry comments"""
    kind = 'CommentRequired'
    status_code = 400
    refetch = False

class ConcurrencyConflict(ClearanceError):
    """Case was modified by another writer"""
    kind = 'ConcurrencyConflict'
