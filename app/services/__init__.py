"""
Services package initialization
"""

from app.services.auth_service import AuthService
from app.services.email_service import EmailService
from app.services.clearance_service import ClearanceService
from app.services.notification_service import NotificationService

__all__ = ['AuthService', 'EmailService', 'ClearanceService', 'NotificationService']
