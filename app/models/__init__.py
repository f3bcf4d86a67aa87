"""
Database models initialization
"""

from app.models.database import db, init_db
from app.models.user import Student, Staff
from app.models.clearance import (
    ClearanceCaseModel, FormRecordModel, DocumentRecordModel,
    ApprovalVoteModel, Notification
)

# Export all models
__all__ = [
    'db', 'init_db', 'Student', 'Staff', 'ClearanceCaseModel', 'FormRecordModel',
    'DocumentRecordModel', 'ApprovalVoteModel', 'Notification'
]
