"""
Clearance case models
"""

from datetime import datetime
from app.models.database import db


class ClearanceCaseModel(db.Model):
    """One clearance case per student"""
    __tablename__ = 'clearance_cases'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(20), unique=True, nullable=False, index=True)
    student_department = db.Column(db.String(100), nullable=False)
    version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    forms = db.relationship('FormRecordModel', backref='case', lazy=True,
                            cascade='all, delete-orphan')
    documents = db.relationship('DocumentRecordModel', backref='case', lazy=True,
                                cascade='all, delete-orphan')

    # Every write runs UPDATE ... WHERE version = ?; a concurrent writer
    # makes the flush fail with StaleDataError.
    __mapper_args__ = {'version_id_col': version}


class FormRecordModel(db.Model):
    """Stored state of one form inside a case"""
    __tablename__ = 'clearance_forms'
    __table_args__ = (db.UniqueConstraint('case_id', 'form_type', name='uq_case_form'),)

    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.Integer, db.ForeignKey('clearance_cases.id'), nullable=False)
    form_type = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='locked')
    payload = db.Column(db.JSON, nullable=True)
    submitted_at = db.Column(db.DateTime, nullable=True)
    decided_at = db.Column(db.DateTime, nullable=True)
    history = db.Column(db.JSON, nullable=True)

    approvals = db.relationship('ApprovalVoteModel', backref='form_record', lazy=True,
                                order_by='ApprovalVoteModel.position',
                                cascade='all, delete-orphan')


class DocumentRecordModel(db.Model):
    """Stored state of one supporting document inside a case"""
    __tablename__ = 'clearance_documents'
    __table_args__ = (db.UniqueConstraint('case_id', 'document_type', name='uq_case_document'),)

    id = db.Column(db.Integer, primary_key=True)
    case_id = db.Column(db.Integer, db.ForeignKey('clearance_cases.id'), nullable=False)
    document_type = db.Column(db.String(50), nullable=False)
    owner_id = db.Column(db.String(20), nullable=False)
    owner_department = db.Column(db.String(100), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='not_uploaded')
    title = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    file_name = db.Column(db.String(255), nullable=True)
    uploaded_at = db.Column(db.DateTime, nullable=True)
    decided_at = db.Column(db.DateTime, nullable=True)
    history = db.Column(db.JSON, nullable=True)

    approvals = db.relationship('ApprovalVoteModel', backref='document_record', lazy=True,
                                order_by='ApprovalVoteModel.position',
                                cascade='all, delete-orphan')


class ApprovalVoteModel(db.Model):
    """One required approver's slot on a form or document"""
    __tablename__ = 'approval_votes'

    id = db.Column(db.Integer, primary_key=True)
    form_record_id = db.Column(db.Integer, db.ForeignKey('clearance_forms.id'), nullable=True)
    document_record_id = db.Column(db.Integer, db.ForeignKey('clearance_documents.id'), nullable=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    required_role = db.Column(db.String(50), nullable=False)
    decision = db.Column(db.String(20), nullable=False, default='pending')
    actor_id = db.Column(db.String(20), nullable=True)
    comments = db.Column(db.Text, nullable=True)
    decided_at = db.Column(db.DateTime, nullable=True)


class Notification(db.Model):
    """Notification model"""
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.String(20), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    status = db.Column(db.Enum('success', 'warning', 'error', 'info', name='notification_status'),
                       default='info')
    type = db.Column(db.String(50), nullable=False)
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'id': self.id,
            'recipient_id': self.recipient_id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'type': self.type,
            'is_read': self.is_read,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
