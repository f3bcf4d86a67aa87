"""
Notification service

Subscribes to clearance events and turns them into student notifications,
optionally mirrored by email.
"""

from typing import Any, Dict, List, Optional

from flask import current_app

from app.models import db, Notification, Student
from app.services.email_service import EmailService
from app.utils.exceptions import EmailError, NotFound, Unauthorized
from app.utils.helpers import log_error, log_info
from app.workflow.events import ClearanceEvent, EventBus, EventKind
from app.workflow.types import ActorContext, FormType, ItemKind

FORM_NAMES = {
    FormType.NEW_CLEARANCE.value: 'New Clearance Form',
    FormType.PROV_ADMISSION.value: 'Provisional Admission Form',
    FormType.PERSONAL_RECORD.value: 'Personal Record Form',
    FormType.PERSONAL_RECORD_2.value: 'Personal Record Form II',
    FormType.AFFIDAVIT.value: 'Affidavit Form',
}

PENDING_STATES = ('submitted', 'uploaded')


def item_name(event: ClearanceEvent) -> str:
    if event.item_kind == ItemKind.FORM.value:
        return FORM_NAMES.get(event.item_type, event.item_type)
    return event.item_type


def build_notification(event: ClearanceEvent) -> Optional[Dict[str, str]]:
    """
    Describe an event for the student, or None if it is not worth telling

    Returns:
        Dict with title, description, status and type
    """
    name = item_name(event)

    if event.kind is EventKind.VOTE_RECORDED:
        # The final vote is reported by the approved/rejected event instead
        if event.new_status not in PENDING_STATES:
            return None
        return {
            'title': f"{name} progress",
            'description': f"{name} was approved by {event.role}. "
                           f"Waiting for the remaining approvers.",
            'status': 'info',
            'type': 'vote',
        }

    if event.kind is EventKind.APPROVED:
        return {
            'title': f"{name} approved",
            'description': f"Your {name} has been approved.",
            'status': 'success',
            'type': 'approval',
        }

    if event.kind is EventKind.REJECTED:
        description = f"Your {name} was rejected."
        if event.comments:
            description += f" Comments: {event.comments}"
        return {
            'title': f"{name} rejected",
            'description': description,
            'status': 'error',
            'type': 'rejection',
        }

    # Documents unlock together with the forms, one notice per form is enough
    if event.kind is EventKind.UNLOCKED and event.item_kind == ItemKind.FORM.value:
        return {
            'title': f"{name} unlocked",
            'description': f"You can now fill in and submit the {name}.",
            'status': 'info',
            'type': 'unlock',
        }

    return None


class NotificationService:
    """Notification service class"""

    @staticmethod
    def subscribe(bus: EventBus) -> None:
        bus.subscribe(NotificationService.handle_event)

    @staticmethod
    def handle_event(event: ClearanceEvent) -> None:
        """Store a notification for the case owner and optionally email it"""
        content = build_notification(event)
        if content is None:
            return

        notification = Notification(recipient_id=event.case_id, **content)
        try:
            db.session.add(notification)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        if current_app.config.get('NOTIFY_BY_EMAIL'):
            NotificationService._send_email(event.case_id, content)

    @staticmethod
    def _send_email(student_id: str, content: Dict[str, str]) -> None:
        student = Student.query.filter_by(student_id=student_id).first()
        if not student:
            return
        try:
            EmailService.send_clearance_update_email(
                student.email, student.full_name,
                content['title'], content['description'], content['status']
            )
            log_info(f"Clearance email sent to {student.email}")
        except EmailError as e:
            log_error(f"Clearance email to {student.email} failed", e)

    @staticmethod
    def list_for(actor: ActorContext, unread_only: bool = False) -> List[Dict[str, Any]]:
        query = Notification.query.filter_by(recipient_id=actor.user_id)
        if unread_only:
            query = query.filter_by(is_read=False)
        notifications = query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()
        return [n.to_dict() for n in notifications]

    @staticmethod
    def unread_count(actor: ActorContext) -> int:
        return Notification.query.filter_by(recipient_id=actor.user_id, is_read=False).count()

    @staticmethod
    def mark_read(actor: ActorContext, notification_id: int) -> Dict[str, Any]:
        """
        Mark one notification as read

        Raises:
            NotFound: No such notification
            Unauthorized: Notification belongs to someone else
        """
        notification = db.session.get(Notification, notification_id)
        if notification is None:
            raise NotFound(f"Notification {notification_id} not found")
        if notification.recipient_id != actor.user_id:
            raise Unauthorized("You can only update your own notifications")
        notification.is_read = True
        db.session.commit()
        return notification.to_dict()
