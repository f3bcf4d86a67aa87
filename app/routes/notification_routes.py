"""
Notification routes
"""

from flask import Blueprint, request, jsonify
from app.models import db
from app.services import AuthService, NotificationService
from app.utils import ClearanceError, AuthenticationError, log_error, create_response, create_error_response

notification_bp = Blueprint('notifications', __name__)


@notification_bp.route('/notifications', methods=['GET'])
def get_notifications():
    """Get the logged-in user's notifications, newest first"""
    try:
        actor = AuthService.require_actor()
        unread_only = request.args.get('unread', 'false').lower() in ['true', '1', 'on']
        notifications = NotificationService.list_for(actor, unread_only)
        return jsonify(create_response(True, "Notifications retrieved", notifications))

    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Get notifications error", e)
        return jsonify(create_response(False, "Failed to get notifications")), 500


@notification_bp.route('/notifications/unread-count', methods=['GET'])
def get_unread_count():
    try:
        actor = AuthService.require_actor()
        count = NotificationService.unread_count(actor)
        return jsonify(create_response(True, "Unread count retrieved", {'count': count}))

    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Get unread count error", e)
        return jsonify(create_response(False, "Failed to get unread count")), 500


@notification_bp.route('/notifications/<int:notification_id>/read', methods=['POST'])
def mark_notification_read(notification_id):
    """Mark a notification as read (recipient only)"""
    try:
        actor = AuthService.require_actor()
        notification = NotificationService.mark_read(actor, notification_id)
        return jsonify(create_response(True, "Notification marked as read", notification))

    except ClearanceError as e:
        response, status = create_error_response(e)
        return jsonify(response), status
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Mark notification read error", e)
        db.session.rollback()
        return jsonify(create_response(False, "Failed to update notification")), 500
