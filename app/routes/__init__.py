"""
Routes package initialization
"""

from app.routes.auth_routes import auth_bp
from app.routes.clearance_routes import clearance_bp
from app.routes.notification_routes import notification_bp

__all__ = ['auth_bp', 'clearance_bp', 'notification_bp']
