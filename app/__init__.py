"""
iClear Application Factory
Student clearance workflow on Flask
"""

import os
from flask import Flask
from flask_cors import CORS
from app.models import db, init_db
from app.routes import auth_bp, clearance_bp, notification_bp
from app.services import NotificationService
from app.utils import setup_logging, log_info
from app.workflow.events import EventBus


def create_app(config_name: str = None) -> Flask:
    """
    Application factory

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    from config import config
    config_class = config[config_name]
    app.config.from_object(config_class)
    config_class.init_app(app)

    # Initialize extensions
    db.init_app(app)
    CORS(app, supports_credentials=True)

    # Clearance events fan out to notifications after each commit
    bus = EventBus()
    NotificationService.subscribe(bus)
    app.extensions['clearance_events'] = bus

    # Setup logging
    with app.app_context():
        setup_logging()
        log_info("Application initialized")

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(clearance_bp, url_prefix='/api')
    app.register_blueprint(notification_bp, url_prefix='/api')

    # Create database tables
    with app.app_context():
        init_db()
        log_info("Database tables created successfully")

    return app
