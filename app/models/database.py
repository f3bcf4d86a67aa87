"""
Database initialization
"""

from flask_sqlalchemy import SQLAlchemy

# Shared by every model and by the application factory
db = SQLAlchemy()


def init_db() -> None:
    """Create all tables for the registered models"""
    db.create_all()
