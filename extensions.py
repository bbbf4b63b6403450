"""
Extensions Module - Centralized initialization of Flask extensions
Decouples extensions from app.py to avoid circular imports
and enable better testing.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

from utils.realtime import ChangeFeed

# Initialize extensions without binding to app
db = SQLAlchemy()
login_manager = LoginManager()
login_manager.login_view = 'auth.login'
login_manager.login_message = 'Please log in to access this page.'
login_manager.login_message_category = 'info'

# In-process change feed for realtime table subscriptions
change_feed = ChangeFeed()

__all__ = ['db', 'login_manager', 'change_feed']
