"""
Dashboard Blueprint - Admin dashboard
Handles: Content manager, analytics, submissions inbox, setup
"""

from flask import Blueprint

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')

from . import routes
