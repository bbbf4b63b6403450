"""
API Blueprint - JSON endpoints
Handles: Contact submissions, analytics events, content feed, API tokens
"""

from flask import Blueprint

api_bp = Blueprint('api', __name__, url_prefix='/api')

from . import routes
