"""
Pages Blueprint - Public pages
Handles: Portfolio landing page with the content feed
"""

from flask import Blueprint

pages_bp = Blueprint('pages', __name__, url_prefix='')

from . import routes
