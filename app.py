"""
Radsting Dev Portfolio - Application Factory

This module initializes the Flask application with all necessary extensions,
configurations, and middleware. All actual route handling is delegated to blueprints.
"""

import os
import logging
from datetime import datetime
from flask import Flask, render_template, request, jsonify
from config import get_config
from extensions import db, login_manager, change_feed
from models import Submission

from blueprints.api import api_bp
from blueprints.auth import auth_bp
from blueprints.dashboard import dashboard_bp
from blueprints.pages import pages_bp


def create_app(config_name=None, **overrides):
    """
    Application Factory Pattern
    Creates and configures Flask application instance

    Args:
        config_name (str): Configuration environment name (optional)
        overrides: Config values applied after the configuration class

    Returns:
        Flask: Configured Flask application instance
    """

    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    app.config.update(overrides)

    # Uploads live under the app root unless configured absolutely
    if not os.path.isabs(app.config['UPLOAD_FOLDER']):
        app.config['UPLOAD_FOLDER'] = os.path.join(app.root_path, app.config['UPLOAD_FOLDER'])

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    initialize_extensions(app)

    from utils.helpers import format_datetime
    app.jinja_env.filters['datetime'] = format_datetime

    register_blueprints(app)
    register_error_handlers(app)
    register_hooks(app)

    from commands import register_commands
    register_commands(app)

    # Health check route
    @app.route('/health')
    def health_check():
        return {'status': 'ok', 'message': f"{app.config['SITE_NAME']} is running"}, 200

    return app


def initialize_extensions(app):
    """Initialize Flask extensions with the app instance"""
    db.init_app(app)
    login_manager.init_app(app)
    change_feed.track(Submission)

    # Create tables if they don't exist
    with app.app_context():
        try:
            from sqlalchemy import text
            db.create_all()
            db.session.execute(text('SELECT 1'))
            app.logger.info("✓ Database initialized successfully")
        except Exception as e:
            app.logger.error(f"✗ Database initialization failed: {str(e)}")


def register_blueprints(app):
    """Register all application blueprints"""
    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(api_bp)


def _wants_json():
    return request.path.startswith('/api/')


def register_error_handlers(app):
    """Register custom error handlers; API paths answer in JSON"""

    def _error_response(code, message):
        if _wants_json():
            return jsonify({'error': message}), code
        return render_template('errors.html', code=code, message=message), code

    @app.errorhandler(400)
    def bad_request(e):
        return _error_response(400, 'Bad request')

    @app.errorhandler(403)
    def forbidden(e):
        return _error_response(403, 'Forbidden')

    @app.errorhandler(404)
    def page_not_found(e):
        return _error_response(404, 'Page not found')

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _error_response(405, 'Method not allowed')

    @app.errorhandler(413)
    def file_too_large(e):
        limit = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        return _error_response(413, f'File is too large. Maximum size is {limit}MB.')

    @app.errorhandler(500)
    def internal_server_error(e):
        app.logger.error(f"Server Error: {str(e)}")
        return _error_response(500, 'Internal server error')


def register_hooks(app):
    """Register request/response hooks and context processors"""

    @app.context_processor
    def inject_global_vars():
        return {
            'site_name': app.config['SITE_NAME'],
            'owner_email': app.config['OWNER_EMAIL'],
            'owner_instagram': app.config['OWNER_INSTAGRAM'],
            'visual_effects': app.config['ENABLE_VISUAL_EFFECTS'],
            'current_year': datetime.now().year,
        }

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response
