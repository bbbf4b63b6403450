"""
Decorators Module - Authentication and authorization decorators
"""

from functools import wraps
from flask import redirect, url_for, flash, jsonify, request, current_app
from flask_login import current_user


def login_required(f):
    """Decorator to require a signed-in account"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            flash('Please login to access this page.', 'error')
            return redirect(url_for('auth.login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require an account flagged admin; others go back to login"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            flash('Please login to access this page.', 'error')
            return redirect(url_for('auth.login', next=request.path))
        if not current_user.is_admin:
            current_app.logger.warning(f"Non-admin {current_user.email} refused at {request.path}")
            flash('Admin access required.', 'error')
            return redirect(url_for('auth.login'))
        return f(*args, **kwargs)
    return decorated_function


def api_admin_required(f):
    """Decorator for JSON endpoints: admin bearer token or admin session, else 401"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from .security import bearer_token, verify_api_token

        token = bearer_token()
        if token and verify_api_token(token) is not None:
            return f(*args, **kwargs)
        if not token and current_user.is_authenticated and current_user.is_admin:
            return f(*args, **kwargs)
        return jsonify({'error': 'Unauthorized'}), 401
    return decorated_function


def is_confirmed():
    """True when the submitted form carries an explicit confirmation"""
    return request.form.get('confirm', '').lower() in ('yes', 'true', '1', 'on')


__all__ = ['login_required', 'admin_required', 'api_admin_required', 'is_confirmed']
