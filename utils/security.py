"""
Security Module - IP tracking, rate limiting and signed tokens
"""

import os
import json
import time
from datetime import datetime
from flask import request, current_app
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired


# Rate Limiting
RATE_LIMIT_REQUESTS = {}  # {ip: [(timestamp, endpoint), ...]}
RATE_LIMIT_MAX_REQUESTS = 10  # Max 10 requests
RATE_LIMIT_WINDOW = 60  # Per 60 seconds

API_TOKEN_SALT = 'api-token'
PASSWORD_RESET_SALT = 'password-reset'


def get_client_ip():
    """Get real client IP address"""
    return request.environ.get('HTTP_X_FORWARDED_FOR',
                              request.environ.get('REMOTE_ADDR', 'unknown'))


def check_rate_limit(endpoint='contact'):
    """Check if IP is within rate limit"""
    if not current_app.config.get('RATE_LIMIT_ENABLED', True):
        return True

    client_ip = get_client_ip()
    current_time = time.time()

    if client_ip not in RATE_LIMIT_REQUESTS:
        RATE_LIMIT_REQUESTS[client_ip] = []

    # Clean old requests outside the window
    RATE_LIMIT_REQUESTS[client_ip] = [
        (ts, ep) for ts, ep in RATE_LIMIT_REQUESTS[client_ip]
        if current_time - ts < RATE_LIMIT_WINDOW
    ]

    endpoint_requests = [
        ep for ts, ep in RATE_LIMIT_REQUESTS[client_ip] if ep == endpoint
    ]
    if len(endpoint_requests) >= RATE_LIMIT_MAX_REQUESTS:
        return False

    RATE_LIMIT_REQUESTS[client_ip].append((current_time, endpoint))
    return True


def log_ip_activity(activity_type, details=''):
    """Append login activity to the security log (last 1000 entries)"""
    log_file = current_app.config.get('SECURITY_LOG_FILE')
    if not log_file:
        return
    try:
        log_path = os.path.join(current_app.instance_path, log_file)
        log_data = {
            'ip': get_client_ip(),
            'timestamp': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            'activity': activity_type,
            'details': details,
            'user_agent': request.headers.get('User-Agent', 'Unknown')[:100]
        }

        try:
            with open(log_path, 'r', encoding='utf-8') as f:
                logs = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            logs = []

        logs.append(log_data)
        logs = logs[-1000:]

        os.makedirs(os.path.dirname(log_path), exist_ok=True)
        with open(log_path, 'w', encoding='utf-8') as f:
            json.dump(logs, f, ensure_ascii=False, indent=2)
    except OSError as e:
        current_app.logger.error(f"Error logging IP activity: {str(e)}")


def _serializer(salt):
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=salt)


def generate_api_token(profile):
    """Signed bearer token identifying an admin profile"""
    return _serializer(API_TOKEN_SALT).dumps({'sub': profile.id})


def verify_api_token(token):
    """Return the admin Profile a bearer token belongs to, or None"""
    from models import Profile
    from extensions import db

    try:
        payload = _serializer(API_TOKEN_SALT).loads(
            token, max_age=current_app.config.get('API_TOKEN_MAX_AGE', 86400))
    except SignatureExpired:
        current_app.logger.warning("Expired API token")
        return None
    except BadSignature:
        current_app.logger.warning("Invalid API token")
        return None

    profile = db.session.get(Profile, payload.get('sub'))
    if profile is None or not profile.is_admin:
        return None
    return profile


def bearer_token():
    """Token from an 'Authorization: Bearer <token>' header, or None"""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def generate_reset_token(profile):
    # Bound to the current hash so a token dies once the password changes
    return _serializer(PASSWORD_RESET_SALT).dumps(
        {'sub': profile.id, 'h': profile.password_hash[-12:]})


def verify_reset_token(token):
    """Return the Profile a password reset token belongs to, or None"""
    from models import Profile
    from extensions import db

    try:
        payload = _serializer(PASSWORD_RESET_SALT).loads(
            token, max_age=current_app.config.get('PASSWORD_RESET_MAX_AGE', 3600))
    except (SignatureExpired, BadSignature):
        return None

    profile = db.session.get(Profile, payload.get('sub'))
    if profile is None or profile.password_hash[-12:] != payload.get('h'):
        return None
    return profile


__all__ = [
    'get_client_ip',
    'check_rate_limit',
    'log_ip_activity',
    'generate_api_token',
    'verify_api_token',
    'bearer_token',
    'generate_reset_token',
    'verify_reset_token'
]
