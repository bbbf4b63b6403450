"""
Utils Package - Centralized utility modules initialization

Modules that need the database (analytics, content, feed, inbox) are
imported directly by their callers, since extensions.py imports this
package for the change feed.
"""

from .decorators import login_required, admin_required, api_admin_required, is_confirmed
from .errors import (
    PortfolioError,
    ValidationError,
    NotFoundError,
    ConfirmationRequired,
    UploadRejected,
    UploadFailed,
    BackendError
)
from .helpers import slugify, allowed_image_type, file_size, unique_object_name, format_datetime
from .notifications import (
    send_email,
    send_telegram_notification,
    notify_new_submission,
    send_password_reset_email
)
from .realtime import ChangeEvent, ChangeFeed, Subscription
from .security import (
    get_client_ip,
    check_rate_limit,
    log_ip_activity,
    generate_api_token,
    verify_api_token,
    generate_reset_token,
    verify_reset_token
)
from .storage import StorageBucket, StorageError, get_bucket

__all__ = [
    # Decorators
    'login_required',
    'admin_required',
    'api_admin_required',
    'is_confirmed',

    # Errors
    'PortfolioError',
    'ValidationError',
    'NotFoundError',
    'ConfirmationRequired',
    'UploadRejected',
    'UploadFailed',
    'BackendError',

    # Helpers
    'slugify',
    'allowed_image_type',
    'file_size',
    'unique_object_name',
    'format_datetime',

    # Notifications
    'send_email',
    'send_telegram_notification',
    'notify_new_submission',
    'send_password_reset_email',

    # Realtime
    'ChangeEvent',
    'ChangeFeed',
    'Subscription',

    # Security
    'get_client_ip',
    'check_rate_limit',
    'log_ip_activity',
    'generate_api_token',
    'verify_api_token',
    'generate_reset_token',
    'verify_reset_token',

    # Storage
    'StorageBucket',
    'StorageError',
    'get_bucket'
]
