"""
Helpers Module - Utility functions for common operations
"""

import os
import re
import time
import secrets
from datetime import datetime

MIME_EXTENSIONS = {
    'image/jpeg': 'jpg',
    'image/png': 'png',
    'image/gif': 'gif',
    'image/webp': 'webp',
}


def slugify(title):
    """Lowercase the title and replace every whitespace run with one hyphen"""
    return re.sub(r'\s+', '-', (title or '').lower())


def allowed_image_type(mimetype, allowed_types=None):
    """Check a MIME type against the image allow-list"""
    allowed_types = allowed_types or set(MIME_EXTENSIONS)
    return (mimetype or '').lower() in allowed_types


def file_size(file):
    """Size in bytes of an uploaded file, leaving the stream rewound"""
    stream = getattr(file, 'stream', file)
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def unique_object_name(filename, mimetype=None):
    """Timestamped random object name keeping the original extension"""
    ext = ''
    if filename and '.' in filename:
        ext = filename.rsplit('.', 1)[1].lower()
    if not ext:
        ext = MIME_EXTENSIONS.get((mimetype or '').lower(), 'bin')
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}.{ext}"


def format_datetime(value, fmt='%Y-%m-%d %H:%M'):
    """Jinja filter for timestamps"""
    if not value:
        return ''
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    return value.strftime(fmt)


__all__ = [
    'slugify',
    'allowed_image_type',
    'file_size',
    'unique_object_name',
    'format_datetime'
]
