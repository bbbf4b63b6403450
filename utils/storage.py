"""
Storage Module - Object storage buckets backed by the upload folder

A bucket is a directory under UPLOAD_FOLDER. Buckets are created by
`flask init-db`; uploads into a missing bucket fail instead of creating it.
"""

import os
from flask import current_app
from werkzeug.utils import secure_filename


class StorageError(Exception):
    """Raised when the storage backend refuses an operation"""


class StorageBucket:
    def __init__(self, root, name, public_base):
        self.root = root
        self.name = name
        self.public_base = public_base.rstrip('/')

    @property
    def path(self):
        return os.path.join(self.root, self.name)

    def exists(self):
        return os.path.isdir(self.path)

    def create(self):
        os.makedirs(self.path, exist_ok=True)

    def _resolve(self, object_path):
        parts = [secure_filename(p) for p in object_path.split('/') if p]
        if not parts or not all(parts):
            raise StorageError(f"Invalid object path: {object_path}")
        return os.path.join(self.path, *parts), '/'.join(parts)

    def upload(self, object_path, file):
        """Store a file object (werkzeug FileStorage or bytes stream) at object_path"""
        if not self.exists():
            raise StorageError('Bucket not found')

        destination, clean_path = self._resolve(object_path)
        if os.path.exists(destination):
            raise StorageError('The resource already exists')

        os.makedirs(os.path.dirname(destination), exist_ok=True)
        try:
            if hasattr(file, 'save'):
                file.save(destination)
            else:
                with open(destination, 'wb') as out:
                    out.write(file.read())
        except OSError as e:
            raise StorageError(str(e)) from e

        current_app.logger.info(f"Stored {clean_path} in bucket {self.name}")
        return clean_path

    def get_public_url(self, object_path):
        return f"{self.public_base}/{self.name}/{object_path.lstrip('/')}"


def get_bucket(name=None):
    """Bucket configured for the current app"""
    return StorageBucket(
        current_app.config['UPLOAD_FOLDER'],
        name or current_app.config['STORAGE_BUCKET'],
        current_app.config['STORAGE_PUBLIC_URL'],
    )


__all__ = ['StorageBucket', 'StorageError', 'get_bucket']
