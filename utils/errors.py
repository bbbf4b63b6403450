"""
Errors Module - Exception taxonomy shared by services and routes
"""


class PortfolioError(Exception):
    """Base class for errors surfaced to the operator or visitor"""

    status_code = 500

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message


class ValidationError(PortfolioError):
    """A required field is missing or a value is not allowed"""

    status_code = 400

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.fields = list(fields or [])


class NotFoundError(PortfolioError):
    status_code = 404


class ConfirmationRequired(PortfolioError):
    """Destructive action issued without explicit confirmation"""

    status_code = 409


class UploadRejected(PortfolioError):
    """File refused before it reached storage (type or size)"""

    status_code = 400


class UploadFailed(PortfolioError):
    """Storage backend refused the upload"""

    status_code = 502


class BackendError(PortfolioError):
    """Database or storage operation failed; message passed through verbatim"""


__all__ = [
    'PortfolioError',
    'ValidationError',
    'NotFoundError',
    'ConfirmationRequired',
    'UploadRejected',
    'UploadFailed',
    'BackendError'
]
