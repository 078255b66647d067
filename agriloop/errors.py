"""Error taxonomy shared by the service layer and the HTTP boundary.

Service functions raise these; the API turns them into ``{"error": message}``
bodies with the matching status code.
"""
from typing import Optional


class AgriLoopError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AgriLoopError):
    status_code = 400


class DuplicateError(AgriLoopError):
    status_code = 409


class AuthError(AgriLoopError):
    """Missing or bad credentials (401) or a rejected token/role (403)."""
    status_code = 401


class NotFoundError(AgriLoopError):
    status_code = 404


class RateLimitError(AgriLoopError):
    status_code = 429


class TransientStoreError(AgriLoopError):
    status_code = 500


class MailDeliveryError(AgriLoopError):
    status_code = 500
