"""Error taxonomy for the coordination layer.

Every error carries the HTTP status the routes translate it into. None of
them is fatal to the process; each is scoped to a single request.
"""


class CoordinatorError(Exception):
    """Base class for request-scoped coordinator failures."""

    status_code = 500

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.__class__.__name__)
        self.detail = detail or self.__class__.__name__


class AuthError(CoordinatorError):
    """Missing or invalid session cookie, password, or API key."""

    status_code = 401


class RateLimitError(CoordinatorError):
    """Caller exceeded the admissions allowed in the current window."""

    status_code = 429


class ValidationError(CoordinatorError):
    """Malformed request body."""

    status_code = 400


class UpstreamError(CoordinatorError):
    """Classifier, notifier, or image transform failure."""

    status_code = 500


class NotFoundError(CoordinatorError):
    """Requested data is not available yet."""

    status_code = 404
