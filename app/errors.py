"""Error taxonomy for the schedule of values API.

Every error carries the HTTP status it maps to; the exception handlers in
``app.main`` turn them into ``{"success": false, "error": ...}`` responses.
"""


class SOVError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(SOVError):
    """Required input missing or malformed."""

    status_code = 400


class NotFoundError(SOVError):
    status_code = 404


class StorageError(SOVError):
    """Underlying database failure; the message is passed through unchanged."""

    status_code = 500
