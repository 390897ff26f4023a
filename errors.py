"""Error types raised by the catalog, the codec and the request handlers.

Each error carries the HTTP status code it maps to, so the handlers can
render any of them without a lookup table.
"""


class BookTrackerError(Exception):
    """Base class for all expected failures of the service."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookTrackerError):
    status_code = 400
    default_message = "Missing required fields"


class MalformedBodyError(BookTrackerError):
    status_code = 400
    default_message = "Invalid request body"


class UnsupportedFormatError(BookTrackerError):
    status_code = 415
    default_message = "Unsupported Media Type"


class NotFoundError(BookTrackerError):
    status_code = 404
    default_message = "Book not found"


class PersistenceError(BookTrackerError):
    status_code = 500
    default_message = "Failed to save changes"


class InternalError(BookTrackerError):
    status_code = 500
    default_message = "Server error"
