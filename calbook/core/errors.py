from fastapi import status


class BookingError(Exception):
    """Base for errors that map onto an HTTP response.

    ``message`` is safe to show to the caller; anything more detailed belongs
    in the server log.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All fields are required."


class ConflictError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "This time slot is no longer available."


class UpstreamError(BookingError):
    """Calendar or email provider failed."""

    default_message = "Upstream service failed."


class NotificationError(UpstreamError):
    default_message = "Failed to send booking notifications."
