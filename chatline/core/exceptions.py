"""
core/exceptions.py
------------------
Domain errors raised by the service layer.

Services never build HTTP responses; main.py maps each error class to a
status code through a single exception handler.
"""


class ChatServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(ChatServiceError):
    """A referenced user, chat, or message does not exist."""

    status_code = 404


class ValidationError(ChatServiceError):
    """Malformed email or URL, bad participant count, or an empty update."""

    status_code = 422
