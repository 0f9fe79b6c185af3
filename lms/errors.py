# errors.py
"""
Domain errors raised by services and repositories.

Each error carries the HTTP status it is rendered with by
``middleware.error_handler.ErrorHandlerMiddleware``.
"""


class LMSError(Exception):
    status_code = 500
    title = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LMSError):
    status_code = 400
    title = "Validation Error"


class ForbiddenError(LMSError):
    status_code = 403
    title = "Forbidden"


class NotFoundError(LMSError):
    status_code = 404
    title = "Not Found"


class ConflictError(LMSError):
    status_code = 409
    title = "Conflict"


class UpstreamError(LMSError):
    """A media host or payment provider call failed. The message is the provider's."""
    status_code = 502
    title = "Upstream Error"

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider
