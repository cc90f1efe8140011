class ShortLinkError(Exception):
    """Base for errors that map onto an HTTP status at the request boundary."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ShortLinkError):
    """Bad URL or bad code format."""

    status_code = 400


class ConflictError(ShortLinkError):
    """Code already assigned to another link."""

    status_code = 409


class NotFoundError(ShortLinkError):
    """No link with the requested code."""

    status_code = 404


class StoreError(ShortLinkError):
    """Persistence failure. The message is never shown to clients."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
