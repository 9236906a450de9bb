"""Error types raised across the client core."""


class Ask4RentError(Exception):
    """Base class for client errors."""


class SessionCreationError(Ask4RentError):
    """The session service could not issue a new session token."""


class SessionRejectedError(Ask4RentError):
    """A backend call was refused because the session token is no longer accepted."""


class MalformedPayloadError(Ask4RentError):
    """A backend payload could not be mapped onto the client's types."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"{source}: {detail}")
        self.source = source
        self.detail = detail


class InvalidTransitionError(Ask4RentError):
    """An action was requested in a search mode that does not support it."""
