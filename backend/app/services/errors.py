class ServiceError(Exception):
    """Base class for failures a user-facing operation reports to its caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(ServiceError):
    """Malformed id, missing or malformed field, weak password."""


class NotFound(ServiceError):
    """No user with the requested id."""


class Conflict(ServiceError):
    """The email is already held by another user."""
