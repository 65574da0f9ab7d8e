class DomainError(Exception):
    """Base class for errors that controllers show to the user as-is."""


class ValidationError(DomainError):
    """Form or JSON input was rejected by a service."""


class AuthenticationError(DomainError):
    """Email and password do not match an active account."""


class AuthorizationError(DomainError):
    """The signed-in role may not perform this action."""


class NotFoundError(DomainError):
    """A referenced employee, record, request or task does not exist."""
