"""Domain-level exceptions.

All failures are expressed as subclasses of DomainException so the
controller, the edit session and the CLI can catch them uniformly and
turn them into user-facing messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule, field constraint or precondition was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class DuplicateOrderCodeError(DomainException):
    """An order code is already taken within the same sales channel."""


class BackendError(DomainException):
    """The backend could not be reached or reported a failure."""


class EditSessionError(DomainException):
    """An edit session was used out of order (e.g. opened twice)."""
