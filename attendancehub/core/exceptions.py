class DomainError(Exception):
    """Base exception for business rule violations."""


class NotFoundError(DomainError):
    """Raised when a referenced row does not exist."""


class ConflictError(DomainError):
    """Raised when a write collides with existing data (e.g. duplicate document id)."""


class WorkflowError(DomainError):
    """Raised when an approval transition is not allowed from the current state."""
