"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when member does not exist."""
    pass
