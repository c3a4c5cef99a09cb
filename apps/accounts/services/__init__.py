"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserNotFoundError,
)
from .member_lookup import get_member_by_id, get_display_names

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserNotFoundError',
    # Services
    'get_member_by_id',
    'get_display_names',
]
