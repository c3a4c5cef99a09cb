"""Member lookup service used by other apps to render member names."""

from typing import Iterable
from uuid import UUID

from django.contrib.auth import get_user_model

from .exceptions import UserNotFoundError

User = get_user_model()


def get_member_by_id(*, member_id: UUID) -> User:
    """
    Fetch an active member by id.

    Raises:
        UserNotFoundError: If member doesn't exist or is deactivated
    """
    try:
        return User.objects.get(id=member_id, is_active=True)
    except User.DoesNotExist:
        raise UserNotFoundError(f"Member with ID {member_id} not found")


def get_display_names(*, member_ids: Iterable[UUID]) -> dict:
    """
    Resolve many member ids to display names with a single query.

    Unknown ids are simply absent from the returned mapping.
    """
    ids = {member_id for member_id in member_ids if member_id is not None}
    if not ids:
        return {}

    return {
        member.id: member.get_display_name()
        for member in User.objects.filter(id__in=ids)
    }
