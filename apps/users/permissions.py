"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Permission helpers for role-based access control.
             Administrators act on every household; members only on
             their own.
-------------------------------------------------------------------------
"""
from typing import Any

from apps.core.exceptions import HouseholdAccessDeniedException, UnauthorizedRoleException


def require_admin(user: Any) -> None:
    """
    Ensure the user is an administrator.

    Raises:
        UnauthorizedRoleException: If the user is not an administrator.
    """
    if not user.is_admin():
        raise UnauthorizedRoleException(
            "Only administrators can perform this action.",
            details={'user_id': user.pk}
        )


def require_household_access(user: Any, mahal_id: str) -> None:
    """
    Ensure the user may act on the given household.

    Raises:
        HouseholdAccessDeniedException: If a member touches another household.
    """
    if not user.can_access_household(mahal_id):
        raise HouseholdAccessDeniedException(
            details={'user_id': user.pk, 'mahal_id': mahal_id}
        )
