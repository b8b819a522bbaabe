"""
Authorization policy shared by every service.

A single decision function answers whether a principal may act on a
resource; enforce() turns a denial into the matching API error.
"""

from typing import Optional
from rentals.models.user import User, UserRole
from rentals.utils.exceptions import AuthenticationError, InsufficientPermissionsError
import uuid
import logging

logger = logging.getLogger(__name__)


def authorize(
    principal: Optional[User],
    owner_id: Optional[uuid.UUID] = None,
    required_role: Optional[UserRole] = None
) -> bool:
    """
    Decide whether the principal may act.

    Args:
        principal: Authenticated user, or None for anonymous callers
        owner_id: Owner of the target resource; when given, the owner or an admin is allowed
        required_role: Role the action demands; admins satisfy every role

    Returns:
        True if allowed, False otherwise
    """
    if principal is None or not principal.is_active:
        return False

    if principal.role == UserRole.ADMIN:
        return True

    if required_role is not None and principal.role != required_role:
        return False

    if owner_id is not None and principal.id != owner_id:
        return False

    return True


def enforce(
    principal: Optional[User],
    owner_id: Optional[uuid.UUID] = None,
    required_role: Optional[UserRole] = None,
    action: str = "perform this action"
) -> User:
    """
    Raise unless authorize() allows the principal.

    Raises:
        AuthenticationError: If there is no principal
        InsufficientPermissionsError: If the principal is not allowed
    """
    if principal is None:
        raise AuthenticationError()

    if not authorize(principal, owner_id=owner_id, required_role=required_role):
        logger.info(f"Denied user {principal.id} permission to {action}")
        raise InsufficientPermissionsError(action)

    return principal
