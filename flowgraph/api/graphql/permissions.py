"""
Authorization checks for GraphQL resolvers.

Raised errors carry ``code`` and ``statusCode`` in their GraphQL error
extensions.
"""

import logging

from strawberry.types import Info

from ...auth.models import Action, AuthenticatedUser
from ...utils.exceptions import AuthenticationRequiredError, InsufficientPermissionsError

logger = logging.getLogger(__name__)


def require_authenticated(info: Info) -> AuthenticatedUser:
    """
    Return the authenticated user of the operation.

    Raises:
        AuthenticationRequiredError: If no valid token was presented
    """
    auth = info.context.auth
    if not auth.authenticated or auth.user is None:
        logger.warning(
            f"GraphQL authentication failed for field {info.field_name} "
            f"(request {info.context.request_id}): {auth.error}"
        )
        raise AuthenticationRequiredError(auth.error or "Authentication required")
    return auth.user


def require_read(info: Info, resource: str) -> AuthenticatedUser:
    """
    Return the authenticated user if it may read the collection.

    Raises:
        AuthenticationRequiredError: If no valid token was presented
        InsufficientPermissionsError: If the user's role lacks read access
    """
    user = require_authenticated(info)
    if not info.context.auth_service.has_permission(user, resource, Action.READ):
        logger.warning(
            f"GraphQL permission check failed for field {info.field_name}: "
            f"user {user.user_id} (role: {user.role}) lacks read on {resource}"
        )
        raise InsufficientPermissionsError(
            f"Insufficient permissions for read on {resource}",
            details={"resource": resource, "action": Action.READ.value},
        )
    return user
