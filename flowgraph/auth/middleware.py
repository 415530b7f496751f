"""
FastAPI dependencies for bearer token authentication.

Builds the per-request authentication context and guards endpoints
by authentication, minimum role or collection permission.
"""

import logging
from typing import Annotated, Optional, Union

from fastapi import Depends, Header, Request

from ..utils.exceptions import AuthenticationRequiredError, InsufficientPermissionsError
from .models import Action, AuthContext, AuthenticatedUser, Role
from .service import AuthService

logger = logging.getLogger(__name__)


def get_auth_service(request: Request) -> AuthService:
    """Return the auth service attached to the application."""
    return request.app.state.auth_service


async def get_auth_context(
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> AuthContext:
    """
    Get the authentication context for the current request.

    This is the optional authentication dependency: it never raises.
    """
    return auth_service.auth_context(authorization)


async def require_authentication(
    request: Request,
    context: Annotated[AuthContext, Depends(get_auth_context)],
) -> AuthenticatedUser:
    """
    Require a valid bearer token for an endpoint.

    Raises:
        AuthenticationRequiredError: If the token is missing or invalid
    """
    if not context.authenticated or context.user is None:
        logger.warning(
            f"Authentication failed for {request.method} {request.url.path}: {context.error}"
        )
        raise AuthenticationRequiredError(context.error or "Authentication required")

    return context.user


def require_role(required_role: Union[Role, str]):
    """
    Dependency factory that requires a minimum role.

    Args:
        required_role: Lowest role allowed to access the endpoint

    Returns:
        FastAPI dependency function
    """
    required_role = Role(required_role)

    async def check_role(
        request: Request,
        user: Annotated[AuthenticatedUser, Depends(require_authentication)],
        auth_service: Annotated[AuthService, Depends(get_auth_service)],
    ) -> AuthenticatedUser:
        if not auth_service.has_role(user, required_role):
            logger.warning(
                f"Role check failed for {request.method} {request.url.path}: "
                f"user {user.user_id} has role {user.role}, requires {required_role.value}"
            )
            raise InsufficientPermissionsError(
                f"Requires {required_role.value} role",
                details={"requiredRole": required_role.value, "userRole": user.role},
            )
        return user

    return check_role


def require_permission(resource: str, action: Union[Action, str] = Action.READ):
    """
    Dependency factory that requires a permission on a collection.

    Args:
        resource: Collection name, e.g. "nodes"
        action: "read" or "write"

    Returns:
        FastAPI dependency function
    """
    action = Action(action)

    async def check_permission(
        request: Request,
        user: Annotated[AuthenticatedUser, Depends(require_authentication)],
        auth_service: Annotated[AuthService, Depends(get_auth_service)],
    ) -> AuthenticatedUser:
        if not auth_service.has_permission(user, resource, action):
            logger.warning(
                f"Permission check failed for {request.method} {request.url.path}: "
                f"user {user.user_id} (role: {user.role}) lacks {action.value} on {resource}"
            )
            raise InsufficientPermissionsError(
                f"Insufficient permissions for {action.value} on {resource}",
                details={"resource": resource, "action": action.value},
            )
        return user

    return check_permission
