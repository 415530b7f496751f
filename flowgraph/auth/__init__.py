"""
Authentication package for the Flowgraph API.

Provides JWT bearer authentication with a guest < user < admin role
hierarchy and a fixed per-collection permission table.
"""

from .middleware import (
    get_auth_context,
    get_auth_service,
    require_authentication,
    require_permission,
    require_role,
)
from .models import PERMISSIONS, Action, AuthContext, AuthenticatedUser, Role, TokenPayload
from .service import AuthService

__all__ = [
    # Service
    "AuthService",
    # Models
    "Action",
    "AuthContext",
    "AuthenticatedUser",
    "PERMISSIONS",
    "Role",
    "TokenPayload",
    # Middleware
    "get_auth_context",
    "get_auth_service",
    "require_authentication",
    "require_permission",
    "require_role",
]
