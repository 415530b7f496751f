"""
Authentication models for the Flowgraph API.

Implements the guest < user < admin role hierarchy and the fixed
per-collection permission table.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """User roles, ordered from least to most privileged."""

    GUEST = "guest"
    USER = "user"
    ADMIN = "admin"

    @property
    def level(self) -> int:
        return ROLE_LEVELS[self]

    @classmethod
    def level_of(cls, role: Union["Role", str, None]) -> int:
        """Level of a role name; unknown names rank as guest."""
        try:
            return cls(role).level
        except ValueError:
            return ROLE_LEVELS[cls.GUEST]


class Action(str, Enum):
    """Operations a permission can grant on a resource."""

    READ = "read"
    WRITE = "write"


ROLE_LEVELS = {
    Role.GUEST: 0,
    Role.USER: 1,
    Role.ADMIN: 2,
}

RESOURCES = ("nodes", "triggers", "actions", "responses", "resourceTemplates")

_READ_ONLY = frozenset({Action.READ})
_READ_WRITE = frozenset({Action.READ, Action.WRITE})

PERMISSIONS = {
    Role.ADMIN: {resource: _READ_WRITE for resource in RESOURCES},
    Role.USER: {
        "nodes": _READ_WRITE,
        "triggers": _READ_WRITE,
        "actions": _READ_WRITE,
        "responses": _READ_WRITE,
        "resourceTemplates": _READ_ONLY,
    },
    Role.GUEST: {resource: _READ_ONLY for resource in RESOURCES},
}


class AuthenticatedUser(BaseModel):
    """Decoded bearer token payload of an authenticated caller."""

    user_id: Optional[str] = Field(None, alias="userId", description="Unique user identifier")
    email: Optional[str] = Field(None, description="User email address")
    role: Optional[str] = Field(None, description="Role name: guest, user or admin")
    iat: Optional[int] = Field(None, description="Issued-at time (Unix seconds)")
    exp: Optional[int] = Field(None, description="Expiry time (Unix seconds)")

    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)

    @property
    def role_level(self) -> int:
        return Role.level_of(self.role)

    def to_payload(self) -> dict:
        """Token payload representation (camelCase keys)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AuthContext(BaseModel):
    """Result of inspecting a request's Authorization header."""

    user: Optional[AuthenticatedUser] = Field(None, description="Authenticated user if the token is valid")
    authenticated: bool = Field(False, description="Whether a valid token was presented")
    error: Optional[str] = Field(None, description="Reason authentication failed")

    @property
    def user_id(self) -> str:
        """User id for logging, or 'anonymous'."""
        if self.user and self.user.user_id:
            return self.user.user_id
        return "anonymous"


class TokenPayload(BaseModel):
    """Claims used to mint a token."""

    user_id: str = Field(..., alias="userId", description="Unique user identifier", min_length=1)
    email: Optional[str] = Field(None, description="User email address")
    role: Role = Field(default=Role.USER, description="User role")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "userId": "user-123",
                "email": "user@example.com",
                "role": "user",
            }
        },
    )
