"""
Authentication service for the Flowgraph API.

Handles JWT token signing and verification, bearer header parsing,
and role / permission checks against the fixed permission table.
"""

import logging
import time
from typing import Any, Mapping, Optional, Union

import jwt as pyjwt
from pydantic import ValidationError

from ..config.app_config import Settings
from ..utils.exceptions import InvalidTokenError, TokenExpiredError
from .models import PERMISSIONS, Action, AuthContext, AuthenticatedUser, Role, TokenPayload

logger = logging.getLogger(__name__)

UserLike = Union[AuthenticatedUser, Mapping[str, Any], None]


def _role_of(user: UserLike) -> Optional[str]:
    if user is None:
        return None
    if isinstance(user, AuthenticatedUser):
        return user.role
    return user.get("role")


class AuthService:
    """Service for handling authentication and authorization."""

    def __init__(self, secret_key: str, algorithm: str = "HS256",
                 expiry_seconds: int = 86400, leeway_seconds: int = 0):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiry_seconds = expiry_seconds
        self.leeway_seconds = leeway_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthService":
        """Create a service from application settings."""
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            expiry_seconds=settings.JWT_EXPIRY_SECONDS,
            leeway_seconds=settings.JWT_LEEWAY_SECONDS,
        )

    def sign(self, payload: Union[Mapping[str, Any], TokenPayload], ttl: Optional[int] = None) -> str:
        """
        Generate a signed JWT token.

        Args:
            payload: Claims to embed (userId, email, role)
            ttl: Lifetime in seconds, defaults to the configured expiry

        Returns:
            Encoded JWT token
        """
        if isinstance(payload, TokenPayload):
            claims = payload.model_dump(by_alias=True, mode="json", exclude_none=True)
        else:
            claims = dict(payload)

        now_timestamp = int(time.time())
        claims["iat"] = now_timestamp
        claims["exp"] = now_timestamp + (self.expiry_seconds if ttl is None else int(ttl))

        token = pyjwt.encode(claims, self.secret_key, algorithm=self.algorithm)

        logger.debug(
            f"Token generated for user {claims.get('userId')} "
            f"(role: {claims.get('role')}, expires: {claims['exp']})"
        )
        return token

    def verify(self, token: str) -> dict[str, Any]:
        """
        Verify a JWT token and return its payload.

        Raises:
            TokenExpiredError: If the token's exp has passed
            InvalidTokenError: If the signature or structure is malformed
        """
        try:
            payload = pyjwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                leeway=self.leeway_seconds,
            )
        except pyjwt.ExpiredSignatureError:
            logger.warning("Token verification failed: token has expired")
            raise TokenExpiredError()
        except pyjwt.InvalidTokenError as e:
            logger.warning(f"Token verification failed: {e}")
            raise InvalidTokenError()

        logger.debug(f"Token verified for user {payload.get('userId')} (role: {payload.get('role')})")
        return payload

    @staticmethod
    def extract_token(auth_header: Optional[str]) -> Optional[str]:
        """Return the token from an exact "Bearer <token>" header, else None."""
        if not auth_header:
            return None

        parts = auth_header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
            return None

        return parts[1]

    def auth_context(self, auth_header: Optional[str]) -> AuthContext:
        """
        Build the authentication context for a raw Authorization header.

        Never raises: failures are reported through ``error``.
        """
        token = self.extract_token(auth_header)
        if not token:
            return AuthContext(user=None, authenticated=False, error="No token provided")

        try:
            payload = self.verify(token)
        except InvalidTokenError as e:
            return AuthContext(user=None, authenticated=False, error=e.message)

        try:
            user = AuthenticatedUser.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Token claims rejected: {e.error_count()} invalid field(s)")
            return AuthContext(user=None, authenticated=False, error=InvalidTokenError().message)

        return AuthContext(user=user, authenticated=True, error=None)

    def has_role(self, user: UserLike, required_role: Union[Role, str]) -> bool:
        """Check whether the user's role is at least the required role."""
        role = _role_of(user)
        if not role:
            return False
        return Role.level_of(role) >= Role.level_of(required_role)

    def has_permission(self, user: UserLike, resource: str,
                       action: Union[Action, str] = Action.READ) -> bool:
        """Check the permission table for a role, resource and action."""
        role = _role_of(user)
        try:
            role = Role(role)
            action = Action(action)
        except ValueError:
            return False

        return action in PERMISSIONS[role].get(resource, frozenset())

    def generate_sample_token(self, **overrides: Any) -> str:
        """Generate a token for a sample user, for development and testing."""
        claims = {
            "userId": "sample-user-123",
            "email": "user@example.com",
            "role": Role.USER.value,
        }
        claims.update(overrides)
        return self.sign(claims)
