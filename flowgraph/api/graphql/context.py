"""Per-request GraphQL context."""

import logging
import uuid
from typing import Annotated, Optional

from fastapi import Depends, Header
from strawberry.fastapi import BaseContext

from ...auth.middleware import get_auth_service
from ...auth.models import AuthContext, AuthenticatedUser
from ...auth.service import AuthService
from ...config.app_config import Settings
from ...store.records import RecordStore
from ..dependencies import get_app_settings, get_record_store

logger = logging.getLogger(__name__)


class GraphQLContext(BaseContext):
    """Components and authentication state available to resolvers."""

    def __init__(self, settings: Settings, store: RecordStore, auth_service: AuthService, auth: AuthContext):
        super().__init__()
        self.settings = settings
        self.store = store
        self.auth_service = auth_service
        self.auth = auth
        self.request_id = f"req_{uuid.uuid4().hex[:12]}"

    @property
    def user(self) -> Optional[AuthenticatedUser]:
        return self.auth.user


async def get_context(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[RecordStore, Depends(get_record_store)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> GraphQLContext:
    """Build the GraphQL context from the request's Authorization header."""
    context = GraphQLContext(settings, store, auth_service, auth_service.auth_context(authorization))

    logger.debug(
        f"GraphQL context {context.request_id} created "
        f"(authenticated: {context.auth.authenticated}, user: {context.auth.user_id})"
    )
    return context
