"""
GraphQL schema for the Flowgraph API.

Every entity field requires read permission on its collection. Lookups by
id return null for unknown ids; list fields return connections paginated
with ``first``/``after`` index cursors.

Example Query:
    query {
        nodes(first: 5, filter: {root: true}) {
            edges { cursor node { id name trigger { name } } }
            pageInfo { hasNextPage endCursor }
            totalCount
        }
    }
"""

from datetime import datetime, timezone
import logging
from typing import Annotated, Callable, Optional

import strawberry
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from ...config.app_config import Settings
from ...core.query import CursorPage, apply_filters, paginate_cursor
from ...core.stats import system_stats, uptime_seconds
from ...store.records import ACTIONS, NODES, RESOURCE_TEMPLATES, RESPONSES, TRIGGERS, Record
from ...utils.exceptions import BaseAPIException
from .context import get_context
from .permissions import require_authenticated, require_read
from .types import (
    Action,
    ActionFilter,
    Connection,
    Edge,
    HealthStatus,
    NodeFilter,
    NodeObject,
    PageInfo,
    ResourceTemplate,
    ResourceTemplateFilter,
    Response,
    ResponseFilter,
    SystemStats,
    Trigger,
    TriggerFilter,
)

logger = logging.getLogger(__name__)


def _to_connection(page: CursorPage, build: Callable[[Record], object]) -> Connection:
    return Connection(
        edges=[Edge(node=build(edge.node), cursor=edge.cursor) for edge in page.edges],
        page_info=PageInfo(
            has_next_page=page.page_info.has_next_page,
            has_previous_page=page.page_info.has_previous_page,
            start_cursor=page.page_info.start_cursor,
            end_cursor=page.page_info.end_cursor,
        ),
        total_count=page.total_count,
    )


def _get_one(info: Info, collection: str, record_id: Optional[str]) -> Optional[Record]:
    user = require_read(info, collection)
    if not record_id:
        logger.warning(f"{info.field_name} query called without an id (user: {user.user_id})")
        return None

    logger.debug(f"Fetching {collection} record {record_id} (user: {user.user_id})")
    return info.context.store.find_by_id(collection, record_id)


def _get_page(info: Info, collection: str, first: Optional[int], after: Optional[str],
              criteria: Optional[dict]) -> CursorPage:
    user = require_read(info, collection)
    logger.debug(
        f"Fetching {collection} page (first={first}, after={after}, "
        f"filter={criteria}, user: {user.user_id})"
    )

    records = apply_filters(info.context.store.find_all(collection), collection, criteria)
    return paginate_cursor(records, first, after)


@strawberry.type
class Query:
    @strawberry.field(description="Get a node by id")
    def node(self, info: Info, node_id: Optional[strawberry.ID] = None) -> Optional[NodeObject]:
        record = _get_one(info, NODES, node_id)
        return NodeObject.from_record(record) if record else None

    @strawberry.field(description="Nodes with filtering and cursor pagination")
    def nodes(
        self,
        info: Info,
        first: Optional[int] = 10,
        after: Optional[str] = None,
        filter_: Annotated[Optional[NodeFilter], strawberry.argument(name="filter")] = None,
    ) -> Connection[NodeObject]:
        criteria = filter_.to_criteria() if filter_ else None
        return _to_connection(_get_page(info, NODES, first, after, criteria), NodeObject.from_record)

    @strawberry.field(description="Get a trigger by id")
    def trigger(self, info: Info, trigger_id: Optional[strawberry.ID] = None) -> Optional[Trigger]:
        record = _get_one(info, TRIGGERS, trigger_id)
        return Trigger.from_record(record) if record else None

    @strawberry.field(description="Triggers with filtering and cursor pagination")
    def triggers(
        self,
        info: Info,
        first: Optional[int] = 10,
        after: Optional[str] = None,
        filter_: Annotated[Optional[TriggerFilter], strawberry.argument(name="filter")] = None,
    ) -> Connection[Trigger]:
        criteria = filter_.to_criteria() if filter_ else None
        return _to_connection(_get_page(info, TRIGGERS, first, after, criteria), Trigger.from_record)

    @strawberry.field(description="Get an action by id")
    def action(self, info: Info, action_id: Optional[strawberry.ID] = None) -> Optional[Action]:
        record = _get_one(info, ACTIONS, action_id)
        return Action.from_record(record) if record else None

    @strawberry.field(description="Actions with filtering and cursor pagination")
    def actions(
        self,
        info: Info,
        first: Optional[int] = 10,
        after: Optional[str] = None,
        filter_: Annotated[Optional[ActionFilter], strawberry.argument(name="filter")] = None,
    ) -> Connection[Action]:
        criteria = filter_.to_criteria() if filter_ else None
        return _to_connection(_get_page(info, ACTIONS, first, after, criteria), Action.from_record)

    @strawberry.field(description="Get a response by id")
    def response(self, info: Info, response_id: Optional[strawberry.ID] = None) -> Optional[Response]:
        record = _get_one(info, RESPONSES, response_id)
        return Response.from_record(record) if record else None

    @strawberry.field(description="Responses with filtering and cursor pagination")
    def responses(
        self,
        info: Info,
        first: Optional[int] = 10,
        after: Optional[str] = None,
        filter_: Annotated[Optional[ResponseFilter], strawberry.argument(name="filter")] = None,
    ) -> Connection[Response]:
        criteria = filter_.to_criteria() if filter_ else None
        return _to_connection(_get_page(info, RESPONSES, first, after, criteria), Response.from_record)

    @strawberry.field(description="Get a resource template by id")
    def resource_template(
        self, info: Info, template_id: Optional[strawberry.ID] = None
    ) -> Optional[ResourceTemplate]:
        record = _get_one(info, RESOURCE_TEMPLATES, template_id)
        return ResourceTemplate.from_record(record) if record else None

    @strawberry.field(description="Resource templates with filtering and cursor pagination")
    def resource_templates(
        self,
        info: Info,
        first: Optional[int] = 10,
        after: Optional[str] = None,
        filter_: Annotated[Optional[ResourceTemplateFilter], strawberry.argument(name="filter")] = None,
    ) -> Connection[ResourceTemplate]:
        criteria = filter_.to_criteria() if filter_ else None
        page = _get_page(info, RESOURCE_TEMPLATES, first, after, criteria)
        return _to_connection(page, ResourceTemplate.from_record)

    @strawberry.field(description="Service health; no authentication required")
    def health(self, info: Info) -> HealthStatus:
        return HealthStatus(
            status="OK",
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime=int(uptime_seconds()),
            version=info.context.settings.APP_VERSION,
        )

    @strawberry.field(description="Record counts per collection")
    def stats(self, info: Info) -> SystemStats:
        user = require_authenticated(info)
        logger.debug(f"Fetching system stats (user: {user.user_id})")

        stats = system_stats(info.context.store)
        return SystemStats(
            total_nodes=stats["totalNodes"],
            total_triggers=stats["totalTriggers"],
            total_actions=stats["totalActions"],
            total_responses=stats["totalResponses"],
            total_resource_templates=stats["totalResourceTemplates"],
            last_updated=stats["lastUpdated"],
        )


def _should_mask_error(error) -> bool:
    """Mask unexpected failures; API errors and query errors pass through."""
    original = error.original_error
    return original is not None and not isinstance(original, BaseAPIException)


def create_schema(settings: Settings) -> strawberry.Schema:
    """
    Create the GraphQL schema.

    Outside development, messages of unexpected exceptions are replaced by
    "Internal server error".
    """
    extensions = []
    if not settings.expose_error_details:
        extensions.append(
            lambda: MaskErrors(should_mask_error=_should_mask_error, error_message="Internal server error")
        )

    return strawberry.Schema(query=Query, extensions=extensions)


def create_graphql_router(settings: Settings) -> GraphQLRouter:
    """
    Create the GraphQL router for FastAPI.

    Returns:
        GraphQLRouter configured with schema and context
    """
    return GraphQLRouter(
        create_schema(settings),
        context_getter=get_context,
        graphql_ide="graphiql" if settings.graphql_ide_enabled else None,
    )
