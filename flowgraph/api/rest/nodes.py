"""
Node endpoints for the Flowgraph REST API.

Every endpoint requires a bearer token with read permission on nodes.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ...auth.middleware import require_permission
from ...auth.models import AuthenticatedUser
from ...core.query import apply_filters, paginate_offset
from ...core.relations import expand_node
from ...core.stats import node_stats
from ...store.records import NODES, Record, RecordStore
from ...utils.exceptions import ResourceNotFoundError
from ..dependencies import get_record_store
from .responses import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter()

NodeReader = Annotated[AuthenticatedUser, Depends(require_permission(NODES, "read"))]
Store = Annotated[RecordStore, Depends(get_record_store)]


def _query_flag(value: Optional[str]) -> Optional[bool]:
    """Query string flag: absent stays None, otherwise true only for "true"."""
    if value is None:
        return None
    return value == "true"


def _get_node_or_404(store: RecordStore, node_id: str) -> Record:
    node = store.find_by_id(NODES, node_id)
    if node is None:
        raise ResourceNotFoundError.for_record("Node", node_id)
    return node


@router.get("/nodes", response_model=ApiResponse, response_model_exclude_unset=True)
async def list_nodes(
    user: NodeReader,
    store: Store,
    page: Annotated[Optional[str], Query(description="Page number, starting at 1")] = None,
    limit: Annotated[Optional[str], Query(description="Page size, 1 to 100")] = None,
    name: Annotated[Optional[str], Query(description="Case-insensitive name substring")] = None,
    root: Annotated[Optional[str], Query(description="Only root nodes when 'true'")] = None,
    global_: Annotated[Optional[str], Query(alias="global", description="Only global nodes when 'true'")] = None,
    colour: Annotated[Optional[str], Query(description="Exact colour")] = None,
):
    """
    List nodes with filtering and page/limit pagination.

    Filters are applied before pagination. ``root`` and ``global`` match
    true only for the literal text "true"; any other value matches false.

    Returns:
        ApiResponse: ``data`` holds the page of nodes and pagination metadata
    """
    logger.info(f"Listing nodes for user {user.user_id} (page={page}, limit={limit})")

    criteria = {
        "name": name,
        "root": _query_flag(root),
        "global": _query_flag(global_),
        "colour": colour,
    }
    nodes = apply_filters(store.find_all(NODES), NODES, criteria)
    result = paginate_offset(nodes, page, limit)

    return ApiResponse.ok(result.to_dict(), f"Found {result.total} nodes")


@router.get("/nodes/stats", response_model=ApiResponse, response_model_exclude_unset=True)
async def get_node_statistics(user: NodeReader, store: Store):
    """Summary counts over every node."""
    logger.info(f"Node stats requested by user {user.user_id}")
    return ApiResponse.ok(node_stats(store.find_all(NODES)), "Node statistics retrieved successfully")


@router.get("/nodes/{node_id}", response_model=ApiResponse, response_model_exclude_unset=True)
async def get_node(node_id: str, user: NodeReader, store: Store):
    """
    Get a node by id.

    Raises:
        ResourceNotFoundError: If no node has this id
    """
    logger.info(f"Node {node_id} requested by user {user.user_id}")
    node = _get_node_or_404(store, node_id)
    return ApiResponse.ok(node, "Node retrieved successfully")


@router.get("/nodes/{node_id}/relations", response_model=ApiResponse, response_model_exclude_unset=True)
async def get_node_relations(node_id: str, user: NodeReader, store: Store):
    """
    Get a node with its trigger, responses, actions and parents joined in.

    Raises:
        ResourceNotFoundError: If no node has this id
    """
    logger.info(f"Node {node_id} relations requested by user {user.user_id}")
    node = _get_node_or_404(store, node_id)
    return ApiResponse.ok(expand_node(store, node), "Node with relations retrieved successfully")
