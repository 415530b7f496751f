"""
System endpoints for the Flowgraph REST API.

Provides API information, health status for monitoring probes and
record statistics for authenticated callers.
"""

import logging
import platform
from typing import Annotated

from fastapi import APIRouter, Depends

from ...auth.middleware import require_authentication
from ...auth.models import AuthenticatedUser
from ...config.app_config import Settings
from ...core.stats import uptime_seconds
from ...store.records import RecordStore
from ..dependencies import get_app_settings, get_record_store
from .responses import ApiResponse, utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=ApiResponse, response_model_exclude_unset=True)
async def api_info(settings: Annotated[Settings, Depends(get_app_settings)]):
    """
    Describe the REST API and its endpoints.

    No authentication required.
    """
    prefix = settings.API_PREFIX
    info = {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": settings.APP_DESCRIPTION,
        "endpoints": {
            "graphql": settings.GRAPHQL_PATH,
            "rest": {
                "nodes": f"{prefix}/nodes",
                "nodeStats": f"{prefix}/nodes/stats",
                "health": f"{prefix}/health",
                "stats": f"{prefix}/stats",
            },
        },
        "features": [
            "GraphQL API",
            "REST API",
            "JWT Authentication",
            "Role-based permissions",
            "Pagination and filtering",
        ],
    }
    return ApiResponse.ok(info, "API information retrieved successfully")


@router.get("/health", response_model=ApiResponse, response_model_exclude_unset=True)
async def health_check(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[RecordStore, Depends(get_record_store)],
):
    """
    Health check endpoint.

    Reports process uptime and whether the record store is loaded.
    Suitable for load balancer probes; no authentication required.
    """
    health = {
        "status": "OK",
        "timestamp": utc_timestamp(),
        "uptime": uptime_seconds(),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": {
            "connected": store.initialized,
            "collections": store.collection_names if store.initialized else [],
            "totalRecords": store.total_record_count,
        },
    }
    return ApiResponse.ok(health, "Health status retrieved successfully")


@router.get("/stats", response_model=ApiResponse, response_model_exclude_unset=True)
async def system_statistics(
    user: Annotated[AuthenticatedUser, Depends(require_authentication)],
    store: Annotated[RecordStore, Depends(get_record_store)],
):
    """Per-collection record statistics and server information."""
    logger.info(f"System stats requested by user {user.user_id}")

    stats = {
        **store.get_all_stats(),
        "lastUpdated": utc_timestamp(),
        "server": {
            "uptime": uptime_seconds(),
            "platform": platform.system().lower(),
            "pythonVersion": platform.python_version(),
        },
    }
    return ApiResponse.ok(stats, "System statistics retrieved successfully")
