"""Aggregate statistics over the flow graph collections."""

from collections import Counter
from datetime import datetime, timezone
import time
from typing import Any, Iterable

from ..store.records import ACTIONS, NODES, RESOURCE_TEMPLATES, RESPONSES, TRIGGERS, Record, RecordStore

# Track application start time
_start_time = time.time()


def uptime_seconds() -> float:
    """Seconds since the application was loaded."""
    return time.time() - _start_time


def colour_distribution(nodes: Iterable[Record]) -> dict[str, int]:
    """Count nodes per colour; nodes without a colour count under "none"."""
    return dict(Counter(node.get("colour") or "none" for node in nodes))


def node_stats(nodes: list[Record]) -> dict[str, Any]:
    """Summary counts for a list of nodes."""
    return {
        "total": len(nodes),
        "rootNodes": sum(1 for node in nodes if node.get("root")),
        "globalNodes": sum(1 for node in nodes if node.get("global")),
        "withTriggers": sum(1 for node in nodes if node.get("triggerId")),
        "withActions": sum(1 for node in nodes if node.get("actions")),
        "withResponses": sum(1 for node in nodes if node.get("responses")),
        "colourDistribution": colour_distribution(nodes),
    }


def system_stats(store: RecordStore) -> dict[str, Any]:
    """Record counts for every collection."""
    stats = store.get_all_stats()

    def count(collection: str) -> int:
        return stats.get(collection, {}).get("count", 0)

    return {
        "totalNodes": count(NODES),
        "totalTriggers": count(TRIGGERS),
        "totalActions": count(ACTIONS),
        "totalResponses": count(RESPONSES),
        "totalResourceTemplates": count(RESOURCE_TEMPLATES),
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }
