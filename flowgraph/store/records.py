"""
In-memory record store for the Flowgraph API.

Loads the fixed set of JSON collection files once at startup and provides
read-only lookup primitives over them. Collections are never mutated after
loading, so every accessor is safe to call from concurrent requests.
"""

from collections.abc import Hashable
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from cachetools import LRUCache

from ..utils.exceptions import DataPathNotFoundError, StoreNotInitializedError

logger = logging.getLogger(__name__)

Record = dict[str, Any]

# Source file -> collection name
COLLECTION_FILES = {
    "action.json": "actions",
    "node.json": "nodes",
    "resourceTemplate.json": "resourceTemplates",
    "response.json": "responses",
    "trigger.json": "triggers",
}

NODES = "nodes"
TRIGGERS = "triggers"
ACTIONS = "actions"
RESPONSES = "responses"
RESOURCE_TEMPLATES = "resourceTemplates"


class RecordStore:
    """
    Read-only store of the flow graph collections.

    Each collection is a list of JSON objects kept in file order. Identity is
    the ``_id`` field; foreign keys are resolved by linear scan and dangling
    references simply resolve to nothing.
    """

    def __init__(self, data_path: Union[str, Path], parent_cache_size: int = 1024):
        self.data_path = Path(data_path)
        self._data: Optional[dict[str, list[Record]]] = None
        self._loaded_at: Optional[datetime] = None
        self._parent_cache = LRUCache(maxsize=parent_cache_size)

    @property
    def initialized(self) -> bool:
        """Whether load_all() has completed."""
        return self._data is not None

    def load_all(self) -> dict[str, list[Record]]:
        """
        Load every collection file from the data directory.

        Missing files and files with malformed content produce empty
        collections; only a missing data directory is fatal.

        Returns:
            Mapping of collection name to its records

        Raises:
            DataPathNotFoundError: If the data directory does not exist
        """
        logger.info(f"Loading records from {self.data_path}")

        if not self.data_path.is_dir():
            logger.error(f"Data path does not exist: {self.data_path}")
            raise DataPathNotFoundError(str(self.data_path))

        data = {}
        for filename, collection in COLLECTION_FILES.items():
            data[collection] = self._load_file(self.data_path / filename)

        self._data = data
        self._loaded_at = datetime.now(timezone.utc)
        self._parent_cache.clear()

        logger.info(
            f"Record store initialized with collections {sorted(data)} "
            f"({self.total_record_count} records)"
        )
        return data

    def _load_file(self, file_path: Path) -> list[Record]:
        """Read one collection file, tolerating missing or malformed content."""
        if not file_path.is_file():
            logger.warning(f"Data file not found: {file_path.name}")
            return []

        try:
            with open(file_path, encoding="utf-8") as f:
                content = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load data from {file_path.name}: {e}")
            return []

        if isinstance(content, dict):
            records = [content]
        elif isinstance(content, list):
            records = [item for item in content if isinstance(item, dict)]
            skipped = len(content) - len(records)
            if skipped:
                logger.warning(f"Skipped {skipped} non-object entries in {file_path.name}")
        else:
            logger.error(
                f"Failed to load data from {file_path.name}: "
                f"expected an object or array, got {type(content).__name__}"
            )
            return []

        logger.debug(f"Loaded {len(records)} records from {file_path.name}")
        return records

    def _require_data(self) -> dict[str, list[Record]]:
        if self._data is None:
            raise StoreNotInitializedError()
        return self._data

    @property
    def collection_names(self) -> list[str]:
        """Names of the loaded collections."""
        return list(self._require_data())

    @property
    def total_record_count(self) -> int:
        """Number of records across every collection."""
        if self._data is None:
            return 0
        return sum(len(records) for records in self._data.values())

    def find_all(self, collection: str) -> list[Record]:
        """Return every record of a collection in load order."""
        return self._require_data().get(collection, [])

    def find(self, collection: str, predicate: Callable[[Record], bool]) -> list[Record]:
        """Return the records of a collection matching a predicate, in load order."""
        data = self._require_data()
        if collection not in data:
            logger.warning(f"Collection '{collection}' not found")
            return []
        return [record for record in data[collection] if predicate(record)]

    def find_one(self, collection: str, predicate: Callable[[Record], bool]) -> Optional[Record]:
        """Return the first record matching a predicate, or None."""
        data = self._require_data()
        for record in data.get(collection, []):
            if predicate(record):
                return record
        return None

    def find_by_id(self, collection: str, record_id: Any) -> Optional[Record]:
        """Return the first record whose ``_id`` equals record_id, or None."""
        return self.find_one(collection, lambda record: record.get("_id") == record_id)

    def find_by_ids(self, collection: str, ids: Any) -> list[Record]:
        """
        Return the records whose ``_id`` is among ids.

        Order follows the store, not the id list; unknown ids are skipped.
        """
        if not isinstance(ids, (list, tuple)):
            return []
        wanted = list(ids)
        return self.find(collection, lambda record: record.get("_id") in wanted)

    def find_parents_by_composite_ids(self, composite_ids: Union[str, Iterable[str]]) -> list[Record]:
        """
        Return every node whose ``children`` references one of composite_ids.

        Nodes carry no parent pointer, so this is a reverse scan over the
        whole node collection. Results are memoised per id set.
        """
        self._require_data()
        if isinstance(composite_ids, str):
            composite_ids = [composite_ids]
        # Objects and arrays in id lists can never match a child reference
        key = frozenset(cid for cid in composite_ids if isinstance(cid, Hashable))
        if not key:
            return []

        def references(node: Record) -> bool:
            children = node.get("children")
            if not isinstance(children, list):
                return False
            return any(isinstance(child, Hashable) and child in key for child in children)

        cached = self._parent_cache.get(key)
        if cached is None:
            cached = tuple(self.find(NODES, references))
            self._parent_cache[key] = cached
        return list(cached)

    def get_collection_stats(self, collection: str) -> dict[str, Any]:
        """Return record count and existence for a collection."""
        data = self._require_data()
        if collection not in data:
            return {"count": 0, "exists": False}
        return {
            "count": len(data[collection]),
            "exists": True,
            "lastUpdated": self._loaded_at.isoformat(),
        }

    def get_all_stats(self) -> dict[str, dict[str, Any]]:
        """Return get_collection_stats() for every loaded collection."""
        return {collection: self.get_collection_stats(collection) for collection in self._require_data()}


def create_record_store(data_path: Union[str, Path]) -> RecordStore:
    """
    Factory function to create a record store for a data directory.

    Returns:
        RecordStore instance (not yet loaded)
    """
    return RecordStore(data_path)
