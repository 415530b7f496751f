"""
Relation resolution between flow graph collections.

Every function takes the record store and a parent record and follows a
foreign-key field into another collection. Missing keys and dangling
references resolve to None or an empty list, never an error.
"""

from typing import Any, Optional

from ..store.records import ACTIONS, RESOURCE_TEMPLATES, RESPONSES, TRIGGERS, Record, RecordStore


def record_id(record: Record) -> Any:
    """Externally visible id of a record (its ``_id``)."""
    return record.get("_id")


def _id_list(record: Record, field: str) -> list:
    value = record.get(field)
    if not isinstance(value, list):
        return []
    return value


def response_ids(node: Record) -> list:
    """Response ids referenced by a node."""
    return _id_list(node, "responses")


def action_ids(node: Record) -> list:
    """Action ids referenced by a node."""
    return _id_list(node, "actions")


def parent_ids(node: Record) -> list:
    """Composite parent ids of a node."""
    return _id_list(node, "parents")


def resolve_trigger(store: RecordStore, node: Record) -> Optional[Record]:
    """Trigger referenced by a node's ``triggerId``."""
    trigger_id = node.get("triggerId")
    if not trigger_id:
        return None
    return store.find_by_id(TRIGGERS, trigger_id)


def resolve_responses(store: RecordStore, node: Record) -> list[Record]:
    """Responses referenced by a node, in store order."""
    ids = response_ids(node)
    if not ids:
        return []
    return store.find_by_ids(RESPONSES, ids)


def resolve_actions(store: RecordStore, node: Record) -> list[Record]:
    """Actions referenced by a node, in store order."""
    ids = action_ids(node)
    if not ids:
        return []
    return store.find_by_ids(ACTIONS, ids)


def resolve_parents(store: RecordStore, node: Record) -> list[Record]:
    """
    Parent nodes of a node.

    A node lists composite ids in ``parents``; the parents are the nodes
    whose ``children`` contain any of those ids.
    """
    ids = parent_ids(node)
    if not ids:
        return []
    return store.find_parents_by_composite_ids(ids)


def resolve_resource_template(store: RecordStore, record: Record) -> Optional[Record]:
    """Resource template referenced by a trigger's or action's ``resourceTemplateId``."""
    template_id = record.get("resourceTemplateId")
    if not template_id:
        return None
    return store.find_by_id(RESOURCE_TEMPLATES, template_id)


def expand_node(store: RecordStore, node: Record) -> Record:
    """
    Return a copy of a node with its relations joined in.

    The ``responses``, ``actions`` and ``parents`` id lists are replaced by
    the referenced records and a ``trigger`` key is added.
    """
    return {
        **node,
        "trigger": resolve_trigger(store, node),
        "responses": resolve_responses(store, node),
        "actions": resolve_actions(store, node),
        "parents": resolve_parents(store, node),
    }
