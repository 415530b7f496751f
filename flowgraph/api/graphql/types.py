"""
GraphQL object and input types for the flow graph collections.

Object types are built from raw store records with ``from_record``; the
record is kept as a private field so relation fields can follow its
foreign keys through the record store on demand.
"""

from typing import Generic, NewType, Optional, TypeVar

import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info

from ...core import relations
from ...store.records import Record

Long = strawberry.scalar(
    NewType("Long", int),
    serialize=lambda value: value,
    parse_value=lambda value: value,
    description="Integer value that may exceed 32 bits, such as millisecond timestamps",
)

T = TypeVar("T")


@strawberry.interface
class Node:
    id: strawberry.ID


@strawberry.type
class ResourceTemplate(Node):
    record: strawberry.Private[Record]
    record_id: strawberry.ID = strawberry.field(name="_id")
    name: str = ""
    created_at: Optional[Long] = None
    updated_at: Optional[Long] = None
    description: Optional[str] = None
    schema: Optional[JSON] = None
    integration_id: Optional[str] = None
    function_string: Optional[str] = None
    key: Optional[str] = None

    @classmethod
    def from_record(cls, record: Record) -> "ResourceTemplate":
        return cls(
            record=record,
            id=relations.record_id(record),
            record_id=relations.record_id(record),
            name=record.get("name") or "",
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
            description=record.get("description"),
            schema=record.get("schema"),
            integration_id=record.get("integrationId"),
            function_string=record.get("functionString"),
            key=record.get("key"),
        )


@strawberry.type
class Trigger(Node):
    record: strawberry.Private[Record]
    record_id: strawberry.ID = strawberry.field(name="_id")
    name: str = ""
    created_at: Optional[Long] = None
    updated_at: Optional[Long] = None
    description: Optional[str] = None
    function_string: Optional[str] = None
    resource_template_id: Optional[strawberry.ID] = None

    @classmethod
    def from_record(cls, record: Record) -> "Trigger":
        return cls(
            record=record,
            id=relations.record_id(record),
            record_id=relations.record_id(record),
            name=record.get("name") or "",
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
            description=record.get("description"),
            function_string=record.get("functionString"),
            resource_template_id=record.get("resourceTemplateId"),
        )

    @strawberry.field
    def resource_template(self, info: Info) -> Optional[ResourceTemplate]:
        template = relations.resolve_resource_template(info.context.store, self.record)
        return ResourceTemplate.from_record(template) if template else None


@strawberry.type
class Action(Node):
    record: strawberry.Private[Record]
    record_id: strawberry.ID = strawberry.field(name="_id")
    name: str = ""
    created_at: Optional[Long] = None
    updated_at: Optional[Long] = None
    description: Optional[str] = None
    function_string: Optional[str] = None
    resource_template_id: Optional[strawberry.ID] = None

    @classmethod
    def from_record(cls, record: Record) -> "Action":
        return cls(
            record=record,
            id=relations.record_id(record),
            record_id=relations.record_id(record),
            name=record.get("name") or "",
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
            description=record.get("description"),
            function_string=record.get("functionString"),
            resource_template_id=record.get("resourceTemplateId"),
        )

    @strawberry.field
    def resource_template(self, info: Info) -> Optional[ResourceTemplate]:
        template = relations.resolve_resource_template(info.context.store, self.record)
        return ResourceTemplate.from_record(template) if template else None


@strawberry.type
class ResponseVariation:
    name: str
    responses: Optional[JSON] = None


@strawberry.type
class ResponseLocaleGroup:
    locale_group_id: Optional[strawberry.ID] = None
    variations: Optional[list[ResponseVariation]] = None


@strawberry.type
class ResponsePlatform:
    integration_id: Optional[strawberry.ID] = None
    build: Optional[int] = None
    locale_groups: Optional[list[ResponseLocaleGroup]] = None


def _platforms(record: Record) -> Optional[list[ResponsePlatform]]:
    platforms = record.get("platforms")
    if not isinstance(platforms, list):
        return None

    return [
        ResponsePlatform(
            integration_id=platform.get("integrationId"),
            build=platform.get("build"),
            locale_groups=[
                ResponseLocaleGroup(
                    locale_group_id=group.get("localeGroupId"),
                    variations=[
                        ResponseVariation(name=variation.get("name") or "", responses=variation.get("responses"))
                        for variation in group.get("variations") or []
                        if isinstance(variation, dict)
                    ],
                )
                for group in platform.get("localeGroups") or []
                if isinstance(group, dict)
            ],
        )
        for platform in platforms
        if isinstance(platform, dict)
    ]


@strawberry.type
class Response(Node):
    record: strawberry.Private[Record]
    record_id: strawberry.ID = strawberry.field(name="_id")
    name: str = ""
    created_at: Optional[Long] = None
    updated_at: Optional[Long] = None
    description: Optional[str] = None
    platforms: Optional[list[ResponsePlatform]] = None

    @classmethod
    def from_record(cls, record: Record) -> "Response":
        return cls(
            record=record,
            id=relations.record_id(record),
            record_id=relations.record_id(record),
            name=record.get("name") or "",
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
            description=record.get("description"),
            platforms=_platforms(record),
        )


@strawberry.type
class NodeObject(Node):
    record: strawberry.Private[Record]
    record_id: strawberry.ID = strawberry.field(name="_id")
    name: str = ""
    created_at: Optional[Long] = None
    updated_at: Optional[Long] = None
    description: Optional[str] = None
    root: Optional[bool] = None
    global_: Optional[bool] = strawberry.field(name="global", default=None)
    colour: Optional[str] = None
    priority: Optional[float] = None
    composite_id: Optional[strawberry.ID] = None
    trigger_id: Optional[strawberry.ID] = None

    @classmethod
    def from_record(cls, record: Record) -> "NodeObject":
        return cls(
            record=record,
            id=relations.record_id(record),
            record_id=relations.record_id(record),
            name=record.get("name") or "",
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
            description=record.get("description"),
            root=record.get("root"),
            global_=record.get("global"),
            colour=record.get("colour"),
            priority=record.get("priority"),
            composite_id=record.get("compositeId"),
            trigger_id=record.get("triggerId"),
        )

    @strawberry.field
    def trigger(self, info: Info) -> Optional[Trigger]:
        trigger = relations.resolve_trigger(info.context.store, self.record)
        return Trigger.from_record(trigger) if trigger else None

    @strawberry.field
    def responses(self, info: Info) -> list[Response]:
        return [Response.from_record(r) for r in relations.resolve_responses(info.context.store, self.record)]

    @strawberry.field
    def actions(self, info: Info) -> list[Action]:
        return [Action.from_record(a) for a in relations.resolve_actions(info.context.store, self.record)]

    @strawberry.field
    def parents(self, info: Info) -> list["NodeObject"]:
        return [NodeObject.from_record(p) for p in relations.resolve_parents(info.context.store, self.record)]

    @strawberry.field
    def response_ids(self) -> list[strawberry.ID]:
        return relations.response_ids(self.record)

    @strawberry.field
    def action_ids(self) -> list[strawberry.ID]:
        return relations.action_ids(self.record)

    @strawberry.field
    def parent_ids(self) -> list[strawberry.ID]:
        return relations.parent_ids(self.record)


@strawberry.type
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None


@strawberry.type
class Edge(Generic[T]):
    node: T
    cursor: str


@strawberry.type
class Connection(Generic[T]):
    edges: list[Edge[T]]
    page_info: PageInfo
    total_count: int


@strawberry.type
class HealthStatus:
    status: str
    timestamp: str
    uptime: Long
    version: str


@strawberry.type
class SystemStats:
    total_nodes: int
    total_triggers: int
    total_actions: int
    total_responses: int
    total_resource_templates: int
    last_updated: str


@strawberry.input
class NodeFilter:
    name: Optional[str] = None
    root: Optional[bool] = None
    global_: Optional[bool] = strawberry.field(name="global", default=None)
    colour: Optional[str] = None

    def to_criteria(self) -> dict:
        return {"name": self.name, "root": self.root, "global": self.global_, "colour": self.colour}


@strawberry.input
class TriggerFilter:
    name: Optional[str] = None
    resource_template_id: Optional[strawberry.ID] = None

    def to_criteria(self) -> dict:
        return {"name": self.name, "resourceTemplateId": self.resource_template_id}


@strawberry.input
class ActionFilter:
    name: Optional[str] = None
    resource_template_id: Optional[strawberry.ID] = None

    def to_criteria(self) -> dict:
        return {"name": self.name, "resourceTemplateId": self.resource_template_id}


@strawberry.input
class ResponseFilter:
    name: Optional[str] = None

    def to_criteria(self) -> dict:
        return {"name": self.name}


@strawberry.input
class ResourceTemplateFilter:
    name: Optional[str] = None
    integration_id: Optional[str] = None
    key: Optional[str] = None

    def to_criteria(self) -> dict:
        return {"name": self.name, "integrationId": self.integration_id, "key": self.key}
