"""Notion API objects used by the sync."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..utils.date import parse_datetime, utcnow
from .properties import PropertyValue, decode_properties


@dataclass
class NotionPage:
    """A database row."""

    id: str
    database_id: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)
    url: Optional[str] = None
    created_time: datetime = field(default_factory=utcnow)
    last_edited_time: datetime = field(default_factory=utcnow)
    archived: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> NotionPage:
        parent = data.get("parent") or {}
        return cls(
            id=data["id"],
            database_id=parent.get("database_id", ""),
            properties=decode_properties(data.get("properties", {})),
            url=data.get("url"),
            created_time=parse_datetime(data.get("created_time")) or utcnow(),
            last_edited_time=parse_datetime(data.get("last_edited_time")) or utcnow(),
            archived=bool(data.get("archived", False)),
        )


@dataclass
class NotionPropertyDefinition:
    """Schema entry of a database property."""

    id: str
    name: str
    type: str
    options: List[str] = field(default_factory=list)
    # status properties only: group name -> option names, e.g. {"To-do": ["Not started"]}
    groups: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class NotionDatabase:
    id: str
    title: str
    properties: List[NotionPropertyDefinition] = field(default_factory=list)
    url: Optional[str] = None
    last_edited_time: Optional[datetime] = None

    def find_property(self, name: str) -> Optional[NotionPropertyDefinition]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def find_property_by_id(self, property_id: str) -> Optional[NotionPropertyDefinition]:
        for prop in self.properties:
            if prop.id == property_id:
                return prop
        return None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> NotionDatabase:
        title = "".join(part.get("plain_text", "") for part in data.get("title") or [])
        properties = []
        for name, definition in (data.get("properties") or {}).items():
            prop_type = definition.get("type", "")
            config = definition.get(prop_type) or {}
            raw_options = config.get("options") or []
            options = [opt.get("name", "") for opt in raw_options]
            names_by_id = {opt.get("id"): opt.get("name", "") for opt in raw_options}
            groups = {
                group.get("name", ""): [names_by_id[oid] for oid in group.get("option_ids") or [] if oid in names_by_id]
                for group in config.get("groups") or []
            }
            properties.append(NotionPropertyDefinition(
                id=definition.get("id", ""),
                name=definition.get("name", name),
                type=prop_type,
                options=options,
                groups=groups,
            ))
        return cls(
            id=data["id"],
            title=title or "Untitled",
            properties=properties,
            url=data.get("url"),
            last_edited_time=parse_datetime(data.get("last_edited_time")),
        )
