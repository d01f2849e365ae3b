"""Mapping commands - import and remove list/database bindings."""

import json
import logging
from typing import List, Optional

from ..core.exceptions import ConfigurationError
from ..core.models import SyncConfig, SyncMapping
from ..notion.models import NotionDatabase, NotionPropertyDefinition
from .sync import create_notion_client, open_store


TODO_GROUP = "To-do"

# (id attribute, name attribute) pairs that can be resolved from the schema
PROPERTY_BINDINGS = [
    ("title_property_id", "title_property_name"),
    ("due_date_property_id", "due_date_property_name"),
    ("priority_property_id", "priority_property_name"),
    ("status_property_id", "status_property_name"),
    ("completed_property_id", "completed_property_name"),
]


def resolve_property_ids(mapping: SyncMapping, database: NotionDatabase) -> None:
    """Fill in property ids from the database schema for bindings given by name."""
    if not mapping.remote_database_name:
        mapping.remote_database_name = database.title

    for id_attr, name_attr in PROPERTY_BINDINGS:
        name = getattr(mapping, name_attr)
        if not name or getattr(mapping, id_attr):
            continue
        prop = database.find_property(name)
        if prop is None:
            raise ConfigurationError(f"Property '{name}' not found in database '{database.title}'")
        setattr(mapping, id_attr, prop.id)

    if mapping.uses_status and not mapping.status_not_started_value:
        prop = None
        if mapping.status_property_name:
            prop = database.find_property(mapping.status_property_name)
        if prop is None and mapping.status_property_id:
            prop = database.find_property_by_id(mapping.status_property_id)
        if prop is None:
            raise ConfigurationError(f"Status property not found in database '{database.title}'")
        mapping.status_not_started_value = pick_not_started_label(prop, mapping.completed_labels)


def pick_not_started_label(prop: NotionPropertyDefinition, completed_labels: List[str]) -> str:
    """First option of the To-do group that is not a completed label, else any such option."""
    candidates = prop.groups.get(TODO_GROUP, []) + prop.options
    for label in candidates:
        if label and label not in completed_labels:
            return label
    raise ConfigurationError(
        f"Status property '{prop.name}' has no option to use for unfinished reminders; "
        "set status_not_started_value in the mapping file"
    )


class AddMappingCommand:
    """Import a mapping definition from a JSON file."""

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def run(self, path: str, verify: bool = True) -> bool:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)

        data.setdefault("title_property_id", "")
        try:
            mapping = SyncMapping.from_dict(data)
        except KeyError as e:
            raise ConfigurationError(f"Mapping file is missing required field {e}")

        if verify:
            with create_notion_client(self.config) as client:
                resolve_property_ids(mapping, client.get_database(mapping.remote_database_id))

        if not mapping.title_property_id:
            raise ConfigurationError("Mapping needs a title_property_id (or a resolvable title_property_name)")
        if mapping.uses_status and not mapping.status_not_started_value:
            raise ConfigurationError("Mapping binds a status property but has no status_not_started_value")

        open_store(self.config).save_mapping(mapping)
        print(f"✅ Added mapping {mapping.display_name} ({mapping.id})")
        return True


class RemoveMappingCommand:
    """Delete a mapping with its records and history."""

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose

    def run(self, mapping_id: str) -> bool:
        store = open_store(self.config)
        mapping: Optional[SyncMapping] = store.get_mapping(mapping_id)
        if mapping is None:
            print(f"Unknown mapping: {mapping_id}")
            return False

        store.delete_mapping(mapping_id)
        print(f"🗑️  Removed mapping {mapping.display_name}")
        return True
