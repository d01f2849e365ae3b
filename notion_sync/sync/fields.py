"""Conversion between Notion pages and ReminderItem using a mapping's bindings."""

from typing import Dict

from ..core.exceptions import ConfigurationError
from ..core.models import Priority, ReminderItem, SyncMapping
from ..notion.models import NotionPage
from ..notion.properties import PropertyValue
from ..utils.date import format_due, parse_due


def page_to_item(page: NotionPage, mapping: SyncMapping) -> ReminderItem:
    """Build a ReminderItem from a page, reading properties by name."""
    props = page.properties

    title = ""
    title_prop = props.get(mapping.title_property_name)
    if title_prop is not None:
        title = title_prop.plain_text or ""

    due_date, has_due_time = None, False
    if mapping.due_date_property_name:
        date_prop = props.get(mapping.due_date_property_name)
        if date_prop is not None:
            due_date, has_due_time = parse_due(date_prop.date_start, date_prop.date_time_zone)

    priority = Priority.NONE
    if mapping.priority_property_name:
        priority_prop = props.get(mapping.priority_property_name)
        if priority_prop is not None:
            priority = Priority.from_notion(priority_prop.select_name)

    is_completed = False
    if mapping.uses_status:
        status_prop = props.get(mapping.status_property_name or "")
        if status_prop is not None:
            is_completed = status_prop.select_name in mapping.completed_labels
    elif mapping.completed_property_name:
        completed_prop = props.get(mapping.completed_property_name)
        if completed_prop is not None:
            is_completed = completed_prop.is_checked

    return ReminderItem(
        title=title,
        due_date=due_date,
        has_due_time=has_due_time,
        priority=priority,
        is_completed=is_completed,
        modification_date=page.last_edited_time,
        remote_id=page.id,
    )


def item_to_properties(item: ReminderItem, mapping: SyncMapping, for_update: bool = False) -> Dict[str, PropertyValue]:
    """Build the property payload for a page, keyed by property id.

    Only bound properties are written. On update, cleared due dates and
    priorities are sent as null so Notion drops the old value; on create they
    are omitted.

    Raises:
        ConfigurationError: an unfinished item under a status binding that has
            no not-started label, since status properties cannot be cleared
    """
    properties: Dict[str, PropertyValue] = {
        mapping.title_property_id: PropertyValue.title(item.title),
    }

    if mapping.due_date_property_id:
        due = format_due(item.due_date, item.has_due_time)
        if due or for_update:
            properties[mapping.due_date_property_id] = PropertyValue.date(due)

    if mapping.priority_property_id:
        if item.priority is not Priority.NONE:
            properties[mapping.priority_property_id] = PropertyValue.select(item.priority.notion_value)
        elif for_update:
            properties[mapping.priority_property_id] = PropertyValue.select(None)

    if mapping.status_property_id:
        if item.is_completed:
            label = mapping.status_completed_value or mapping.completed_labels[0]
        else:
            label = mapping.status_not_started_value
        if not label:
            raise ConfigurationError(
                f"Mapping {mapping.display_name} has no status_not_started_value; "
                f"cannot mark '{item.title}' as unfinished in Notion"
            )
        properties[mapping.status_property_id] = PropertyValue.status(label)
    elif mapping.completed_property_id:
        properties[mapping.completed_property_id] = PropertyValue.checkbox(item.is_completed)

    return properties
