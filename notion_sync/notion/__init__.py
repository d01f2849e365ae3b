"""Notion module for the hosted database side of a mapping."""

from .client import NotionClient
from .models import NotionDatabase, NotionPage
from .properties import PropertyType, PropertyValue, decode_property, encode_property

__all__ = [
    'NotionClient',
    'NotionDatabase',
    'NotionPage',
    'PropertyType',
    'PropertyValue',
    'decode_property',
    'encode_property',
]
