"""Notion property values.

Notion page properties are a tagged union keyed by ``type``. Reads carry more
than writes accept: rich text arrives with ``plain_text`` and annotations but
must be written as ``{"text": {"content": ...}}``; select and status options
arrive with id and color but are written by name. Writes never include the
``type`` key.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..core.exceptions import PropertyDecodeError


class PropertyType(Enum):
    TITLE = "title"
    RICH_TEXT = "rich_text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    STATUS = "status"
    DATE = "date"
    CHECKBOX = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE_NUMBER = "phone_number"


@dataclass
class RichText:
    plain_text: str
    href: Optional[str] = None


@dataclass
class SelectValue:
    name: str
    id: Optional[str] = None
    color: Optional[str] = None


@dataclass
class DateValue:
    start: str
    end: Optional[str] = None
    time_zone: Optional[str] = None


@dataclass
class PropertyValue:
    """A single typed property value."""

    type: PropertyType
    value: Any = None

    @classmethod
    def title(cls, text: str) -> "PropertyValue":
        return cls(PropertyType.TITLE, [RichText(plain_text=text)])

    @classmethod
    def rich_text(cls, text: str) -> "PropertyValue":
        return cls(PropertyType.RICH_TEXT, [RichText(plain_text=text)])

    @classmethod
    def select(cls, name: Optional[str]) -> "PropertyValue":
        return cls(PropertyType.SELECT, SelectValue(name=name) if name else None)

    @classmethod
    def status(cls, name: Optional[str]) -> "PropertyValue":
        return cls(PropertyType.STATUS, SelectValue(name=name) if name else None)

    @classmethod
    def date(cls, start: Optional[str]) -> "PropertyValue":
        return cls(PropertyType.DATE, DateValue(start=start) if start else None)

    @classmethod
    def checkbox(cls, checked: bool) -> "PropertyValue":
        return cls(PropertyType.CHECKBOX, bool(checked))

    @property
    def plain_text(self) -> Optional[str]:
        """Concatenated text of a title or rich_text value."""
        if self.type in (PropertyType.TITLE, PropertyType.RICH_TEXT):
            return "".join(part.plain_text for part in self.value or [])
        return None

    @property
    def select_name(self) -> Optional[str]:
        """Option name of a select or status value."""
        if self.type in (PropertyType.SELECT, PropertyType.STATUS) and self.value is not None:
            return self.value.name
        return None

    @property
    def is_checked(self) -> bool:
        return self.type is PropertyType.CHECKBOX and bool(self.value)

    @property
    def date_start(self) -> Optional[str]:
        if self.type is PropertyType.DATE and self.value is not None:
            return self.value.start
        return None

    @property
    def date_time_zone(self) -> Optional[str]:
        if self.type is PropertyType.DATE and self.value is not None:
            return self.value.time_zone
        return None


# -- decoding ---------------------------------------------------------------

def _decode_rich_text(raw: Optional[List[Dict[str, Any]]]) -> List[RichText]:
    parts = []
    for entry in raw or []:
        text = entry.get("plain_text")
        if text is None:
            text = (entry.get("text") or {}).get("content", "")
        parts.append(RichText(plain_text=text, href=entry.get("href")))
    return parts


def _decode_option(raw: Optional[Dict[str, Any]]) -> Optional[SelectValue]:
    if not raw:
        return None
    return SelectValue(name=raw.get("name", ""), id=raw.get("id"), color=raw.get("color"))


def _decode_date(raw: Optional[Dict[str, Any]]) -> Optional[DateValue]:
    if not raw or not raw.get("start"):
        return None
    return DateValue(start=raw["start"], end=raw.get("end"), time_zone=raw.get("time_zone"))


def _decode_number(raw: Any) -> Optional[float]:
    return float(raw) if raw is not None else None


_DECODERS: Dict[PropertyType, Callable[[Any], Any]] = {
    PropertyType.TITLE: _decode_rich_text,
    PropertyType.RICH_TEXT: _decode_rich_text,
    PropertyType.NUMBER: _decode_number,
    PropertyType.SELECT: _decode_option,
    PropertyType.MULTI_SELECT: lambda raw: [_decode_option(opt) for opt in raw or [] if opt],
    PropertyType.STATUS: _decode_option,
    PropertyType.DATE: _decode_date,
    PropertyType.CHECKBOX: bool,
    PropertyType.URL: lambda raw: raw,
    PropertyType.EMAIL: lambda raw: raw,
    PropertyType.PHONE_NUMBER: lambda raw: raw,
}


def decode_property(payload: Dict[str, Any]) -> PropertyValue:
    """Decode one page property payload, dispatching on its ``type`` tag."""
    type_name = payload.get("type")
    try:
        prop_type = PropertyType(type_name)
    except ValueError:
        raise PropertyDecodeError(f"Unknown property type: {type_name}")

    try:
        value = _DECODERS[prop_type](payload.get(prop_type.value))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise PropertyDecodeError(f"Malformed {type_name} property: {exc}") from exc
    return PropertyValue(prop_type, value)


def decode_properties(payload: Dict[str, Dict[str, Any]]) -> Dict[str, PropertyValue]:
    """Decode a page's property map, skipping types the sync never reads."""
    decoded = {}
    for name, raw in (payload or {}).items():
        try:
            decoded[name] = decode_property(raw)
        except PropertyDecodeError:
            continue
    return decoded


# -- encoding ---------------------------------------------------------------

def _encode_rich_text(parts: Optional[List[RichText]]) -> List[Dict[str, Any]]:
    encoded = []
    for part in parts or []:
        text: Dict[str, Any] = {"content": part.plain_text}
        if part.href:
            text["link"] = {"url": part.href}
        encoded.append({"text": text})
    return encoded


def _encode_option(option: Optional[SelectValue]) -> Optional[Dict[str, Any]]:
    if option is None:
        return None
    return {"name": option.name}


def _encode_date(value: Optional[DateValue]) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    encoded: Dict[str, Any] = {"start": value.start}
    if value.end:
        encoded["end"] = value.end
    if value.time_zone:
        encoded["time_zone"] = value.time_zone
    return encoded


_ENCODERS: Dict[PropertyType, Callable[[Any], Any]] = {
    PropertyType.TITLE: _encode_rich_text,
    PropertyType.RICH_TEXT: _encode_rich_text,
    PropertyType.NUMBER: lambda value: value,
    PropertyType.SELECT: _encode_option,
    PropertyType.MULTI_SELECT: lambda options: [_encode_option(opt) for opt in options or []],
    PropertyType.STATUS: _encode_option,
    PropertyType.DATE: _encode_date,
    PropertyType.CHECKBOX: bool,
    PropertyType.URL: lambda value: value,
    PropertyType.EMAIL: lambda value: value,
    PropertyType.PHONE_NUMBER: lambda value: value,
}


def encode_property(value: PropertyValue) -> Dict[str, Any]:
    """Encode a value in Notion's write shape. Cleared values encode as null."""
    return {value.type.value: _ENCODERS[value.type](value.value)}


def encode_properties(values: Dict[str, PropertyValue]) -> Dict[str, Dict[str, Any]]:
    return {key: encode_property(value) for key, value in values.items()}
