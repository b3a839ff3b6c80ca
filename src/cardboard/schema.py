"""Property definitions for a board schema."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .properties import TEXT, is_select_type, to_text

TITLE_NAME = "Title"


def new_id() -> str:
    return uuid.uuid4().hex


def unique(items: Iterable[Any]) -> List[Any]:
    """Drop repeated entries, keeping first occurrences in order.

    Entries compare by their string form, so unhashable values are allowed.
    """
    seen = set()
    result = []
    for item in items:
        key = to_text(item)
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result


def parse_id(value: Any) -> str:
    """Stored id as a string, generating one when missing."""
    if value is None or value == "":
        return new_id()
    return to_text(value)


@dataclass
class Property:
    """A named, typed field shared by all records.

    ``options``, ``option_colors`` and ``column_order`` only carry meaning
    for select and multi-select properties. ``option_colors`` may hold
    colors for options that no longer exist.
    """

    id: str
    name: str
    type: str = TEXT
    visible: bool = True
    order: int = 0
    is_title: bool = False
    options: List[str] = field(default_factory=list)
    option_colors: Dict[str, str] = field(default_factory=dict)
    column_order: List[str] = field(default_factory=list)

    @property
    def is_select(self) -> bool:
        return is_select_type(self.type)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase document shape used on disk."""
        d = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "visible": self.visible,
            "order": self.order,
        }
        if self.is_title:
            d["isTitle"] = True
            return d
        d["options"] = list(self.options)
        d["optionColors"] = dict(self.option_colors)
        d["columnOrder"] = list(self.column_order)
        return d


def create_title_property() -> Property:
    return Property(id=new_id(), name=TITLE_NAME, type=TEXT, order=0, is_title=True)


def parse_property(data: Dict[str, Any]) -> Property:
    """Parse a dict into a Property.

    Missing fields take their defaults and a missing id is generated.
    Options are de-duplicated; column order entries are coerced to strings.
    """
    options = data.get("options")
    colors = data.get("optionColors")
    column_order = data.get("columnOrder")

    return Property(
        id=parse_id(data.get("id")),
        name=data.get("name") or "",
        type=data.get("type") or TEXT,
        visible=bool(data.get("visible", True)),
        order=data.get("order", 0),
        is_title=bool(data.get("isTitle", False)),
        options=unique(options) if isinstance(options, list) else [],
        option_colors=dict(colors) if isinstance(colors, dict) else {},
        column_order=[to_text(k) for k in column_order]
        if isinstance(column_order, list)
        else [],
    )


def parse_schema(data: Any) -> List[Property]:
    """Parse a list of property dicts, skipping entries that are not dicts."""
    if not isinstance(data, list):
        return []
    return [parse_property(item) for item in data if isinstance(item, dict)]


def ensure_title(schema: List[Property]) -> List[Property]:
    """Return a schema holding exactly one title property.

    The first flagged property stays the title; a schema with none gets a
    fresh title property prepended.
    """
    found = False
    for prop in schema:
        if prop.is_title:
            if found:
                prop.is_title = False
            found = True
    if not found:
        return [create_title_property()] + schema
    return schema


def find_property(schema: List[Property], property_id: Optional[str]) -> Optional[Property]:
    if property_id is None:
        return None
    for prop in schema:
        if prop.id == property_id:
            return prop
    return None
