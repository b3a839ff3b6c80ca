"""Board records (cards)."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .schema import parse_id

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"


@dataclass
class Record:
    """A single card.

    ``values`` maps non-title property ids to a value whose shape follows
    the property's current type. Values are not checked against the type.
    ``position`` orders records within their column.
    """

    id: str
    title: str = DEFAULT_TITLE
    description: str = ""
    values: Dict[str, Any] = field(default_factory=dict)
    position: Any = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "values": dict(self.values),
            "position": self.position,
        }


def parse_record(data: Dict[str, Any]) -> Record:
    """Parse a dict into a Record.

    Values are taken as-is. A missing id is generated and an empty title
    becomes the default title.
    """
    values = data.get("values")
    return Record(
        id=parse_id(data.get("id")),
        title=data.get("title") or DEFAULT_TITLE,
        description=data.get("description") or "",
        values=dict(values) if isinstance(values, dict) else {},
        position=data.get("position", 0),
    )


def parse_records(data: Any) -> List[Record]:
    """Parse a list of record dicts, skipping entries that are not dicts."""
    if not isinstance(data, list):
        return []
    records = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning("Skipping record %d: not an object", i)
            continue
        records.append(parse_record(item))
    return records
