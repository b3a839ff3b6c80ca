"""Board state: schema, records and view settings with write-through storage."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from . import exchange, reorder
from .projection import ColumnSet, ViewState, parse_view_state, project
from .properties import GROUPABLE_TYPES, TEXT, convert, is_select_type, to_number
from .record import DEFAULT_TITLE, Record, parse_records
from .schema import (
    Property,
    create_title_property,
    ensure_title,
    find_property,
    new_id,
    parse_schema,
    unique,
)
from .store import (
    RECORDS_KEY,
    SCHEMA_KEY,
    THEME_KEY,
    VIEW_STATE_KEY,
    KeyValueStore,
    MemoryStore,
)

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")

PROPERTY_FIELDS = {
    "name",
    "type",
    "visible",
    "order",
    "options",
    "option_colors",
    "column_order",
}
RECORD_FIELDS = {"title", "description", "values", "position"}


class Board:
    """The single in-process board state.

    Every mutating method writes the full state back to ``store`` before
    returning. Unknown ids make mutations no-ops.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, default_theme: str = "light"):
        self.store = store if store is not None else MemoryStore()
        self.default_theme = default_theme
        self.schema: List[Property] = []
        self.records: List[Record] = []
        self.view_state = ViewState()
        self.theme = default_theme
        self.load()

    # -- storage --

    def _load_json(self, key: str) -> Any:
        text = self.store.get(key)
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable %s slot", key)
            return None

    def load(self) -> None:
        """Read all slots, falling back to defaults for absent ones."""
        schema = self._load_json(SCHEMA_KEY)
        if isinstance(schema, list):
            self.schema = ensure_title(parse_schema(schema))
        else:
            self.schema = [create_title_property()]
        self.records = parse_records(self._load_json(RECORDS_KEY) or [])
        self.view_state = parse_view_state(self._load_json(VIEW_STATE_KEY))
        theme = self.store.get(THEME_KEY)
        self.theme = theme if theme in THEMES else self.default_theme

    def save(self) -> None:
        self.store.set(SCHEMA_KEY, json.dumps([p.to_dict() for p in self.schema]))
        self.store.set(RECORDS_KEY, json.dumps([r.to_dict() for r in self.records]))
        self.store.set(VIEW_STATE_KEY, json.dumps(self.view_state.to_dict()))
        self.store.set(THEME_KEY, self.theme)

    # -- properties --

    @property
    def title_property(self) -> Property:
        for prop in self.schema:
            if prop.is_title:
                return prop
        raise LookupError("schema has no title property")

    def get_property(self, property_id: str) -> Optional[Property]:
        return find_property(self.schema, property_id)

    def add_property(
        self, name: str, type: str = TEXT, options: Optional[Sequence[str]] = None
    ) -> Property:
        """Append a property and give every record an unset value for it."""
        prop = Property(
            id=new_id(),
            name=name,
            type=type,
            order=len(self.schema),
            options=unique(options or []) if is_select_type(type) else [],
        )
        self.schema.append(prop)
        for record in self.records:
            record.values[prop.id] = None
        self.save()
        logger.debug("Added property %s (%s)", prop.name, prop.type)
        return prop

    def delete_property(self, property_id: str) -> bool:
        """Remove a property and its value from every record.

        The title property cannot be deleted.
        """
        prop = self.get_property(property_id)
        if prop is None:
            logger.debug("delete_property: unknown property %s", property_id)
            return False
        if prop.is_title:
            return False
        self.schema = [p for p in self.schema if p.id != property_id]
        for record in self.records:
            record.values.pop(property_id, None)
        if self.view_state.group_by == property_id:
            self.view_state.group_by = None
        self.save()
        logger.debug("Deleted property %s", prop.name)
        return True

    def update_property(self, property_id: str, **updates) -> Optional[Property]:
        """Replace the given fields of a property.

        A type change converts every record's value first. Fields replace
        wholesale. The title property keeps its type.
        """
        prop = self.get_property(property_id)
        if prop is None:
            logger.debug("update_property: unknown property %s", property_id)
            return None
        unknown = set(updates) - PROPERTY_FIELDS
        if unknown:
            raise ValueError(f"Unknown property fields: {', '.join(sorted(unknown))}")

        new_type = updates.get("type")
        if prop.is_title and new_type is not None and new_type != prop.type:
            logger.debug("Ignoring type change on title property")
            updates.pop("type")
        elif new_type is not None and new_type != prop.type:
            self._convert_values(prop.id, prop.type, new_type)

        if "options" in updates:
            updates["options"] = unique(updates["options"] or [])
        for name, value in updates.items():
            setattr(prop, name, value)
        self.save()
        return prop

    def _convert_values(self, property_id: str, old_type: str, new_type: str) -> None:
        for record in self.records:
            value = record.values.get(property_id)
            if value is None:
                continue
            record.values[property_id] = convert(value, old_type, new_type)
        logger.debug("Converted %s values: %s -> %s", property_id, old_type, new_type)

    def get_groupable_properties(self) -> List[Property]:
        return [
            p for p in self.schema if not p.is_title and p.type in GROUPABLE_TYPES
        ]

    def visible_properties(self) -> List[Property]:
        """Visible non-title properties by ``order``.

        Numeric strings sort as numbers; anything else sorts as 0.
        """
        props = [p for p in self.schema if p.visible and not p.is_title]
        return sorted(props, key=_order_key)

    def set_visibility(self, property_id: str, visible: bool) -> bool:
        prop = self.get_property(property_id)
        if prop is None:
            logger.debug("set_visibility: unknown property %s", property_id)
            return False
        prop.visible = visible
        self.save()
        return True

    def hide_all(self) -> None:
        for prop in self.schema:
            if not prop.is_title:
                prop.visible = False
        self.save()

    def show_all(self) -> None:
        for prop in self.schema:
            prop.visible = True
        self.save()

    # -- options --

    def _select_property(self, property_id: str) -> Optional[Property]:
        prop = self.get_property(property_id)
        if prop is None or not prop.is_select:
            return None
        return prop

    def add_option(self, property_id: str, option: str) -> bool:
        prop = self._select_property(property_id)
        if prop is None or not option or option in prop.options:
            return False
        prop.options.append(option)
        self.save()
        return True

    def rename_option(self, property_id: str, old: str, new: str) -> bool:
        """Rename an option in place, carrying its color along."""
        prop = self._select_property(property_id)
        if prop is None or old not in prop.options or not new:
            return False
        if new in prop.options and new != old:
            return False
        prop.options[prop.options.index(old)] = new
        if old in prop.option_colors:
            prop.option_colors[new] = prop.option_colors.pop(old)
        self.save()
        return True

    def remove_option(self, property_id: str, option: str) -> bool:
        prop = self._select_property(property_id)
        if prop is None or option not in prop.options:
            return False
        prop.options.remove(option)
        prop.option_colors.pop(option, None)
        self.save()
        return True

    def set_option_color(self, property_id: str, option: str, color: str) -> bool:
        prop = self._select_property(property_id)
        if prop is None:
            return False
        prop.option_colors[option] = color
        self.save()
        return True

    # -- records --

    def get_record(self, record_id: str) -> Optional[Record]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def _next_position(self) -> int:
        positions = [to_number(r.position) for r in self.records]
        positions = [p for p in positions if p is not None]
        return int(max(positions)) + 1 if positions else 0

    def create_record(
        self, title: str = DEFAULT_TITLE, description: str = "", position: Optional[int] = None
    ) -> Record:
        """Add a record with an unset value for every non-title property.

        Without an explicit position the record sorts after every
        existing record, so nothing needs renumbering.
        """
        record = Record(
            id=new_id(),
            title=title or DEFAULT_TITLE,
            description=description,
            values={p.id: None for p in self.schema if not p.is_title},
            position=self._next_position() if position is None else position,
        )
        self.records.append(record)
        self.save()
        logger.debug("Created record %s", record.id)
        return record

    def update_record(self, record_id: str, **updates) -> Optional[Record]:
        record = self.get_record(record_id)
        if record is None:
            logger.debug("update_record: unknown record %s", record_id)
            return None
        unknown = set(updates) - RECORD_FIELDS
        if unknown:
            raise ValueError(f"Unknown record fields: {', '.join(sorted(unknown))}")
        if "title" in updates:
            updates["title"] = updates["title"] or DEFAULT_TITLE
        for name, value in updates.items():
            setattr(record, name, value)
        self.save()
        return record

    def delete_record(self, record_id: str) -> bool:
        before = len(self.records)
        self.records = [r for r in self.records if r.id != record_id]
        if len(self.records) == before:
            logger.debug("delete_record: unknown record %s", record_id)
            return False
        self.save()
        return True

    def set_property_value(self, record_id: str, property_id: str, value: Any) -> bool:
        """Store a value as given; it is not checked against the property type."""
        record = self.get_record(record_id)
        if record is None:
            logger.debug("set_property_value: unknown record %s", record_id)
            return False
        record.values[property_id] = value
        self.save()
        return True

    # -- view --

    def set_group_by(self, property_id: Optional[str]) -> None:
        self.view_state.group_by = property_id or None
        self.save()

    @property
    def group_property(self) -> Optional[Property]:
        return self.get_property(self.view_state.group_by)

    def columns(self) -> Optional[ColumnSet]:
        return project(self.schema, self.records, self.view_state.group_by)

    def move_column(self, property_id: str, ordered_keys: Sequence[str]) -> bool:
        prop = self.get_property(property_id)
        if prop is None:
            logger.debug("move_column: unknown property %s", property_id)
            return False
        reorder.move_column(prop, ordered_keys)
        self.save()
        return True

    def move_record(
        self,
        record_id: str,
        destination_key: str,
        destination_index: int,
        destination_ids: Sequence[str],
    ) -> Optional[Record]:
        record = reorder.move_record(
            self.records,
            record_id,
            self.group_property,
            destination_key,
            destination_index,
            destination_ids,
        )
        if record is not None:
            self.save()
        return record

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self.theme = theme
        self.save()

    def toggle_theme(self) -> str:
        self.set_theme("dark" if self.theme == "light" else "light")
        return self.theme

    # -- import/export --

    def export_document(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return exchange.export_document(self.schema, self.records, self.view_state, now)

    def export_json(self) -> str:
        return exchange.dumps(self.export_document())

    def export_file(self, path: Union[str, Path]) -> Path:
        return exchange.save_file(self.export_document(), path)

    def import_document(self, doc: Any) -> int:
        """Replace schema, records and view state with ``doc``.

        Raises FormatError, leaving state untouched, if ``doc`` lacks
        schema or records. Returns the number of records imported.
        """
        schema, records, view_state = exchange.parse_document(doc)
        self.schema = schema
        self.records = records
        self.view_state = view_state
        self.save()
        logger.info("Imported %d records", len(records))
        return len(records)

    def import_json(self, text: str) -> int:
        return self.import_document(exchange.loads(text))

    def import_file(
        self, path: Union[str, Path], backup_dir: Optional[Union[str, Path]] = None,
        backup_prefix: str = "cardboard-backup",
    ) -> int:
        """Import a file, optionally exporting current state to ``backup_dir`` first.

        The backup is only written once the file has validated.
        """
        doc = exchange.load_file(path)
        if backup_dir is not None:
            backup = Path(backup_dir) / exchange.backup_filename(backup_prefix)
            self.export_file(backup)
        return self.import_document(doc)

    def close(self) -> None:
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def _order_key(prop: Property) -> float:
    order = to_number(prop.order)
    return order if order is not None else 0
