"""Project records into ordered columns by a grouping property."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from .properties import MULTI_SELECT, NUMBER, SELECT, to_number, to_text
from .record import Record
from .schema import Property, find_property

NO_VALUE_KEY = "__empty__"
NO_VALUE_LABEL = "No value"


@dataclass
class ViewState:
    """Persisted view settings."""

    group_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"groupBy": self.group_by}


def parse_view_state(data: Any) -> ViewState:
    if not isinstance(data, dict):
        return ViewState()
    return ViewState(group_by=data.get("groupBy") or None)


@dataclass
class Column:
    """A derived bucket of records sharing one grouping key."""

    key: str
    label: str
    records: List[Record] = field(default_factory=list)

    @property
    def is_no_value(self) -> bool:
        return self.key == NO_VALUE_KEY

    def record_ids(self) -> List[str]:
        return [r.id for r in self.records]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "records": [r.to_dict() for r in self.records],
        }


@dataclass
class ColumnSet:
    """Result of a projection: the grouping property and its columns."""

    property: Property
    columns: List[Column] = field(default_factory=list)

    @property
    def column_order(self) -> List[str]:
        return [c.key for c in self.columns]

    def get(self, key: str) -> Optional[Column]:
        for column in self.columns:
            if column.key == key:
                return column
        return None

    def column_of(self, record_id: str) -> Optional[Column]:
        for column in self.columns:
            for record in column.records:
                if record.id == record_id:
                    return column
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "property": self.property.id,
            "columnOrder": self.column_order,
            "columns": [c.to_dict() for c in self.columns],
        }


def implied_key(prop: Property, value: Any) -> Optional[str]:
    """Grouping key a value places its record under, or None if unset.

    Multi-select values group by their first element only.
    """
    if prop.type == MULTI_SELECT:
        if isinstance(value, list) and value and value[0] is not None:
            return to_text(value[0])
        return None
    if value is None:
        return None
    return to_text(value)


def _key_universe(prop: Property, records: List[Record]) -> Set[str]:
    keys = set()
    for record in records:
        value = record.values.get(prop.id)
        if prop.type == MULTI_SELECT:
            if isinstance(value, list):
                keys.update(to_text(v) for v in value if v is not None)
        elif value is not None:
            keys.add(to_text(value))

    # Declared options always get a column, even when empty
    if prop.type == SELECT:
        keys.update(to_text(o) for o in prop.options)

    keys.discard(NO_VALUE_KEY)
    return keys


def _sort_key(prop_type: str):
    if prop_type == NUMBER:
        def numeric(key):
            number = to_number(key)
            if number is None:
                return (1, 0, key)
            return (0, number, key)

        return numeric
    return None


def _ordered_keys(prop: Property, universe: Set[str]) -> List[str]:
    custom = []
    for key in prop.column_order:
        if key in universe and key not in custom:
            custom.append(key)

    rest = sorted(
        (k for k in universe if k not in custom), key=_sort_key(prop.type)
    )
    return custom + rest


def _position(record: Record):
    number = to_number(record.position)
    return number if number is not None else 0


def project(
    schema: List[Property],
    records: List[Record],
    group_by: Optional[str],
) -> Optional[ColumnSet]:
    """Build the ordered columns for ``group_by``.

    Returns None when ``group_by`` is None or names no property. Inputs are
    never mutated. Custom ``column_order`` keys come first, the remaining
    keys follow sorted (numerically for number properties), and the
    "No value" column is always last. Each record lands in exactly one
    column, ordered by ascending position; records whose value has no
    column fall into "No value".
    """
    prop = find_property(schema, group_by)
    if prop is None:
        return None

    keys = _ordered_keys(prop, _key_universe(prop, records))
    columns = [Column(key=k, label=k) for k in keys]
    no_value = Column(key=NO_VALUE_KEY, label=NO_VALUE_LABEL)
    columns.append(no_value)

    by_key = {c.key: c for c in columns}
    for record in records:
        key = implied_key(prop, record.values.get(prop.id))
        by_key.get(key, no_value).records.append(record)

    # sort is stable, so equal positions keep store order
    for column in columns:
        column.records.sort(key=_position)

    return ColumnSet(property=prop, columns=columns)
