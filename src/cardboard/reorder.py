"""Apply completed drag outcomes to persisted order state."""

import logging
from typing import List, Optional, Sequence

from .projection import NO_VALUE_KEY, implied_key
from .properties import key_to_value
from .record import Record
from .schema import Property

logger = logging.getLogger(__name__)


def move_column(prop: Property, ordered_keys: Sequence[str]) -> None:
    """Replace the property's custom column order.

    Keys are not checked against the current columns; stale or missing keys
    are reconciled by the next projection. The "No value" key is never
    persisted.
    """
    prop.column_order = [k for k in ordered_keys if k != NO_VALUE_KEY]
    logger.debug("Column order for %s: %s", prop.id, prop.column_order)


def move_record(
    records: List[Record],
    record_id: str,
    group_prop: Optional[Property],
    destination_key: str,
    destination_index: int,
    destination_ids: Sequence[str],
) -> Optional[Record]:
    """Move a record into a column and renumber that column.

    ``destination_ids`` is the destination column's on-screen order after the
    move. If it does not already list the record, the record is inserted at
    ``destination_index``. When the destination differs from the column the
    record's value implies, the grouping value is overwritten (None for the
    "No value" column). Every listed record then gets its index in the
    column as its position. Returns the moved record, or None if unknown.
    """
    by_id = {r.id: r for r in records}
    record = by_id.get(record_id)
    if record is None:
        logger.debug("move_record: unknown record %s", record_id)
        return None

    ids = list(destination_ids)
    if record_id not in ids:
        index = max(0, min(destination_index, len(ids)))
        ids.insert(index, record_id)

    if group_prop is not None:
        current = implied_key(group_prop, record.values.get(group_prop.id))
        if current is None:
            current = NO_VALUE_KEY
        if current != destination_key:
            if destination_key == NO_VALUE_KEY:
                value = None
            else:
                value = key_to_value(destination_key, group_prop.type)
            record.values[group_prop.id] = value
            logger.debug(
                "Record %s regrouped: %r -> %r", record_id, current, destination_key
            )

    position = 0
    for rid in ids:
        target = by_id.get(rid)
        if target is None:
            continue
        target.position = position
        position += 1

    return record
