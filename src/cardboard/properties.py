"""Property types and cross-type value conversion."""

import json
import math
import re
from datetime import datetime
from typing import Any, List, Optional

TEXT = "text"
NUMBER = "number"
DATE = "date"
CHECKBOX = "checkbox"
SELECT = "select"
MULTI_SELECT = "multi-select"

PROPERTY_TYPES = (TEXT, NUMBER, DATE, CHECKBOX, SELECT, MULTI_SELECT)

# Types with a finite or orderable value space; text and date are never
# offered as grouping keys.
GROUPABLE_TYPES = (SELECT, MULTI_SELECT, CHECKBOX, NUMBER)

DATE_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})")


def is_select_type(prop_type: str) -> bool:
    return prop_type in (SELECT, MULTI_SELECT)


def to_text(value: Any) -> str:
    """String form of a value.

    Used both for conversion to ``text`` and for grouping keys, so a
    number 5 and a number 5.0 produce the same key ``"5"``.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def to_number(value: Any) -> Optional[Any]:
    """Coerce to int or float; None when not a valid finite number."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if not isinstance(value, str):
        return None

    s = value.strip()
    # float() accepts digit separators and "nan"/"inf"; neither is a number here
    if not s or "_" in s:
        return None
    try:
        return int(s)
    except ValueError:
        pass
    try:
        number = float(s)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def is_date(value: Any) -> bool:
    """True if value starts with a real calendar date in YYYY-MM-DD form."""
    if not isinstance(value, str):
        return False
    match = DATE_PATTERN.match(value)
    if not match:
        return False
    try:
        datetime.strptime(match.group(1), "%Y-%m-%d")
    except ValueError:
        return False
    return True


def _to_multi(value: Any) -> List[Any]:
    if isinstance(value, list):
        return list(value)
    if isinstance(value, str):
        return [value]
    return []


def convert(value: Any, from_type: str, to_type: str) -> Any:
    """Convert a stored value to the shape of ``to_type``.

    None passes through untouched. Values that cannot be represented in the
    target type become None (or an empty list for multi-select); the loss
    is silent. ``from_type`` is accepted for symmetry with the type change
    that triggers the conversion; the rules depend only on the target.
    Checkbox uses Python truthiness, so ``[]``, ``{}``, ``0`` and ``""``
    become False and any other value becomes True.
    """
    if value is None:
        return None

    if to_type == NUMBER:
        return to_number(value)
    if to_type == TEXT:
        return to_text(value)
    if to_type == SELECT:
        return value if isinstance(value, str) else None
    if to_type == MULTI_SELECT:
        return _to_multi(value)
    if to_type == CHECKBOX:
        return bool(value)
    if to_type == DATE:
        return value if is_date(value) else None
    return None


def key_to_value(key: str, prop_type: str) -> Any:
    """Typed value whose grouping key is ``key``.

    Inverse of ``to_text`` for the column a record is dropped into. Keys
    that do not parse for the type are stored as the raw string.
    """
    if prop_type == NUMBER:
        number = to_number(key)
        return key if number is None else number
    if prop_type == CHECKBOX:
        if key in ("true", "false"):
            return key == "true"
        return key
    if prop_type == MULTI_SELECT:
        return [key]
    return key
