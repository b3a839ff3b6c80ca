"""JSON import/export documents."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .projection import ViewState, parse_view_state
from .record import Record, parse_records
from .schema import Property, ensure_title, parse_schema

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"
REQUIRED_FIELDS = ("schema", "records")


class FormatError(ValueError):
    """Import document lacks the fields needed to replace board state."""


def validate(doc: Any) -> bool:
    """Check that ``doc`` has ``schema`` and ``records``.

    Their contents are not inspected.
    """
    if not isinstance(doc, dict):
        raise FormatError("Invalid JSON format: expected an object")
    missing = [name for name in REQUIRED_FIELDS if doc.get(name) is None]
    if missing:
        raise FormatError(
            "Invalid JSON format: missing " + " and ".join(missing)
        )
    return True


def _iso_timestamp(now: datetime) -> str:
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def export_document(
    schema: List[Property],
    records: List[Record],
    view_state: ViewState,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build an export document stamped with format version and time."""
    if now is None:
        now = datetime.now(timezone.utc)
    return {
        "version": FORMAT_VERSION,
        "schema": [p.to_dict() for p in schema],
        "records": [r.to_dict() for r in records],
        "viewState": view_state.to_dict(),
        "exportedAt": _iso_timestamp(now),
    }


def parse_document(doc: Any) -> Tuple[List[Property], List[Record], ViewState]:
    """Validate a document and parse it into board state.

    ``viewState`` defaults to no grouping. The parsed schema always holds
    exactly one title property.
    """
    validate(doc)
    schema = ensure_title(parse_schema(doc["schema"]))
    records = parse_records(doc["records"])
    view_state = parse_view_state(doc.get("viewState"))
    return schema, records, view_state


def dumps(doc: Dict[str, Any]) -> str:
    return json.dumps(doc, indent=2, ensure_ascii=False)


def loads(text: str) -> Dict[str, Any]:
    """Parse and validate import text."""
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"Invalid JSON: {e}") from None
    validate(doc)
    return doc


def load_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read and validate an import file."""
    path = Path(path)
    doc = loads(path.read_text(encoding="utf-8"))
    logger.info("Loaded %s", path)
    return doc


def save_file(doc: Dict[str, Any], path: Union[str, Path]) -> Path:
    """Write an export document to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(doc) + "\n", encoding="utf-8")
    logger.info("Exported %d records to %s", len(doc.get("records", [])), path)
    return path


def backup_filename(prefix: str, now: Optional[datetime] = None) -> str:
    """File name like ``<prefix>-2024-01-15-09-30.json``."""
    if now is None:
        now = datetime.now()
    return f"{prefix}-{now.strftime('%Y-%m-%d-%H-%M')}.json"
