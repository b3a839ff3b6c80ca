"""cardboard: typed records grouped into ordered columns."""

__version__ = "0.1.0"

from .properties import PROPERTY_TYPES, GROUPABLE_TYPES, convert
from .schema import Property, parse_property, parse_schema
from .record import Record, parse_record, parse_records
from .projection import (
    NO_VALUE_KEY,
    Column,
    ColumnSet,
    ViewState,
    project,
)
from .reorder import move_column, move_record
from .exchange import FormatError, validate, export_document
from .store import KeyValueStore, MemoryStore, SqliteStore
from .board import Board
from .config import Config

__all__ = [
    "PROPERTY_TYPES",
    "GROUPABLE_TYPES",
    "convert",
    "Property",
    "parse_property",
    "parse_schema",
    "Record",
    "parse_record",
    "parse_records",
    "NO_VALUE_KEY",
    "Column",
    "ColumnSet",
    "ViewState",
    "project",
    "move_column",
    "move_record",
    "FormatError",
    "validate",
    "export_document",
    "KeyValueStore",
    "MemoryStore",
    "SqliteStore",
    "Board",
    "Config",
]
