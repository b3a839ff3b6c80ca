"""cardboard CLI."""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .board import THEMES, Board
from .config import Config
from .exchange import backup_filename
from .projection import NO_VALUE_KEY
from .properties import PROPERTY_TYPES
from .store import SqliteStore


def _parse_value(text):
    """Parse a command-line value as JSON, falling back to the raw string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _pluralize(count, singular, plural=None):
    if count == 1:
        return singular
    return plural or singular + "s"


def _open(args):
    return Board(SqliteStore(args.db), default_theme=args.config.theme)


def _resolve_property(board, ref):
    """Find a property by id, then by name."""
    prop = board.get_property(ref)
    if prop is not None:
        return prop
    for candidate in board.schema:
        if candidate.name == ref:
            return candidate
    raise ValueError(f"Unknown property: {ref}")


def _require_record(board, record_id):
    record = board.get_record(record_id)
    if record is None:
        raise ValueError(f"Unknown card: {record_id}")
    return record


def _print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_init(args):
    """Create the database with a default schema."""
    with _open(args) as board:
        board.save()
    print(f"Initialized {args.db}")


def cmd_schema(args):
    """Print the schema."""
    with _open(args) as board:
        _print_json([p.to_dict() for p in board.schema])


def cmd_add_property(args):
    with _open(args) as board:
        prop = board.add_property(args.name, args.type, args.option)
    print(prop.id)


def cmd_delete_property(args):
    with _open(args) as board:
        prop = _resolve_property(board, args.property)
        if prop.is_title:
            raise ValueError("The title property cannot be deleted")
        board.delete_property(prop.id)
    print(f"Deleted property {prop.name}")


def cmd_update_property(args):
    with _open(args) as board:
        prop = _resolve_property(board, args.property)
        updates = {}
        if args.name is not None:
            updates["name"] = args.name
        if args.type is not None:
            updates["type"] = args.type
        if args.option is not None:
            updates["options"] = args.option
        board.update_property(prop.id, **updates)
    _print_json(prop.to_dict())


def cmd_add_option(args):
    with _open(args) as board:
        prop = _resolve_property(board, args.property)
        if not board.add_option(prop.id, args.option):
            raise ValueError(f"Cannot add option '{args.option}' to {prop.name}")


def cmd_rename_option(args):
    with _open(args) as board:
        prop = _resolve_property(board, args.property)
        if not board.rename_option(prop.id, args.old, args.new):
            raise ValueError(f"Cannot rename option '{args.old}' on {prop.name}")


def cmd_remove_option(args):
    with _open(args) as board:
        prop = _resolve_property(board, args.property)
        if not board.remove_option(prop.id, args.option):
            raise ValueError(f"No option '{args.option}' on {prop.name}")


def cmd_option_color(args):
    with _open(args) as board:
        prop = _resolve_property(board, args.property)
        if not board.set_option_color(prop.id, args.option, args.color):
            raise ValueError(f"{prop.name} has no options")


def _set_visibility(args, visible):
    if not args.all and not args.property:
        raise ValueError("Give a property or --all")
    with _open(args) as board:
        if args.all:
            if visible:
                board.show_all()
            else:
                board.hide_all()
        else:
            prop = _resolve_property(board, args.property)
            board.set_visibility(prop.id, visible)


def cmd_show(args):
    _set_visibility(args, True)


def cmd_hide(args):
    _set_visibility(args, False)


def cmd_add_card(args):
    with _open(args) as board:
        record = board.create_record(args.title, description=args.description)
    print(record.id)


def cmd_edit_card(args):
    with _open(args) as board:
        _require_record(board, args.card)
        updates = {}
        if args.title is not None:
            updates["title"] = args.title
        if args.description is not None:
            updates["description"] = args.description
        record = board.update_record(args.card, **updates)
    _print_json(record.to_dict())


def cmd_delete_card(args):
    with _open(args) as board:
        _require_record(board, args.card)
        board.delete_record(args.card)


def cmd_set(args):
    """Set a card's value for a property."""
    with _open(args) as board:
        _require_record(board, args.card)
        prop = _resolve_property(board, args.property)
        if prop.is_title:
            board.update_record(args.card, title=args.value)
        else:
            board.set_property_value(args.card, prop.id, _parse_value(args.value))


def cmd_group_by(args):
    with _open(args) as board:
        if args.property is None:
            board.set_group_by(None)
            return
        prop = _resolve_property(board, args.property)
        if prop not in board.get_groupable_properties():
            raise ValueError(f"{prop.name} ({prop.type}) cannot be used for grouping")
        board.set_group_by(prop.id)


def cmd_board(args):
    """Print the current columns as JSON."""
    with _open(args) as board:
        columns = board.columns()
    _print_json(columns.to_dict() if columns is not None else None)


def cmd_move_card(args):
    """Move a card into a column at an index."""
    with _open(args) as board:
        _require_record(board, args.card)
        columns = board.columns()
        if columns is None:
            raise ValueError("No grouping property selected")
        column = columns.get(args.column)
        ids = column.record_ids() if column is not None else []
        ids = [rid for rid in ids if rid != args.card]
        index = max(0, min(args.index, len(ids)))
        ids.insert(index, args.card)
        board.move_record(args.card, args.column, index, ids)


def cmd_move_column(args):
    """Set the custom column order for the grouping property."""
    with _open(args) as board:
        prop = board.group_property
        if prop is None:
            raise ValueError("No grouping property selected")
        board.move_column(prop.id, args.keys)


def cmd_export(args):
    with _open(args) as board:
        output = args.output or backup_filename("cardboard")
        path = board.export_file(output)
    print(f"Exported to {path}")


def cmd_import(args):
    backup_dir = Path(args.backup_dir) if args.backup else None
    with _open(args) as board:
        count = board.import_file(
            args.input, backup_dir=backup_dir, backup_prefix=args.config.backup_prefix
        )
    print(f"Imported {count} {_pluralize(count, 'card')}")


def cmd_theme(args):
    with _open(args) as board:
        if args.theme is None:
            theme = board.toggle_theme()
        else:
            board.set_theme(args.theme)
            theme = args.theme
    print(theme)


def main(argv=None):
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--db", help="SQLite database path")
    common.add_argument("--config", help="YAML config file")
    common.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output"
    )

    parser = argparse.ArgumentParser(
        prog="cardboard",
        description="Typed records grouped into ordered columns.",
    )
    parser.add_argument(
        "--version", action="version", version=f"cardboard {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    def add(name, func, help_text):
        p = subparsers.add_parser(name, help=help_text, parents=[common])
        p.set_defaults(func=func)
        return p

    add("init", cmd_init, "Create an empty board")
    add("schema", cmd_schema, "Print the schema")

    p = add("add-property", cmd_add_property, "Add a property")
    p.add_argument("name", help="Property name")
    p.add_argument("--type", default="text", choices=PROPERTY_TYPES)
    p.add_argument(
        "--option", action="append", default=[], help="Option (repeatable)"
    )

    p = add("delete-property", cmd_delete_property, "Delete a property")
    p.add_argument("property", help="Property id or name")

    p = add("update-property", cmd_update_property, "Rename or retype a property")
    p.add_argument("property", help="Property id or name")
    p.add_argument("--name")
    p.add_argument("--type", choices=PROPERTY_TYPES)
    p.add_argument(
        "--option", action="append", help="Replace options (repeatable)"
    )

    p = add("add-option", cmd_add_option, "Add an option to a select property")
    p.add_argument("property")
    p.add_argument("option")

    p = add("rename-option", cmd_rename_option, "Rename an option")
    p.add_argument("property")
    p.add_argument("old")
    p.add_argument("new")

    p = add("remove-option", cmd_remove_option, "Remove an option")
    p.add_argument("property")
    p.add_argument("option")

    p = add("option-color", cmd_option_color, "Set an option's color")
    p.add_argument("property")
    p.add_argument("option")
    p.add_argument("color")

    for name, func in (("show", cmd_show), ("hide", cmd_hide)):
        p = add(name, func, f"{name.capitalize()} a property on cards")
        p.add_argument("property", nargs="?")
        p.add_argument("--all", action="store_true")

    p = add("add-card", cmd_add_card, "Create a card")
    p.add_argument("title", nargs="?", default="")
    p.add_argument("--description", default="")

    p = add("edit-card", cmd_edit_card, "Edit a card's title or description")
    p.add_argument("card", help="Card id")
    p.add_argument("--title")
    p.add_argument("--description")

    p = add("delete-card", cmd_delete_card, "Delete a card")
    p.add_argument("card", help="Card id")

    p = add("set", cmd_set, "Set a card's property value")
    p.add_argument("card", help="Card id")
    p.add_argument("property", help="Property id or name")
    p.add_argument("value", help="Value (parsed as JSON when possible)")

    p = add("group-by", cmd_group_by, "Choose the grouping property")
    p.add_argument("property", nargs="?", help="Omit to clear grouping")

    add("board", cmd_board, "Print columns as JSON")

    p = add("move-card", cmd_move_card, "Move a card to a column")
    p.add_argument("card", help="Card id")
    p.add_argument("column", help=f"Column key ({NO_VALUE_KEY} for no value)")
    p.add_argument("index", type=int, help="Index within the column")

    p = add("move-column", cmd_move_column, "Reorder columns")
    p.add_argument("keys", nargs="*", help="Column keys in order")

    p = add("export", cmd_export, "Export the board to JSON")
    p.add_argument("--output", help="Output file")

    p = add("import", cmd_import, "Replace the board from JSON")
    p.add_argument("input", help="JSON file")
    p.add_argument(
        "--backup", action="store_true", help="Export current board first"
    )
    p.add_argument("--backup-dir", default=".", help="Where to write the backup")

    p = add("theme", cmd_theme, "Set or toggle the theme")
    p.add_argument("theme", nargs="?", choices=THEMES)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config.load(args.config)
    args.config = config
    if args.db is None:
        args.db = config.db_path
    level = logging.DEBUG if args.verbose else getattr(
        logging, str(config.log_level).upper(), logging.WARNING
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        args.func(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except UnicodeDecodeError:
        print("Error: File is not valid UTF-8 text (is it a binary file?)", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
