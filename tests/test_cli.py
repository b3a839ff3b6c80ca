"""Tests for cardboard CLI."""

import json
import subprocess
import sys
import pytest


def run_cardboard(*args):
    result = subprocess.run(
        [sys.executable, "-m", "cardboard.cli", *args],
        capture_output=True,
        text=True,
    )
    return result


@pytest.fixture
def db(tmp_path):
    path = tmp_path / "board.db"
    result = run_cardboard("init", "--db", str(path))
    assert result.returncode == 0
    return str(path)


class TestCLI:
    def test_version(self):
        result = run_cardboard("--version")
        assert "0.1.0" in result.stdout

    def test_help(self):
        result = run_cardboard("--help")
        assert "add-card" in result.stdout
        assert "move-card" in result.stdout
        assert "import" in result.stdout

    def test_no_command(self):
        result = run_cardboard()
        assert result.returncode == 1

    def test_schema(self, db):
        result = run_cardboard("schema", "--db", db)
        schema = json.loads(result.stdout)
        assert len(schema) == 1
        assert schema[0]["isTitle"] is True

    def test_board_without_grouping(self, db):
        result = run_cardboard("board", "--db", db)
        assert result.returncode == 0
        assert json.loads(result.stdout) is None

    def test_group_and_move(self, db):
        run_cardboard(
            "add-property", "Status", "--type", "select",
            "--option", "Todo", "--option", "Done", "--db", db,
        )
        card = run_cardboard("add-card", "Write tests", "--db", db).stdout.strip()
        assert run_cardboard("set", card, "Status", "Todo", "--db", db).returncode == 0
        assert run_cardboard("group-by", "Status", "--db", db).returncode == 0

        board = json.loads(run_cardboard("board", "--db", db).stdout)
        assert board["columnOrder"] == ["Done", "Todo", "__empty__"]

        result = run_cardboard("move-card", card, "Done", "0", "--db", db)
        assert result.returncode == 0
        board = json.loads(run_cardboard("board", "--db", db).stdout)
        done = board["columns"][0]
        assert [r["id"] for r in done["records"]] == [card]

        run_cardboard("move-column", "Todo", "Done", "--db", db)
        board = json.loads(run_cardboard("board", "--db", db).stdout)
        assert board["columnOrder"] == ["Todo", "Done", "__empty__"]

    def test_group_by_text_rejected(self, db):
        run_cardboard("add-property", "Notes", "--db", db)
        result = run_cardboard("group-by", "Notes", "--db", db)
        assert result.returncode == 1
        assert "cannot be used for grouping" in result.stderr

    def test_delete_title_rejected(self, db):
        result = run_cardboard("delete-property", "Title", "--db", db)
        assert result.returncode == 1
        assert "Error" in result.stderr

    def test_unknown_card(self, db):
        result = run_cardboard("delete-card", "nope", "--db", db)
        assert result.returncode == 1
        assert "Unknown card" in result.stderr

    def test_set_parses_json(self, db):
        run_cardboard("add-property", "Points", "--type", "number", "--db", db)
        card = run_cardboard("add-card", "--db", db).stdout.strip()
        run_cardboard("set", card, "Points", "3", "--db", db)
        record = json.loads(run_cardboard("edit-card", card, "--db", db).stdout)
        assert list(record["values"].values()) == [3]
        assert record["title"] == "Untitled"

    def test_export_import(self, db, tmp_path):
        run_cardboard("add-card", "One", "--db", db)
        out = tmp_path / "export.json"
        result = run_cardboard("export", "--output", str(out), "--db", db)
        assert result.returncode == 0
        assert json.loads(out.read_text())["version"] == "1.0"

        other = str(tmp_path / "other.db")
        result = run_cardboard("import", str(out), "--db", other)
        assert result.returncode == 0
        assert "Imported 1 card" in result.stdout

    def test_import_with_backup(self, db, tmp_path):
        run_cardboard("add-card", "One", "--db", db)
        source = tmp_path / "in.json"
        source.write_text(json.dumps({"schema": [], "records": []}))
        backups = tmp_path / "backups"
        result = run_cardboard(
            "import", str(source), "--backup", "--backup-dir", str(backups), "--db", db
        )
        assert result.returncode == 0
        assert "Imported 0 cards" in result.stdout
        assert len(list(backups.glob("*.json"))) == 1

    def test_import_invalid(self, db, tmp_path):
        source = tmp_path / "in.json"
        source.write_text("{}")
        result = run_cardboard("import", str(source), "--db", db)
        assert result.returncode == 1
        assert "Invalid JSON format" in result.stderr

    def test_import_non_string_options(self, db, tmp_path):
        source = tmp_path / "in.json"
        source.write_text(json.dumps({
            "schema": [{"id": "p", "name": "S", "type": "select", "options": [["a"], {"b": 1}]}],
            "records": [],
        }))
        result = run_cardboard("import", str(source), "--db", db)
        assert result.returncode == 0
        assert "Traceback" not in result.stderr
        assert run_cardboard("group-by", "S", "--db", db).returncode == 0
        board = json.loads(run_cardboard("board", "--db", db).stdout)
        assert board["columnOrder"] == ["a", '{"b": 1}', "__empty__"]

    def test_unknown_card_leaves_db_usable(self, db):
        assert run_cardboard("set", "nope", "Title", "x", "--db", db).returncode == 1
        assert run_cardboard("add-card", "After", "--db", db).returncode == 0

    def test_import_missing_file(self, db, tmp_path):
        result = run_cardboard("import", str(tmp_path / "nope.json"), "--db", db)
        assert result.returncode == 1

    def test_theme_toggle(self, db):
        assert run_cardboard("theme", "--db", db).stdout.strip() == "dark"
        assert run_cardboard("theme", "light", "--db", db).stdout.strip() == "light"

    def test_options(self, db):
        run_cardboard("add-property", "Status", "--type", "select", "--option", "A", "--db", db)
        assert run_cardboard("add-option", "Status", "B", "--db", db).returncode == 0
        assert run_cardboard("option-color", "Status", "A", "red", "--db", db).returncode == 0
        assert run_cardboard("rename-option", "Status", "A", "Alpha", "--db", db).returncode == 0
        assert run_cardboard("remove-option", "Status", "B", "--db", db).returncode == 0
        schema = json.loads(run_cardboard("schema", "--db", db).stdout)
        assert schema[1]["options"] == ["Alpha"]
        assert schema[1]["optionColors"] == {"Alpha": "red"}

    def test_config_file(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        db_path = tmp_path / "from-config.db"
        cfg.write_text(f"db_path: {db_path}\n")
        result = run_cardboard("init", "--config", str(cfg))
        assert result.returncode == 0
        assert db_path.exists()
