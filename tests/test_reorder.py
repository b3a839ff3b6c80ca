"""Tests for cardboard.reorder."""

import pytest
from cardboard.projection import NO_VALUE_KEY, project
from cardboard.record import Record
from cardboard.reorder import move_column, move_record
from cardboard.schema import Property


@pytest.fixture
def status():
    return Property(id="s", name="Status", type="select", options=["Todo", "Done"])


@pytest.fixture
def records():
    return [
        Record(id="a", values={"s": "Todo", "x": "keep"}, position=0),
        Record(id="b", values={"s": "Todo"}, position=1),
        Record(id="c", values={"s": "Done"}, position=0),
        Record(id="d", values={"s": None}, position=0),
    ]


class TestMoveColumn:
    def test_replaces_wholesale(self, status):
        status.column_order = ["Todo"]
        move_column(status, ["Done", "Todo"])
        assert status.column_order == ["Done", "Todo"]

    def test_sentinel_not_persisted(self, status):
        move_column(status, ["Done", NO_VALUE_KEY, "Todo"])
        assert status.column_order == ["Done", "Todo"]

    def test_unknown_keys_kept_until_projection(self, status):
        move_column(status, ["Later", "Done"])
        assert status.column_order == ["Later", "Done"]
        columns = project([status], [], "s")
        assert columns.column_order == ["Done", "Todo", NO_VALUE_KEY]


class TestMoveRecord:
    def test_regroups_value(self, status, records):
        move_record(records, "a", status, "Done", 0, ["a", "c"])
        assert records[0].values["s"] == "Done"

    def test_other_values_untouched(self, status, records):
        before = {r.id: dict(r.values) for r in records[1:]}
        move_record(records, "a", status, "Done", 0, ["a", "c"])
        assert records[0].values["x"] == "keep"
        assert {r.id: r.values for r in records[1:]} == before

    def test_to_no_value_sets_none(self, status, records):
        move_record(records, "c", status, NO_VALUE_KEY, 1, ["d", "c"])
        assert records[2].values["s"] is None

    def test_same_column_keeps_value(self, status, records):
        move_record(records, "b", status, "Todo", 0, ["b", "a"])
        assert records[1].values["s"] == "Todo"
        assert records[1].position == 0
        assert records[0].position == 1

    def test_positions_contiguous(self, status, records):
        move_record(records, "d", status, "Todo", 1, ["a", "d", "b"])
        columns = project([status], records, "s")
        todo = columns.get("Todo")
        assert todo.record_ids() == ["a", "d", "b"]
        assert [r.position for r in todo.records] == [0, 1, 2]

    def test_inserts_at_index_when_not_listed(self, status, records):
        move_record(records, "c", status, "Todo", 1, ["a", "b"])
        columns = project([status], records, "s")
        assert columns.get("Todo").record_ids() == ["a", "c", "b"]

    def test_unknown_ids_skipped(self, status, records):
        move_record(records, "a", status, "Todo", 0, ["ghost", "a", "b"])
        assert records[0].position == 0
        assert records[1].position == 1

    def test_unknown_record(self, status, records):
        assert move_record(records, "zzz", status, "Done", 0, ["zzz"]) is None

    def test_without_grouping_only_renumbers(self, records):
        move_record(records, "a", None, "Done", 0, ["b", "a"])
        assert records[0].values["s"] == "Todo"
        assert records[0].position == 1
        assert records[1].position == 0

    def test_number_destination_typed(self, records):
        points = Property(id="n", name="Points", type="number")
        records[0].values["n"] = 1
        move_record(records, "a", points, "3", 0, ["a"])
        assert records[0].values["n"] == 3

    def test_checkbox_destination_typed(self, records):
        flag = Property(id="f", name="Flag", type="checkbox")
        move_record(records, "a", flag, "true", 0, ["a"])
        assert records[0].values["f"] is True

    def test_multi_select_destination(self, records):
        tags = Property(id="t", name="Tags", type="multi-select")
        records[0].values["t"] = ["x", "y"]
        move_record(records, "a", tags, "y", 0, ["a"])
        assert records[0].values["t"] == ["y"]

    def test_multi_select_first_element_is_current_column(self, records):
        tags = Property(id="t", name="Tags", type="multi-select")
        records[0].values["t"] = ["x", "y"]
        move_record(records, "a", tags, "x", 0, ["a"])
        assert records[0].values["t"] == ["x", "y"]
