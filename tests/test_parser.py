"""
Tests for response parsing
"""
from datetime import date

import pytest

from conftest import TASKS_FRAGMENT
from wunderlist_api.exceptions import ProtocolError
from wunderlist_api.models import TaskList, date_to_timestamp
from wunderlist_api.parser import decode_json, envelope_data, parse_lists, parse_tasks


class TestDecodeJson:
    """Test JSON envelope decoding"""

    def test_decodes_object(self):
        assert decode_json('{"status": "success"}', "op") == {"status": "success"}

    @pytest.mark.parametrize("body", ["", "<html></html>", None])
    def test_invalid_json(self, body):
        with pytest.raises(ProtocolError) as exc_info:
            decode_json(body, "lists")
        assert exc_info.value.details["operation"] == "lists"

    def test_non_object_rejected(self):
        """Test a JSON array is not accepted as an envelope"""
        with pytest.raises(ProtocolError):
            decode_json("[1, 2]", "op")

    def test_envelope_data(self):
        assert envelope_data({"data": {"1": {}}}, "op") == {"1": {}}

    def test_envelope_without_data(self):
        with pytest.raises(ProtocolError):
            envelope_data({"status": "success"}, "op")


class TestParseLists:
    """Test list collection parsing"""

    def test_flags_only_true_for_one(self):
        """Test inbox/shared are true only for the string "1" """
        lists = parse_lists({
            "10": {"name": "A", "inbox": "1", "shared": "1"},
            "11": {"name": "B", "inbox": "0", "shared": "yes"},
            "12": {"name": "C"},
        })

        assert [(l.id, l.name, l.inbox, l.shared) for l in lists] == [
            (10, "A", True, True),
            (11, "B", False, False),
            (12, "C", False, False),
        ]

    def test_non_mapping_data(self):
        with pytest.raises(ProtocolError):
            parse_lists(["not", "a", "mapping"])

    def test_non_numeric_id(self):
        with pytest.raises(ProtocolError):
            parse_lists({"abc": {"name": "A"}})


class TestParseTasks:
    """Test scraping tasks out of the HTML fragment"""

    def test_extracts_marker_items_in_order(self):
        """Test only li.more items are scraped, in document order"""
        stamp = date_to_timestamp(date(2024, 2, 29))
        owner = TaskList(id=1, name="Inbox")

        tasks = parse_tasks(TASKS_FRAGMENT.format(timestamp=stamp), owner)

        assert len(tasks) == 2
        first, second = tasks
        assert (first.id, first.name, first.important, first.done) == (101, "Buy milk", True, True)
        assert first.date == date(2024, 2, 29)
        assert first.note == "2 litres"
        assert (second.id, second.name, second.important, second.done) == (102, "Call mom", False, False)
        assert second.date is None
        assert second.note == ""
        assert first.list is owner and second.list is owner

    def test_done_requires_class_token(self):
        """Test "done" must be a whole class token"""
        fragment = ('<li class="more undone" id="1"><span class="description">a</span>'
                    '<span class="note"></span></li>')

        assert parse_tasks(fragment)[0].done is False

    def test_empty_fragment(self):
        assert parse_tasks("") == []
        assert parse_tasks(None) == []

    def test_missing_note(self):
        fragment = '<li class="more" id="1"><span class="description">a</span></li>'

        with pytest.raises(ProtocolError) as exc_info:
            parse_tasks(fragment)
        assert exc_info.value.details["selector"] == "span.note"

    def test_missing_description(self):
        fragment = '<li class="more" id="1"><span class="note"></span></li>'

        with pytest.raises(ProtocolError):
            parse_tasks(fragment)

    def test_non_numeric_id(self):
        fragment = ('<li class="more" id="task-1"><span class="description">a</span>'
                    '<span class="note"></span></li>')

        with pytest.raises(ProtocolError):
            parse_tasks(fragment)

    def test_unreadable_timestamp(self):
        fragment = ('<li class="more" id="1"><span class="description">a</span>'
                    '<span class="timestamp" rel="soon"></span><span class="note"></span></li>')

        with pytest.raises(ProtocolError):
            parse_tasks(fragment)

    def test_fragment_must_be_text(self):
        with pytest.raises(ProtocolError):
            parse_tasks({"tasks": []})
