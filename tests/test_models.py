"""
Tests for entity records
"""
from datetime import date, datetime
from unittest.mock import Mock

import pytest

from wunderlist_api import DetachedEntityError, Task, TaskList
from wunderlist_api.models import date_to_timestamp, timestamp_to_date, to_date


class TestDates:
    """Test due date normalization"""

    def test_datetime_truncated_on_construction(self):
        task = Task(name="x", date=datetime(2024, 4, 1, 18, 30))
        assert task.date == date(2024, 4, 1)
        assert not isinstance(task.date, datetime)

    def test_datetime_truncated_on_assignment(self):
        task = Task(name="x")
        task.date = datetime(2024, 4, 1, 0, 5)
        assert task.date == date(2024, 4, 1)

    def test_timestamp_round_trip(self):
        for moment in (datetime(2023, 12, 31, 0, 0), datetime(2023, 12, 31, 23, 59)):
            assert timestamp_to_date(date_to_timestamp(moment)) == date(2023, 12, 31)

    def test_timestamp_zero_without_date(self):
        assert Task(name="x").timestamp == 0

    def test_to_date_passthrough(self):
        assert to_date(None) is None
        assert to_date(date(2024, 1, 1)) == date(2024, 1, 1)


class TestTaskList:
    """Test TaskList behaviour"""

    def test_tasks_loaded_lazily_once(self):
        client = Mock()
        client.tasks.return_value = ["t1"]
        task_list = TaskList(id=4, name="Work", client=client)

        assert task_list.tasks_loaded is False
        assert task_list.tasks == ["t1"]
        assert task_list.tasks == ["t1"]
        client.tasks.assert_called_once_with(task_list)

    def test_reload_tasks_refetches(self):
        client = Mock()
        client.tasks.side_effect = [["old"], ["new"]]
        task_list = TaskList(id=4, client=client)
        task_list.tasks

        assert task_list.reload_tasks() == ["new"]
        assert client.tasks.call_count == 2

    def test_unsaved_list_has_empty_tasks(self):
        client = Mock()
        task_list = TaskList(name="Draft", client=client)

        assert task_list.tasks == []
        client.tasks.assert_not_called()

    def test_save_and_destroy_delegate(self):
        client = Mock()
        task_list = TaskList(name="A", client=client)

        task_list.save()
        task_list.destroy()

        client.save.assert_called_once_with(task_list)
        client.destroy.assert_called_once_with(task_list)

    def test_detached_save_raises(self):
        with pytest.raises(DetachedEntityError):
            TaskList(name="A").save()
        with pytest.raises(DetachedEntityError):
            TaskList(name="A").destroy()

    def test_add_task_ignores_duplicates(self):
        task_list = TaskList(name="A")
        task = Task(name="x", list=task_list)
        task_list.tasks

        task_list.add_task(task)
        task_list.add_task(task)

        assert task_list.tasks == [task]


class TestTask:
    """Test Task behaviour"""

    def test_list_id_derived_from_list(self):
        task_list = TaskList(id=7)
        task = Task(name="x", list=task_list)

        assert task.list_id == 7
        task_list.id = None
        assert task.list_id is None

    def test_list_id_without_list(self):
        assert Task(name="x").list_id is None

    def test_client_inherited_from_list(self):
        client = Mock()
        task = Task(name="x", list=TaskList(id=1, client=client))

        task.save()

        client.save.assert_called_once_with(task)

    def test_detached_task_raises(self):
        with pytest.raises(DetachedEntityError):
            Task(name="x").destroy()

    def test_identity_equality(self):
        assert Task(name="x") != Task(name="x")
