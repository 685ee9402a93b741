"""
Entity records: TaskList and Task

Both records keep a back-reference to the client that loaded or created
them, and expose save()/destroy() which delegate to that client. A record
whose id is None has not been persisted (or has been destroyed).
"""
import time
from dataclasses import dataclass, field
from datetime import date as date_type, datetime
from typing import TYPE_CHECKING, Any, List, Optional, Union

from .exceptions import DetachedEntityError

if TYPE_CHECKING:
    from .client import WunderlistClient


def to_date(value: Union[date_type, datetime, None]) -> Optional[date_type]:
    """Truncate a datetime to its calendar date; dates and None pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def date_to_timestamp(value: Union[date_type, datetime]) -> int:
    """Unix seconds at local midnight of the given calendar date."""
    return int(time.mktime(to_date(value).timetuple()))


def timestamp_to_date(timestamp: Union[int, str]) -> date_type:
    """Local calendar date of a Unix timestamp."""
    return date_type.fromtimestamp(int(timestamp))


@dataclass(eq=False)
class TaskList:
    """A to-do list. Parent of zero or more tasks."""
    name: str = ""
    inbox: bool = False
    shared: bool = False
    id: Optional[int] = None
    client: Optional["WunderlistClient"] = field(default=None, repr=False)
    _tasks: Optional[List["Task"]] = field(default=None, init=False, repr=False)

    @property
    def tasks(self) -> List["Task"]:
        """
        Tasks of this list, fetched on first access and then memoized.

        Unsaved or detached lists have no remote tasks and get an empty
        collection without network I/O.
        """
        if self._tasks is None:
            if self.client is None or self.id is None:
                self._tasks = []
            else:
                self._tasks = self.client.tasks(self)
        return self._tasks

    @property
    def tasks_loaded(self) -> bool:
        return self._tasks is not None

    def reload_tasks(self) -> List["Task"]:
        """Drop the memoized tasks and fetch them again."""
        self._tasks = None
        return self.tasks

    def add_task(self, task: "Task") -> None:
        # An unloaded collection stays unloaded; the next fetch includes the task.
        if self._tasks is not None and task not in self._tasks:
            self._tasks.append(task)

    def create_task(self, name: str, date: Union[date_type, datetime, None] = None) -> Optional["Task"]:
        """Create a task in this list and persist it."""
        task = Task(name=name, date=date, list=self, client=self.client)
        return task.save()

    def save(self) -> Optional["TaskList"]:
        if self.client is None:
            raise DetachedEntityError(self)
        return self.client.save(self)

    def destroy(self) -> Optional["TaskList"]:
        if self.client is None:
            raise DetachedEntityError(self)
        return self.client.destroy(self)


@dataclass(eq=False)
class Task:
    """A single task. Belongs to exactly one TaskList."""
    name: str = ""
    important: bool = False
    done: bool = False
    date: Optional[date_type] = None
    note: str = ""
    id: Optional[int] = None
    list: Optional[TaskList] = field(default=None, repr=False)
    client: Optional["WunderlistClient"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.date = to_date(self.date)
        if self.client is None and self.list is not None:
            self.client = self.list.client

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "date":
            value = to_date(value)
        super().__setattr__(name, value)

    @property
    def list_id(self) -> Optional[int]:
        """Id of the owning list, derived from the list reference."""
        return self.list.id if self.list is not None else None

    @property
    def timestamp(self) -> int:
        """Due date as Unix seconds, 0 when unset."""
        return date_to_timestamp(self.date) if self.date else 0

    def save(self) -> Optional["Task"]:
        if self.client is None:
            raise DetachedEntityError(self)
        return self.client.save(self)

    def destroy(self) -> Optional["Task"]:
        if self.client is None:
            raise DetachedEntityError(self)
        return self.client.destroy(self)
