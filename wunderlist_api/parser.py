"""
Response parsing

The web front end does not return task records as JSON: the per-list
endpoint wraps an HTML fragment in a JSON envelope and the tasks have to
be scraped out of its markup. The extraction rules live here so the rest
of the client only sees TaskList/Task records.
"""
import json
from typing import Any, Dict, List, Mapping, Optional

import structlog
from bs4 import BeautifulSoup, Tag

from .exceptions import ProtocolError
from .models import Task, TaskList, timestamp_to_date

logger = structlog.get_logger(__name__)

# Markup of the task list fragment
TASK_SELECTOR = "li.more"
DESCRIPTION_SELECTOR = "span.description"
FAVORITE_SELECTOR = "span.fav"
TIMESTAMP_SELECTOR = "span.timestamp"
NOTE_SELECTOR = "span.note"
DONE_CLASS = "done"

HTML_PARSER = "html.parser"


def decode_json(body: str, operation: str) -> Dict[str, Any]:
    """Decode a JSON response body, raising ProtocolError if it is not a JSON object."""
    try:
        payload = json.loads(body)
    except (TypeError, ValueError) as e:
        raise ProtocolError(
            f"Response to '{operation}' is not valid JSON",
            details={'operation': operation, 'body': (body or "")[:200]},
            cause=e,
        )
    if not isinstance(payload, dict):
        raise ProtocolError(
            f"Response to '{operation}' is not a JSON object",
            details={'operation': operation},
        )
    return payload


def envelope_data(payload: Mapping[str, Any], operation: str) -> Any:
    """Return the ``data`` member of a JSON envelope."""
    if "data" not in payload:
        raise ProtocolError(
            f"Response to '{operation}' has no 'data' field",
            details={'operation': operation, 'keys': sorted(payload)},
        )
    return payload["data"]


def _flag(value: Any) -> bool:
    return str(value) == "1"


def parse_lists(data: Any) -> List[TaskList]:
    """
    Build TaskList records from the ``data`` member of /ajax/lists/all.

    ``data`` maps list id strings to attribute mappings with ``name``,
    ``inbox`` and ``shared`` ("1" means true). Order follows the response.
    """
    if not isinstance(data, Mapping):
        raise ProtocolError("List collection 'data' is not a mapping")

    lists = []
    for raw_id, attrs in data.items():
        if not isinstance(attrs, Mapping):
            raise ProtocolError(f"Attributes of list {raw_id!r} are not a mapping")
        try:
            list_id = int(raw_id)
        except (TypeError, ValueError) as e:
            raise ProtocolError(f"List id {raw_id!r} is not numeric", cause=e)

        lists.append(TaskList(
            id=list_id,
            name=attrs.get("name", ""),
            inbox=_flag(attrs.get("inbox")),
            shared=_flag(attrs.get("shared")),
        ))
    return lists


def parse_tasks(fragment: Any, task_list: Optional[TaskList] = None) -> List[Task]:
    """
    Scrape Task records out of a task list HTML fragment.

    Args:
        fragment: Raw HTML from the ``data`` member of /ajax/lists/id/{id}
        task_list: Owning list stamped onto every task

    Returns:
        Tasks in document order
    """
    if fragment is None:
        fragment = ""
    if not isinstance(fragment, str):
        raise ProtocolError(f"Task fragment is {type(fragment).__name__}, expected HTML text")

    soup = BeautifulSoup(fragment, HTML_PARSER)
    tasks = [_parse_task(item, task_list) for item in soup.select(TASK_SELECTOR)]
    logger.debug(f"Scraped {len(tasks)} tasks from fragment")
    return tasks


def _parse_task(item: Tag, task_list: Optional[TaskList]) -> Task:
    raw_id = item.get("id")
    try:
        task_id = int(raw_id)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Task item has no numeric id: {raw_id!r}", cause=e)

    description = _required(item, DESCRIPTION_SELECTOR, task_id)
    note = _required(item, NOTE_SELECTOR, task_id)

    # bs4 returns class as a token list
    classes = item.get("class") or []

    date = None
    timestamp = item.select_one(TIMESTAMP_SELECTOR)
    if timestamp is not None:
        try:
            date = timestamp_to_date(timestamp.get("rel"))
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise ProtocolError(f"Task {task_id} has an unreadable timestamp", cause=e)

    return Task(
        id=task_id,
        name=description.get_text(),
        important=item.select_one(FAVORITE_SELECTOR) is not None,
        done=DONE_CLASS in classes,
        date=date,
        note=note.get_text(),
        list=task_list,
        client=task_list.client if task_list is not None else None,
    )


def _required(item: Tag, selector: str, task_id: int) -> Tag:
    element = item.select_one(selector)
    if element is None:
        raise ProtocolError(
            f"Task {task_id} has no '{selector}' element",
            details={'task_id': task_id, 'selector': selector},
        )
    return element
