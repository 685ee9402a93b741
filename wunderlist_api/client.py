"""
Wunderlist Client

Binding for the AJAX endpoints behind the Wunderlist web front end.
Reads scrape JSON envelopes (and the HTML fragments inside them);
writes post a JSON-encoded entity as a single form field.
"""
import hashlib
import json
import re
from typing import Any, Dict, List, Optional, Union

import requests
import structlog

from .exceptions import (
    ProtocolError,
    SessionAcquisitionError,
    UnknownListError,
    UnsupportedEntityError,
    wrap_transport_error,
)
from .models import Task, TaskList
from .parser import decode_json, envelope_data, parse_lists, parse_tasks
from .utils.config import ConfigDefaults, TaskDeletePolicy, WunderlistConfig

logger = structlog.get_logger(__name__)

Entity = Union[TaskList, Task]

SESSION_PATTERN = re.compile(ConfigDefaults.SESSION_COOKIE_NAME + r"=([0-9a-zA-Z]+)")

STATUS_SUCCESS = "success"
LOGIN_SUCCESS_CODE = 200


class WunderlistClient:
    """
    Client for one Wunderlist account.

    Holds the session id, an authenticated flag and a memoized
    id -> TaskList mapping. Calls are synchronous and the state is plain
    mutable fields: share one client between threads only behind your own
    lock.

    Infrastructure failures raise (TransportError, ProtocolError,
    SessionAcquisitionError). A server that answers but rejects the
    operation yields False from login() and None from save()/destroy().
    """

    def __init__(
        self,
        host: Optional[str] = None,
        path: Optional[str] = None,
        config: Optional[WunderlistConfig] = None,
        http: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            host: Target host, overrides config.host
            path: Base path, overrides config.path
            config: Client configuration (defaults apply when omitted)
            http: Transport session, mainly for tests
        """
        config = config or WunderlistConfig()
        overrides = {k: v for k, v in (("host", host), ("path", path)) if v is not None}
        if overrides:
            config = WunderlistConfig(**{**config.model_dump(), **overrides})
        self.config = config

        self._http = http if http is not None else requests.Session()
        self._logged_in = False
        self._session_id: Optional[str] = None
        self._email: Optional[str] = None
        self._lists: Optional[Dict[int, TaskList]] = None

    @classmethod
    def from_config(cls, config: WunderlistConfig, http: Optional[requests.Session] = None) -> "WunderlistClient":
        """
        Build a client and authenticate with whatever credentials the config holds.

        A configured session id wins over email/password. The login outcome
        is available from ``logged_in``.
        """
        client = cls(config=config, http=http)
        if config.session_id:
            client.login_by_session(config.session_id)
        elif config.email and config.password:
            client.login(config.email, config.password)
        return client

    def __repr__(self) -> str:
        return f"WunderlistClient(host={self.host!r}, logged_in={self._logged_in})"

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def path(self) -> str:
        return self.config.path

    @property
    def email(self) -> Optional[str]:
        """Email address given to the last login() call."""
        return self._email

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def logged_in(self) -> bool:
        return self._logged_in

    # Session

    def get_session(self) -> str:
        """
        Request a fresh session id from the account page cookie.

        Raises:
            SessionAcquisitionError: no WLSESSID cookie in the response
        """
        response = self._request("GET", "/account", "get_session")
        set_cookie = response.headers.get("Set-Cookie") or ""
        match = SESSION_PATTERN.search(set_cookie)
        if match is None:
            logger.error("[WunderlistClient] Session bootstrap returned no session cookie")
            raise SessionAcquisitionError(details={'status_code': response.status_code})

        self._session_id = match.group(1)
        logger.info("[WunderlistClient] Acquired new session")
        return self._session_id

    def login(self, email: str, password: str) -> bool:
        """
        Authenticate the session with account credentials.

        The password is sent as its MD5 hex digest, which is what the
        service expects. Returns the authenticated flag; a rejected login
        returns False rather than raising.
        """
        if self._session_id is None:
            self.get_session()
        if self._logged_in:
            return True
        self._email = email

        form = {
            "email": email,
            "password": hashlib.md5(password.encode("utf-8")).hexdigest(),
        }
        payload = self._request_json("POST", "/ajax/user", "login", data=form)

        if payload.get("code") == LOGIN_SUCCESS_CODE:
            self._logged_in = True
            logger.info("[WunderlistClient] Logged in", email=email)
        else:
            logger.warning("[WunderlistClient] Login rejected", email=email, code=payload.get("code"))
        return self._logged_in

    def login_by_session(self, session_id: str) -> None:
        """Adopt an existing session id without any network I/O."""
        if self._logged_in:
            return
        self._logged_in = True
        self._session_id = session_id
        logger.info("[WunderlistClient] Logged in with existing session")

    # Reads

    def flush(self) -> None:
        """Drop the list cache; the next lists() call refetches."""
        self._lists = None
        logger.debug("[WunderlistClient] List cache flushed")

    def lists(self) -> Dict[int, TaskList]:
        """All lists keyed by id, in server order. Fetched once, then cached until flush()."""
        if self._lists is None:
            self._lists = self._load_lists()
        return self._lists

    def inbox(self) -> Optional[TaskList]:
        """The first list flagged as inbox, or None."""
        return next((task_list for task_list in self.lists().values() if task_list.inbox), None)

    def tasks(self, list_or_id: Union[TaskList, int, str]) -> List[Task]:
        """
        Fetch the tasks of a list.

        Args:
            list_or_id: A TaskList, or the id of a list in the list cache

        Returns:
            Tasks in the order the server renders them

        Raises:
            UnknownListError: the id is not in the list cache
        """
        if isinstance(list_or_id, TaskList):
            task_list = list_or_id
        else:
            task_list = self._resolve_list(list_or_id)

        if task_list.id is None:
            logger.debug("[WunderlistClient] Unsaved list has no remote tasks")
            return []

        operation = "tasks"
        payload = self._request_json("GET", f"/ajax/lists/id/{task_list.id}", operation)
        return parse_tasks(envelope_data(payload, operation), task_list)

    # Writes

    def create_list(self, name: str) -> Optional[TaskList]:
        """Create and persist a new (non-inbox) list."""
        return self.save(TaskList(name=name, inbox=False, client=self))

    def save(self, entity: Entity) -> Optional[Entity]:
        """
        Create or update a TaskList or Task.

        Entities without an id are inserted and receive the server id;
        entities with an id are updated. Returns the entity on success and
        None when the server rejects the operation.
        """
        if isinstance(entity, TaskList):
            return self._insert_list(entity) if entity.id is None else self._update_list(entity)
        if isinstance(entity, Task):
            return self._insert_task(entity) if entity.id is None else self._update_task(entity)
        raise UnsupportedEntityError(entity)

    def destroy(self, entity: Entity) -> Optional[Entity]:
        """
        Delete a TaskList or Task.

        On success the local id is cleared and the entity returned;
        None when the server rejects the operation.
        """
        if isinstance(entity, TaskList):
            return self._destroy_list(entity)
        if isinstance(entity, Task):
            return self._destroy_task(entity)
        raise UnsupportedEntityError(entity)

    # Internals

    def _resolve_list(self, list_id: Union[int, str]) -> TaskList:
        try:
            key = int(list_id)
        except (TypeError, ValueError):
            raise UnknownListError(list_id)

        task_list = self.lists().get(key)
        if task_list is None and self.config.refresh_on_cache_miss:
            logger.info(f"[WunderlistClient] List {key} not cached, refreshing")
            self.flush()
            task_list = self.lists().get(key)
        if task_list is None:
            raise UnknownListError(list_id)
        return task_list

    def _load_lists(self) -> Dict[int, TaskList]:
        operation = "lists"
        payload = self._request_json("GET", "/ajax/lists/all", operation)

        result: Dict[int, TaskList] = {}
        for task_list in parse_lists(envelope_data(payload, operation)):
            task_list.client = self
            result[task_list.id] = task_list

        logger.debug(f"[WunderlistClient] Loaded {len(result)} lists")
        return result

    def _insert_list(self, task_list: TaskList) -> Optional[TaskList]:
        payload = self._post_entity("/ajax/lists/insert", "list", {"name": task_list.name}, "insert_list")
        if not self._succeeded(payload, "insert_list", "/ajax/lists/insert"):
            return None

        task_list.id = self._server_id(payload, "insert_list")
        if task_list.client is None:
            task_list.client = self
        return task_list

    def _update_list(self, task_list: TaskList) -> Optional[TaskList]:
        data = {"id": task_list.id, "name": task_list.name}
        payload = self._post_entity("/ajax/lists/update", "list", data, "update_list")
        return task_list if self._succeeded(payload, "update_list", "/ajax/lists/update") else None

    def _destroy_list(self, task_list: TaskList) -> Optional[TaskList]:
        data = {"id": task_list.id, "deleted": 1}
        payload = self._post_entity("/ajax/lists/update", "list", data, "destroy_list")
        if not self._succeeded(payload, "destroy_list", "/ajax/lists/update"):
            return None

        task_list.id = None
        return task_list

    def _insert_task(self, task: Task) -> Optional[Task]:
        owner = task.list
        if owner is None or owner.id is None:
            raise ValueError("Task must belong to a saved list before it can be created")

        data = {"list_id": owner.id, "name": task.name, "date": task.timestamp}
        payload = self._post_entity("/ajax/tasks/insert", "task", data, "insert_task")
        if not self._succeeded(payload, "insert_task", "/ajax/tasks/insert"):
            return None

        task.id = self._server_id(payload, "insert_task")
        if task.client is None:
            task.client = self
        owner.add_task(task)
        return task

    def _update_task(self, task: Task) -> Optional[Task]:
        data = {
            "id": task.id,
            "important": 1 if task.important else 0,
            "done": 1 if task.done else 0,
            "name": task.name,
            "date": str(task.timestamp),
        }
        payload = self._post_entity("/ajax/tasks/update", "task", data, "update_task")
        return task if self._succeeded(payload, "update_task", "/ajax/tasks/update") else None

    def _destroy_task(self, task: Task) -> Optional[Task]:
        if self.config.task_delete_policy == TaskDeletePolicy.BY_ID:
            data = {"id": task.id, "list_id": task.list_id, "deleted": 1}
        else:
            data = {"list_id": task.list_id, "name": task.name, "deleted": 1}

        payload = self._post_entity("/ajax/tasks/update", "task", data, "destroy_task")
        if not self._succeeded(payload, "destroy_task", "/ajax/tasks/update"):
            return None

        task.id = None
        return task

    def _post_entity(self, endpoint: str, field: str, data: Dict[str, Any], operation: str) -> Dict[str, Any]:
        return self._request_json("POST", endpoint, operation, data={field: json.dumps(data)})

    @staticmethod
    def _succeeded(payload: Dict[str, Any], operation: str, endpoint: str) -> bool:
        if payload.get("status") == STATUS_SUCCESS:
            return True
        logger.warning(
            f"[WunderlistClient] Server rejected {operation}",
            endpoint=endpoint,
            status=payload.get("status"),
        )
        return False

    @staticmethod
    def _server_id(payload: Dict[str, Any], operation: str) -> int:
        try:
            return int(payload["id"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProtocolError(
                f"Response to '{operation}' reported success without a usable id",
                details={'operation': operation, 'id': payload.get("id")},
                cause=e,
            )

    def _request(
        self,
        method: str,
        endpoint: str,
        operation: str,
        data: Optional[Dict[str, Any]] = None
    ) -> requests.Response:
        headers = {"Cookie": f"{ConfigDefaults.SESSION_COOKIE_NAME}={self._session_id or ''}"}
        if self.config.user_agent:
            headers["User-Agent"] = self.config.user_agent

        kwargs: Dict[str, Any] = {}
        if self.config.timeout is not None:
            kwargs["timeout"] = self.config.timeout

        logger.debug(f"[WunderlistClient] {method} {endpoint}")
        try:
            return self._http.request(
                method,
                self.config.base_url + endpoint,
                data=data,
                headers=headers,
                **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"[WunderlistClient] {operation} failed: {e}")
            raise wrap_transport_error(e, operation, {'endpoint': endpoint})

    def _request_json(
        self,
        method: str,
        endpoint: str,
        operation: str,
        data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        response = self._request(method, endpoint, operation, data=data)
        return decode_json(response.text, operation)
