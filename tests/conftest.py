"""
Pytest configuration and fixtures
"""
import json
from unittest.mock import Mock

import pytest
import requests

from wunderlist_api import WunderlistClient, WunderlistConfig


TASKS_FRAGMENT = """
<ul id="list">
  <li class="more done" id="101">
    <span class="fav"></span>
    <span class="description">Buy milk</span>
    <span class="timestamp" rel="{timestamp}">today</span>
    <span class="note">2 litres</span>
  </li>
  <li class="more" id="102">
    <span class="description">Call mom</span>
    <span class="note"></span>
  </li>
  <li class="header">not a task</li>
</ul>
"""

LISTS_DATA = {
    "1": {"name": "Inbox", "inbox": "1", "shared": "0"},
    "2": {"name": "Groceries", "inbox": "0", "shared": "1"},
    "3": {"name": "Work", "inbox": "0", "shared": "0"},
}


def _response(body=None, headers=None, status_code=200):
    response = Mock(spec=requests.Response)
    response.text = body if isinstance(body, str) else json.dumps(body)
    response.headers = headers or {}
    response.status_code = status_code
    return response


@pytest.fixture
def make_response():
    """Factory for canned transport responses"""
    return _response


@pytest.fixture
def http():
    """Fake transport session; queue responses via http.request.side_effect"""
    return Mock(spec=requests.Session)


@pytest.fixture
def client(http):
    """Client wired to the fake transport"""
    return WunderlistClient(http=http)


@pytest.fixture
def logged_in_client(http):
    """Client that already holds a session"""
    client = WunderlistClient(http=http)
    client.login_by_session("abc123")
    return client


@pytest.fixture
def lists_response():
    return _response({"data": LISTS_DATA})


@pytest.fixture
def tasks_fragment():
    """Task fragment with no due date on the first item"""
    return TASKS_FRAGMENT.replace('<span class="timestamp" rel="{timestamp}">today</span>', "")


@pytest.fixture
def refreshing_config():
    return WunderlistConfig(refresh_on_cache_miss=True)
