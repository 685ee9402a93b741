"""
Wunderlist API Bindings

Unofficial client for the AJAX endpoints of the Wunderlist web front end:
log in, read lists and their tasks, and create/update/delete both.
"""
from .client import WunderlistClient
from .models import Task, TaskList
from .exceptions import (
    WunderlistException,
    TransportError,
    ProtocolError,
    SessionAcquisitionError,
    UnsupportedEntityError,
    UnknownListError,
    DetachedEntityError,
)
from .utils.config import WunderlistConfig, TaskDeletePolicy, load_config, config_from_env
from .utils.logger import setup_logger

__version__ = "0.2.0"

__all__ = [
    'WunderlistClient',
    'Task',
    'TaskList',
    'WunderlistException',
    'TransportError',
    'ProtocolError',
    'SessionAcquisitionError',
    'UnsupportedEntityError',
    'UnknownListError',
    'DetachedEntityError',
    'WunderlistConfig',
    'TaskDeletePolicy',
    'load_config',
    'config_from_env',
    'setup_logger',
]
