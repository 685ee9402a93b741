"""
Shared utilities: configuration and logging
"""
from .config import WunderlistConfig, ConfigDefaults, TaskDeletePolicy, load_config, config_from_env
from .logger import setup_logger

__all__ = [
    'WunderlistConfig',
    'ConfigDefaults',
    'TaskDeletePolicy',
    'load_config',
    'config_from_env',
    'setup_logger',
]
