"""
Configuration module for the billing engine.
"""
from .settings import (
    StopTimeConfig,
    get_config,
    install_reload_handler,
    load_config,
    reload_config
)

__all__ = [
    'StopTimeConfig',
    'get_config',
    'install_reload_handler',
    'load_config',
    'reload_config'
]
