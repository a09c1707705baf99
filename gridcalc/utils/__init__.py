"""Utility modules"""
from .config import Settings, load_settings
from .config_loader import GridFile, NamedStrategy, load_config_file, parse_config
from .logging import configure_logging, get_run_logger

__all__ = [
    'Settings',
    'load_settings',
    'GridFile',
    'NamedStrategy',
    'load_config_file',
    'parse_config',
    'configure_logging',
    'get_run_logger',
]
