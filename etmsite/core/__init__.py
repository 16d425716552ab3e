"""
etmsite Core
============

Core utilities shared by the API modules.
"""

from .config import Config, Settings
from .database import Database
from .logging_service import LoggingService, configure_logging

__all__ = ['Config', 'Settings', 'Database', 'LoggingService', 'configure_logging']
