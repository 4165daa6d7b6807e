"""
Configuration modules.
"""

from .config import LandConfig, Settings
from .log_setup import configure_logging

__all__ = ['LandConfig', 'Settings', 'configure_logging']
