"""
Academy Backend - Core Module

This module contains configuration, database setup, errors and security utilities.
"""

from academy.core.config import get_settings, settings
from academy.core.database import Base, get_engine
from academy.core.exceptions import BackendError, NotFoundError, ValidationError

__all__ = [
    "settings",
    "get_settings",
    "Base",
    "get_engine",
    "BackendError",
    "NotFoundError",
    "ValidationError",
]
