"""
Academy Backend - Backend Gateways

SQL and REST implementations of the Backend interface.
"""

from academy.backends.base import Backend
from academy.backends.rest import RestBackend
from academy.backends.sql import SqlBackend

__all__ = ["Backend", "RestBackend", "SqlBackend"]
