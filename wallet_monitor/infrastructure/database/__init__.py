"""Database infrastructure helpers (engine, sessions, migrations)."""

from .base import Base
from .session import create_session_factory, get_engine, get_session_factory, init_db

__all__ = [
    "Base",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "init_db",
]
