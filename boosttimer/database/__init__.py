"""Database package."""

from .db import configure_engine, get_session, init_db
from .models import KeyValue
from .todos import TodoStore, TODOS_KEY

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "KeyValue",
    "TodoStore",
    "TODOS_KEY",
]
