"""Best-effort persistence of the todo list.

The engine never writes anything itself; the app connects
``TimerEngine.todos_changed`` to :meth:`TodoStore.save_todos` and loads the
list back once at startup.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from ..timer.models import Todo, coerce_todos
from .db import get_session
from .models import KeyValue

logger = logging.getLogger(__name__)

TODOS_KEY = "todos.v1"


class TodoStore:
    """Reads and writes the todo list as JSON under one namespace key."""

    def __init__(self, key: str = TODOS_KEY) -> None:
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load_todos(self) -> list[Todo]:
        """Stored todos in queue order; empty if missing or unreadable."""
        try:
            with get_session() as db:
                row = db.query(KeyValue).filter_by(key=self._key).first()
                raw = row.value if row else None
        except SQLAlchemyError:
            logger.exception("Could not read %s", self._key)
            return []
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt %s payload", self._key)
            return []
        if not isinstance(data, list):
            logger.warning("Discarding %s payload of type %s", self._key, type(data).__name__)
            return []
        return list(coerce_todos(data))

    def save_todos(self, todos: Iterable[Todo]) -> bool:
        """Write the whole list.  Failures are logged, never raised."""
        payload = json.dumps([t.to_dict() for t in todos])
        try:
            with get_session() as db:
                row = db.query(KeyValue).filter_by(key=self._key).first()
                if row is None:
                    db.add(KeyValue(key=self._key, value=payload))
                else:
                    row.value = payload
                    row.updated_at = datetime.utcnow()
        except SQLAlchemyError:
            logger.exception("Could not save %s", self._key)
            return False
        return True
