"""SQLAlchemy ORM models for BoostTimer."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class KeyValue(Base):
    """Namespaced JSON blobs, e.g. the todo list under ``todos.v1``."""

    __tablename__ = "kv_store"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(64), nullable=False, unique=True)
    value = Column(Text, nullable=False, default="null")
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<KeyValue key={self.key} updated={self.updated_at}>"
