"""Database infrastructure - engine, sessions and declarative base."""

from infrastructure.database.models import Base, TimestampMixin
from infrastructure.database.session import (
    close_database_connections,
    get_engine,
    unit_of_work,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "close_database_connections",
    "get_engine",
    "unit_of_work",
]
