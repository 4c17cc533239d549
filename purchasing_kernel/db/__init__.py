"""Database layer - engine, session scope and declarative base classes."""

from purchasing_kernel.db.base import UUID, Base, CompanyScopedBase, UUIDString
from purchasing_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    session_scope,
)

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "CompanyScopedBase",
    "UUIDString",
    "UUID",
]
