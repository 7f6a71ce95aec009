"""Database package: declarative Base, per-settings engines and the request session."""
from contractdesk.db.base import Base, create_engine, dispose_engines, get_db, get_engine, session_factory

__all__ = ["Base", "create_engine", "dispose_engines", "get_db", "get_engine", "session_factory"]
