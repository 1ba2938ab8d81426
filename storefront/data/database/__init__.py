"""Database data layer package."""
from .connection import engine, SessionLocal, get_db_session, init_db, build_engine, Base
from .snapshot_model import StoreSnapshot

__all__ = [
    "engine",
    "SessionLocal",
    "get_db_session",
    "init_db",
    "build_engine",
    "Base",
    "StoreSnapshot"
]
