"""
Persistence backends for store snapshots.

A store never talks to disk or a database directly; it is handed a
``Persistable`` and calls ``load()`` once on construction and ``save()`` after
every mutation. Snapshots are plain JSON-serialisable dicts of the form
``{"items": [...]}``.
"""
import hashlib
import json
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError

from storefront.data.database.connection import SessionLocal, get_db_session
from storefront.data.database.snapshot_model import StoreSnapshot
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

Snapshot = Dict[str, Any]

CART_NAMESPACE = "cart-storage"
WISHLIST_NAMESPACE = "wishlist-storage"


@runtime_checkable
class Persistable(Protocol):
    """Load/save capability injected into the stores."""

    def load(self) -> Optional[Snapshot]:
        ...

    def save(self, snapshot: Snapshot) -> None:
        ...


class MemoryStorage:
    """Keeps the latest snapshot in memory (tests, ephemeral sessions)."""

    def __init__(self, snapshot: Optional[Snapshot] = None):
        self._raw = json.dumps(snapshot) if snapshot is not None else None

    def load(self) -> Optional[Snapshot]:
        # Round-trip through JSON so stores see the same shapes as on disk
        return json.loads(self._raw) if self._raw is not None else None

    def save(self, snapshot: Snapshot) -> None:
        self._raw = json.dumps(snapshot)


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def file_name_for(key: str) -> str:
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]
    return f"{_UNSAFE_KEY_CHARS.sub('_', key)}-{digest}.json"


class JsonFileStorage:
    """
    One JSON file per storage key under ``directory``.

    The file equivalent of browser local storage: it survives restarts of the
    process but is local to the machine. File names are the key with unsafe
    characters replaced, suffixed with a digest of the raw key so that keys
    differing only in those characters never share a file.
    """

    def __init__(self, directory: str, key: str):
        self.key = key
        self.path = Path(directory) / file_name_for(key)

    def load(self) -> Optional[Snapshot]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read snapshot %s: %s", self.path, e)
            return None
        if not isinstance(data, dict):
            logger.error("Snapshot %s is not an object; ignoring it", self.path)
            return None
        return data

    def save(self, snapshot: Snapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2)
        os.replace(tmp_path, self.path)


class DatabaseStorage:
    """Snapshot stored as one ``store_snapshots`` row keyed by storage key."""

    def __init__(self, key: str, session_factory: Callable = SessionLocal):
        self.key = key
        self.session_factory = session_factory

    def load(self) -> Optional[Snapshot]:
        db = None
        try:
            db = get_db_session(self.session_factory)
            row = db.query(StoreSnapshot).filter(StoreSnapshot.storage_key == self.key).first()
            if row is None or not isinstance(row.payload, dict):
                return None
            return dict(row.payload)
        except SQLAlchemyError as e:
            logger.error("Failed to load snapshot '%s': %s", self.key, e)
            return None
        finally:
            if db is not None:
                db.close()

    def save(self, snapshot: Snapshot) -> None:
        db = None
        try:
            db = get_db_session(self.session_factory)
            row = db.query(StoreSnapshot).filter(StoreSnapshot.storage_key == self.key).first()
            if row is None:
                db.add(StoreSnapshot(storage_key=self.key, payload=snapshot))
            else:
                row.payload = snapshot
            db.commit()
        except SQLAlchemyError:
            if db is not None:
                db.rollback()
            raise
        finally:
            if db is not None:
                db.close()


def storage_key(namespace: str, session_id: Optional[str] = None) -> str:
    return f"{namespace}:{session_id}" if session_id else namespace


def create_storage(
    backend: str,
    namespace: str,
    session_id: Optional[str] = None,
    storage_dir: str = ".",
    session_factory: Callable = SessionLocal,
) -> Persistable:
    """
    Build the configured backend for one store.

    Args:
        backend: "memory", "file" or "database"
        namespace: Store namespace (``cart-storage`` / ``wishlist-storage``)
        session_id: Optional session scope (server-side variant)
        storage_dir: Directory used by the file backend
        session_factory: SQLAlchemy session factory used by the database backend

    Returns:
        A Persistable instance
    """
    key = storage_key(namespace, session_id)
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return JsonFileStorage(storage_dir, key)
    if backend == "database":
        return DatabaseStorage(key, session_factory=session_factory)
    raise ValueError(f"Unknown storage backend '{backend}' (expected memory, file or database)")
