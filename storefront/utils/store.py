"""Base class for write-through persisted, subscribable stores."""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from storefront.utils.logger import get_logger
from storefront.utils.persistence import MemoryStorage, Persistable

logger = get_logger(__name__)

Listener = Callable[[Any], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PersistentStore:
    """
    Keeps a list of items, saves a snapshot after each mutation and then
    notifies subscribers.

    Subclasses implement ``_item_from_dict`` / ``_item_to_dict``. Mutating
    operations build the new item list and hand it to ``_commit(items)``; the
    list only becomes the store's state once the storage accepted it, so a
    failing save leaves the store as it was.
    """

    name = "store"

    def __init__(
        self,
        storage: Optional[Persistable] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._storage = storage if storage is not None else MemoryStorage()
        self._clock = clock
        self._listeners: List[Listener] = []
        self._items = self._restore()

    def _item_from_dict(self, data: Dict[str, Any]):
        raise NotImplementedError

    def _item_to_dict(self, item) -> Dict[str, Any]:
        raise NotImplementedError

    def _restore(self) -> list:
        snapshot = self._storage.load()
        if not snapshot:
            return []
        items = []
        for raw in snapshot.get("items") or []:
            try:
                items.append(self._item_from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Dropping unreadable %s item %r: %s", self.name, raw, e)
        return items

    def _snapshot_of(self, items: list) -> Dict[str, Any]:
        return {"items": [self._item_to_dict(item) for item in items]}

    def snapshot(self) -> Dict[str, Any]:
        """JSON-serialisable view of the current state."""
        return self._snapshot_of(self._items)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with the store after every mutation.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, items: list):
        try:
            self._storage.save(self._snapshot_of(items))
        except Exception as e:
            logger.error("Failed to save %s; change discarded: %s", self.name, e)
            raise
        self._items = items
        for listener in list(self._listeners):
            listener(self)
