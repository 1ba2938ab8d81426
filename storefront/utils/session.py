"""Per-session store registry for the server-side variant."""
import hashlib
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Optional

from fastapi import Request

from storefront.config import settings
from storefront.utils.cart import CartStore
from storefront.utils.logger import get_logger
from storefront.utils.persistence import (
    CART_NAMESPACE,
    WISHLIST_NAMESPACE,
    Persistable,
    create_storage,
)
from storefront.utils.wishlist import WishlistStore

logger = get_logger(__name__)

SESSION_HEADER = "X-Session-Id"


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.
    Handles proxies and forwarded headers.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address as string
    """
    # Check for forwarded IP (when behind proxy/load balancer)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def generate_session_id(ip_address: str) -> str:
    """
    Generate a consistent session_id from IP address.

    Args:
        ip_address: Client IP address

    Returns:
        Session ID based on IP address
    """
    hash_obj = hashlib.md5(ip_address.encode())
    return f"session_{hash_obj.hexdigest()[:16]}"


def resolve_session_id(request: Request) -> str:
    """Explicit ``X-Session-Id`` header first, otherwise derived from the client IP."""
    explicit = request.headers.get(SESSION_HEADER)
    if explicit and explicit.strip():
        return explicit.strip()
    return generate_session_id(get_client_ip(request))


@dataclass
class SessionStores:
    """Cart and wishlist of one session plus the lock that serialises them."""
    session_id: str
    cart: CartStore
    wishlist: WishlistStore
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


StorageFactory = Callable[[str, str], Persistable]


class SessionRegistry:
    """
    Hands out one ``SessionStores`` per session key.

    Route handlers run on a thread pool, so every read or mutation of a
    session's stores must happen while holding ``SessionStores.lock``.

    At most ``max_sessions`` sessions are kept in memory. The least recently
    used idle session is dropped first; its state is already persisted, so the
    next request for it reloads the stores from storage. Sessions whose lock is
    held by a request are never dropped.
    """

    def __init__(
        self,
        storage_factory: Optional[StorageFactory] = None,
        max_sessions: Optional[int] = None,
    ):
        self._storage_factory = storage_factory or default_storage_factory
        self.max_sessions = max(max_sessions or settings.session_cache_size, 1)
        self._sessions: "OrderedDict[str, SessionStores]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: str) -> SessionStores:
        with self._lock:
            stores = self._sessions.get(session_id)
            if stores is not None:
                self._sessions.move_to_end(session_id)
                return stores

            stores = SessionStores(
                session_id=session_id,
                cart=CartStore(self._storage_factory(CART_NAMESPACE, session_id)),
                wishlist=WishlistStore(self._storage_factory(WISHLIST_NAMESPACE, session_id)),
            )
            self._sessions[session_id] = stores
            logger.debug("Opened stores for %s", session_id)
            self._evict(keep=session_id)
            return stores

    def _evict(self, keep: str):
        for session_id in list(self._sessions):
            if len(self._sessions) <= self.max_sessions:
                return
            if session_id == keep:
                continue
            stores = self._sessions[session_id]
            if not stores.lock.acquire(blocking=False):
                continue
            try:
                del self._sessions[session_id]
            finally:
                stores.lock.release()
            logger.debug("Evicted idle session %s", session_id)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self):
        return len(self._sessions)


def default_storage_factory(namespace: str, session_id: str) -> Persistable:
    return create_storage(
        settings.storage_backend,
        namespace,
        session_id=session_id,
        storage_dir=settings.storage_dir,
    )
