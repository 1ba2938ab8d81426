"""Store snapshot model for server-side cart/wishlist persistence."""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from storefront.data.database.connection import Base


class StoreSnapshot(Base):
    """Latest serialized state of one store (e.g. a session's cart)."""

    __tablename__ = "store_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    storage_key = Column(String(255), unique=True, nullable=False, index=True)  # "cart-storage:<session>"
    payload = Column(JSON, nullable=False)  # {"items": [...]}
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<StoreSnapshot(id={self.id}, storage_key='{self.storage_key}')>"
