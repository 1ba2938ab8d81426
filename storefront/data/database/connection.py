"""Database connection and session management."""
import os
import time
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.exc import OperationalError
from storefront.config import settings
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

# Retry configuration
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 1


def build_engine(database_url: str):
    """Create an engine; SQLite gets thread sharing instead of pool sizing."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=False  # Set to True for SQL query logging
    )


# Create database engine
engine = build_engine(settings.database_url)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db_session(session_factory=SessionLocal):
    """
    Get a database session with retry logic.
    Retries up to 3 times on connection failure.
    """
    last_error = None

    for attempt in range(MAX_RETRIES):
        db = session_factory()
        try:
            # Test the connection with a simple query
            db.execute(text("SELECT 1"))
            return db
        except OperationalError as e:
            db.close()
            last_error = e
            if attempt < MAX_RETRIES - 1:
                logger.warning(
                    "Connection attempt %d failed, retrying in %ss...",
                    attempt + 1, RETRY_DELAY_SECONDS,
                )
                time.sleep(RETRY_DELAY_SECONDS)
            else:
                logger.error("All %d connection attempts failed", MAX_RETRIES)

    raise last_error


def init_db(bind=None):
    """Create all tables for the registered models."""
    # Import models so they register on Base.metadata
    from storefront.data.database import snapshot_model  # noqa: F401
    bind = bind or engine
    # SQLite files may point into a directory that does not exist yet
    if bind.url.get_backend_name() == "sqlite" and bind.url.database not in (None, "", ":memory:"):
        os.makedirs(os.path.dirname(bind.url.database) or ".", exist_ok=True)
    Base.metadata.create_all(bind=bind)
