"""Configuration settings for the application."""
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

# Ensure .env values are loaded into os.environ so they are visible to
# anything reading the environment directly at import-time.
load_dotenv()

PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_PRODUCTS_PATH = PACKAGE_ROOT / "data" / "mock" / "products.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_url: str = Field(default="sqlite:///./var/storefront.db", alias="DATABASE_URL")
    # Where cart/wishlist snapshots live: memory, file or database
    storage_backend: str = Field(default="file", alias="STORAGE_BACKEND")
    storage_dir: str = Field(default="./var/storage", alias="STORAGE_DIR")
    # Mock catalogue served by the local route handlers
    products_data_path: str = Field(default=str(DEFAULT_PRODUCTS_PATH), alias="PRODUCTS_DATA_PATH")
    # Outbound API (data access facade)
    api_base_url: str = Field(default="http://localhost:8000", alias="API_BASE_URL")
    use_external_api: bool = Field(default=False, alias="USE_EXTERNAL_API")
    api_auth_token: str = Field(default="", alias="API_AUTH_TOKEN")
    # Request timeout in seconds
    api_timeout: float = Field(default=10.0, alias="API_TIMEOUT")
    api_max_retries: int = Field(default=3, alias="API_MAX_RETRIES")
    # First backoff delay in seconds, doubled on every retry
    api_retry_base_delay: float = Field(default=1.0, alias="API_RETRY_BASE_DELAY")
    default_page_size: int = Field(default=20, alias="DEFAULT_PAGE_SIZE")
    # Sessions whose stores are kept in memory; older ones are reloaded from storage
    session_cache_size: int = Field(default=1000, alias="SESSION_CACHE_SIZE")
    project_name: str = "Storefront"
    api_version: str = "v1"
    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: str = Field(default="", alias="LOG_FILE")

    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True


settings = Settings()
