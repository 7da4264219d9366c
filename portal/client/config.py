from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """
    Settings of the portal client, read from `PORTAL_*` environment variables
    or a `.env` file.
    """
    model_config = SettingsConfigDict(env_prefix="PORTAL_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    API_URL: str = "http://localhost:8000/api"
    """Base URL of the REST API, including the `/api` prefix."""
    STORAGE_PATH: str = "~/.knowledge_portal/storage.json"
    """JSON file backing the durable storage (token and user)."""
    BOOKMARK_CACHE_TTL_SECONDS: int = 300
    """How long a cached bookmarks list may be painted before the fetch returns."""
    EXPORT_DIR: str = "."
    """Default directory for PDF exports."""


client_settings = ClientSettings()
