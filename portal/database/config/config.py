"""
Server settings
===============

Every tunable of the portal server lives on one `Settings` object built by
`pydantic-settings`. Values come from the process environment first and
from a `.env` file in the working directory second; anything else in the
environment is ignored. `SECRET_KEY` has no default, so a missing key
fails at import time rather than at the first login.

Usage
-----
from portal.database.config.config import settings

db_driver = settings.DB_DRIVER_NAME
summary_model = settings.OPEN_AI_MODEL

Keep `.env` out of version control; production deployments should set real
environment variables instead.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of the server environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    FRONTEND_URL: str = Field("http://localhost:5173", description="Base URL of the frontend client application (CORS origin).")
    DB_DRIVER_NAME: str = Field("sqlite", description="Database driver (e.g., `postgresql+psycopg`, `sqlite`).")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field(None, description="Hostname or IP address of the database server.")
    DB_DATABASE_NAME: str = Field("knowledge_portal.db", description="Name of the database (file path for SQLite).")
    SECRET_KEY: str = Field(..., description="Secret key for signing access tokens.")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm.")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24 * 30, description="Duration (in minutes) before access tokens expire.")
    API_KEY: Optional[str] = Field(None, description="OpenAI API key used for AI summaries. Summaries answer 501 when unset.")
    OPEN_AI_MODEL: str = Field("gpt-4o-mini", description="OpenAI model name used for summaries.")
    CONTENT_FILTER_WORDS: str = Field("", description="Comma separated terms that send a post to the moderation queue.")
    UPLOAD_DIR: str = Field("uploads", description="Directory where avatars and attachments are stored.")
    GOOGLE_USERINFO_URL: str = Field(
        "https://www.googleapis.com/oauth2/v3/userinfo",
        description="Endpoint that resolves a Google access token into a profile.",
    )
    SENDER_EMAIL: Optional[str] = Field(None, description="Address used for welcome e-mails. E-mails are skipped when unset.")
    APP_PASSWORD: Optional[str] = Field(None, description="SMTP application password for `SENDER_EMAIL`.")

    def blocked_terms(self) -> List[str]:
        """Lower-cased, non-empty entries of `CONTENT_FILTER_WORDS`."""
        return [term.strip().lower() for term in self.CONTENT_FILTER_WORDS.split(",") if term.strip()]


settings = Settings()
"""Defines a Settings object that contains the contents of the environment / .env file"""
