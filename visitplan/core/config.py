"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Visit Planner"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./visitplan.db"

    # Google Sheets API (optional; public sheets are read via CSV export)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""  # Obtained via scripts/get_token.py

    # Spreadsheet fetching
    sheet_fetch_timeout_seconds: float = 15.0

    # Background spreadsheet check
    sync_check_enabled: bool = True
    sync_interval_minutes: int = 30


settings = Settings()
