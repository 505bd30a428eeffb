"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached instance at process start, then
pass it explicitly to ``create_app()`` / ``build_context()``.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

MB = 1024 * 1024


class Settings(BaseSettings):
    """Stoop Politics settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        whisper_provider: STT backend ("openai" for the hosted API, "local" for faster-whisper).
        database_url: Async SQLAlchemy connection string.
        media_dir: Root directory of the object-storage bucket served at ``/media``.
        admin_api_key: Bearer key guarding the admin API. Empty disables the check.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Site ---
    site_name: str = "Stoop Politics"

    # --- Speech-to-text ---
    # "openai" = hosted Whisper API, "local" = faster-whisper on this machine
    whisper_provider: str = "openai"
    openai_api_key: str = ""  # Required when whisper_provider="openai"
    openai_transcription_model: str = "whisper-1"
    whisper_model: str = "base"  # Local model size: tiny, base, small, medium, large-v3
    whisper_default_language: str = ""  # Empty = auto-detect; ISO 639-1 code e.g. "en"
    transcription_timeout_seconds: float = 60.0
    transcription_max_bytes: int = 25 * MB  # Hosted API rejects larger payloads

    # --- Uploads ---
    max_upload_bytes: int = 100 * MB  # Audio file intake ceiling
    max_cover_bytes: int = 5 * MB

    # --- Auth ---
    admin_api_key: str = ""

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 8000
    log_level: str = "INFO"  # Python logging level
    cors_origins: list[str] = ["http://localhost:8501"]  # Streamlit admin UI
    public_base_url: str = "http://localhost:8000"  # Prefix for public media URLs
    api_base_url: str = "http://localhost:8000"  # Backend URL used by the admin UI

    # --- Storage ---
    # Paths are relative to the project root; absolute paths also supported
    database_url: str = "sqlite+aiosqlite:///data/stoop.db"
    media_dir: str = "data/media"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Uses ``functools.lru_cache`` so the .env file is read only once.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
