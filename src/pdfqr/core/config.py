"""Configuration management for the PDF QR service."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "pdfqr"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Access gate (single shared secret, empty = gate disabled)
    ACCESS_PASSWORD: str = ""
    ACCESS_COOKIE_NAME: str = "auth-token"
    ACCESS_COOKIE_MAX_AGE_SECONDS: int = 60 * 60 * 24

    # Artifact sink: "local" (bounded in-memory store) or "drive" (Google Drive)
    ARTIFACT_SINK: str = "local"
    ARTIFACT_RETENTION_LIMIT: int = 20

    # Upload Constraints
    MAX_UPLOAD_MB: int = 30
    MAX_CHUNK_MB: int = 1  # totalChunks * MAX_CHUNK_MB may not exceed MAX_UPLOAD_MB
    ALLOWED_UPLOAD_MIME_TYPES: str = "application/pdf"  # Comma-separated
    SESSION_TTL_SECONDS: int = 900  # 0 = sessions never expire

    # Overrides the request origin when building retrieval URLs
    PUBLIC_BASE_URL: str = ""

    # Google Drive Configuration
    GOOGLE_SERVICE_ACCOUNT_FILE: str = ""
    GOOGLE_SERVICE_ACCOUNT_JSON: str = ""  # Inline JSON, takes precedence over the file
    GOOGLE_DRIVE_FOLDER_ID: str = ""
    GOOGLE_DRIVE_TIMEOUT_SECONDS: int = 60

    @property
    def allowed_mime_types(self) -> list[str] | None:
        """Parse ALLOWED_UPLOAD_MIME_TYPES into a list."""
        if not self.ALLOWED_UPLOAD_MIME_TYPES:
            return None
        return [mt.strip() for mt in self.ALLOWED_UPLOAD_MIME_TYPES.split(",") if mt.strip()]

    @property
    def max_upload_bytes(self) -> int:
        """Convert MAX_UPLOAD_MB to bytes."""
        return self.MAX_UPLOAD_MB * 1024 * 1024

    @property
    def max_chunk_bytes(self) -> int:
        """Convert MAX_CHUNK_MB to bytes."""
        return self.MAX_CHUNK_MB * 1024 * 1024

    @property
    def access_gate_enabled(self) -> bool:
        return bool(self.ACCESS_PASSWORD)


# Singleton settings instance
settings = Settings()
