"""
Application configuration via Pydantic Settings.
Loads from environment variables with validation and defaults.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


VERSION = "1.2.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # === Server ===
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8001, alias="SERVER_PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    # === Supabase (record store) ===
    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(default=None, alias="SUPABASE_SERVICE_ROLE_KEY")

    # === CORS ===
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")

    # === Photos ===
    thumbnail_size: int = Field(default=512, ge=16, alias="THUMBNAIL_SIZE")
    thumbnail_quality: int = Field(default=80, ge=1, le=100, alias="THUMBNAIL_QUALITY")
    default_eye_position: float = Field(default=0.7, ge=0.0, le=1.0)
    face_min_confidence: float = Field(default=0.3, ge=0.0, le=1.0)

    # === Home view ===
    home_background_photo_limit: int = Field(default=12, ge=1, alias="HOME_BACKGROUND_PHOTO_LIMIT")

    # === Icon cache (external asset layer) ===
    icon_cache_invalidate_url: Optional[str] = Field(default=None, alias="ICON_CACHE_INVALIDATE_URL")
    icon_cache_timeout_seconds: float = Field(default=5.0, gt=0, alias="ICON_CACHE_TIMEOUT_SECONDS")

    @property
    def cors_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
