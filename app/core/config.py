# app/core/config.py
import os
from dataclasses import dataclass
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import Optional, List, Tuple
from functools import lru_cache

DEFAULT_FILE_SIZE_LIMIT = 5_000_000
DEFAULT_ALLOWED_FILE_TYPES = ("image/jpeg", "image/png", "image/gif")


@dataclass(frozen=True)
class ImageUploadConfig:
    max_file_size: int = DEFAULT_FILE_SIZE_LIMIT
    allowed_types: Tuple[str, ...] = DEFAULT_ALLOWED_FILE_TYPES


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    APP_NAME: str = "Image Library API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./images.db")

    # Security Settings
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS Settings
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")

    # File Upload Settings
    FILE_SIZE_LIMIT: int = DEFAULT_FILE_SIZE_LIMIT
    ALLOWED_FILE_TYPES: str = ",".join(DEFAULT_ALLOWED_FILE_TYPES)

    # Object Storage Settings
    STORAGE_BACKEND: str = "local"
    UPLOAD_DIR: str = "uploads"
    BASE_URL: str = os.environ.get("BASE_URL", "http://localhost:8000")
    S3_BUCKET: Optional[str] = None
    S3_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: Optional[str] = None

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Helper methods for list envs
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",") if item.strip()]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def allowed_file_types_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_FILE_TYPES) or list(DEFAULT_ALLOWED_FILE_TYPES)

    def upload_config(self) -> ImageUploadConfig:
        return ImageUploadConfig(
            max_file_size=self.FILE_SIZE_LIMIT,
            allowed_types=tuple(self.allowed_file_types_list),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings: Settings = get_settings()
