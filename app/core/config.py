from pydantic_settings import BaseSettings
from typing import List, Optional, Union
from pydantic import field_validator
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "CovidVis Auth API"
    ENVIRONMENT: str = "development"  # development | production | test

    # Database Settings
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "covidvis"

    # Full URL override (e.g. sqlite:///./covidvis.db for local runs)
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        if self.SQLALCHEMY_DATABASE_URI:
            return self.SQLALCHEMY_DATABASE_URI
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Redis Settings (for Celery beat / worker)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Auth policy
    SESSION_COOKIE_NAME: str = "session"
    SESSION_EXPIRE_DAYS: int = 7
    OTP_EXPIRE_MINUTES: int = 10
    BCRYPT_ROUNDS: int = 12
    PASSWORD_MIN_LENGTH: int = 6
    CLEANUP_INTERVAL_SECONDS: int = 3600

    # AWS SES (OTP mail delivery)
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_SES_FROM_EMAIL: str = "noreply@covidvis.example"
    AWS_SES_FROM_NAME: str = "CovidVis"
    EMAIL_DELIVERY_ENABLED: bool = False

    # Avatar storage
    USE_S3: bool = False
    S3_BUCKET_NAME: str = ""
    UPLOAD_DIR: str = "uploads"
    AVATAR_URL_PREFIX: str = "/uploads/avatars"
    AVATAR_MAX_BYTES: int = 5 * 1024 * 1024
    AVATAR_ALLOWED_TYPES: List[str] = ["image/jpeg", "image/png", "image/gif", "image/webp"]
    AVATAR_UPLOAD_MAX_BYTES: int = 2 * 1024 * 1024
    AVATAR_UPLOAD_ALLOWED_TYPES: List[str] = ["image/jpeg", "image/png", "image/jpg"]

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # CORS Settings - can be set as JSON string in .env
    BACKEND_CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[List[str], str]) -> List[str]:
        """Parse CORS origins from JSON string or list"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, split by comma
                return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def cookie_secure(self) -> bool:
        """Session cookies carry the Secure flag only in production."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
