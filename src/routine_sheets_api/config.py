"""Configuration settings for the routine sheets API."""
import os
from typing import List, Literal


EnvironmentType = Literal["development", "staging", "production"]


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"
    LOG_LEVEL: str = "INFO"

    # Storage
    DATABASE_URL: str = "sqlite:///./routines.db"

    # Uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # HTTP
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Storage
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./routines.db")

        # Uploads
        try:
            self.MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
        except ValueError:
            self.MAX_UPLOAD_BYTES = 10 * 1024 * 1024

        # HTTP
        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
        self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]


settings = Settings()
