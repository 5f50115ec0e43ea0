"""
Application configuration using Pydantic Settings.
Values are read from the environment or a local .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Fashion Shop API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # MongoDB
    MONGO_URL: str = "mongodb://localhost:27017"
    MONGO_DB: str = "fashionDB"

    # Auth
    SECRET_KEY: str = "dev-secret-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS
    CORS_ORIGIN_REGEX: str = ".*"

    # Address registry (ViettelPost)
    ADDRESS_REGISTRY_URL: str = "https://partner.viettelpost.vn/v2"
    ADDRESS_REGISTRY_TOKEN: Optional[str] = None
    ADDRESS_REGISTRY_USERNAME: Optional[str] = None
    ADDRESS_REGISTRY_PASSWORD: Optional[str] = None
    ADDRESS_REGISTRY_TIMEOUT: float = 10.0

    # Cart
    CART_MAX_RETRIES: int = 3


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
