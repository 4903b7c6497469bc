from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/listings_db"
    REDIS_URL: str = "redis://localhost:6379/0"
    USER_MANAGEMENT_URL: str = "http://user-management:8000"
    CORS_ORIGINS: List[str] = ["https://*.onrender.com", "https://*.vercel.app"]
    LOG_LEVEL: str = "INFO"
    # Listing view
    PAGE_SIZE: int = 9
    CACHE_TTL_SECONDS: int = 3600
    # Relative image paths are resolved against this base by consumers
    IMAGE_BASE_URL: str = "http://localhost:5000"
    PLACEHOLDER_IMAGE: str = "/images/placeholder-property.jpg"
    # Upload relay
    UPLOAD_DIR: str = "public/images/properties"
    UPLOAD_URL_PREFIX: str = "/images/properties"
    UPLOAD_MAX_FILES: int = 5
    UPLOAD_MAX_BYTES: int = 5 * 1024 * 1024
    # Map defaults (Manila)
    DEFAULT_MAP_LAT: float = 14.5995
    DEFAULT_MAP_LNG: float = 120.9842
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
