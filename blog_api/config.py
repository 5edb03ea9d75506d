import logging
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    MONGO_URI: str = "mongodb://localhost:27017/blog_cms"

    # JWT Authentication
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # Single admin identity
    ADMIN_ID: str = "admin_001"
    ADMIN_NAME: str = "Admin"
    ADMIN_EMAIL: str
    ADMIN_PASSWORD: str

    # Runtime
    ENVIRONMENT: str = "development"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Frontend / site
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
    ]
    ADSENSE_PUBLISHER_ID: Optional[str] = None

    # Request limits
    MAX_PAYLOAD_MB: int = 10
    MAX_IMAGE_SIZE_MB: int = 5
    MAX_IMAGE_WIDTH: int = 1920

    # DigitalOcean Spaces configuration
    DO_SPACES_ENDPOINT: Optional[str] = None
    DO_SPACES_KEY: Optional[str] = None
    DO_SPACES_SECRET: Optional[str] = None
    DO_SPACES_BUCKET: str = "blog-media"
    DO_SPACES_REGION: str = "nyc3"
    DO_SPACES_CDN_ENDPOINT: Optional[str] = None
    DO_SPACES_FOLDER: str = "blog-images"

    class Config:
        env_file = ".env"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins(self) -> List[str]:
        if self.is_production:
            return [self.FRONTEND_URL]
        return self.CORS_ORIGINS


settings = Settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Log settings loading (redact sensitive values)
logger.info("[CONFIG] Settings loaded successfully")
logger.info(f"[CONFIG] Environment: {settings.ENVIRONMENT}")
logger.info(f"[CONFIG] Mongo URI: {settings.MONGO_URI[:10]}**** (redacted)")
logger.info(f"[CONFIG] JWT Secret: {settings.JWT_SECRET_KEY[:4]}**** (redacted)")
logger.info(f"[CONFIG] Admin Email: {settings.ADMIN_EMAIL}")
logger.info(f"[CONFIG] DO Spaces Bucket: {settings.DO_SPACES_BUCKET}")
