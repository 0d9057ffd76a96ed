"""Application configuration"""
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./filevault.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # JWT access tokens
    JWT_SECRET: str = "dev-secret-change-me"   # HS* signing secret
    JWT_ALGORITHM: str = "HS256"                 # HS256, or RS256 with JWT_PRIVATE_KEY
    JWT_PRIVATE_KEY: Optional[str] = None        # RSA-2048 PEM string; auto-generated when RS256 and absent
    JWT_KEY_ID: Optional[str] = None             # kid claim for key rotation tracking
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 600      # 10 minutes

    # Refresh tokens
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    REFRESH_TOKEN_BYTES: int = 64                # hex-encoded, 512 bits of entropy

    # File storage
    UPLOAD_DIR: str = "./uploads"
    MAX_FILE_SIZE: int = 50 * 1024 * 1024  # 50MB
    FILE_LIST_DEFAULT_PAGE_SIZE: int = 10
    FILE_LIST_MAX_PAGE_SIZE: int = 100

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text

    # CORS
    CORS_ORIGINS: str = "*"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: List[str] = ["100/minute", "1000/hour"]
    RATE_LIMIT_AUTH: str = "20/minute"  # signup, signin, token refresh
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # Use redis:// for production

    # Monitoring
    METRICS_ENABLED: bool = True
    METRICS_PATH: str = "/metrics"

    # Security
    TRUST_PROXY_HEADERS: bool = False  # Set True if behind reverse proxy

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.LOG_LEVEL == "WARNING" or self.LOG_LEVEL == "ERROR"


settings = Settings()
