from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "Regixo Registration Service"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    # Database
    DATABASE_URL: str = "sqlite:///./regixo.db"

    # Security (organizer bearer tokens are signed by the auth provider)
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Abuse throttle
    RATE_LIMIT_MAX_REGISTRATIONS: int = 10
    RATE_LIMIT_WINDOW_HOURS: int = 2

    # Deadlines stored at midnight in this zone count until end of day
    EVENT_TIMEZONE: str = "UTC"

    # Ticket lookup
    MIN_TRANSACTION_ID_LENGTH: int = 3

    # CORS
    CORS_ORIGINS: list = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
