"""Application configuration with environment variables."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (key-value store table lives here)
    DATABASE_URL: str = "sqlite:///./bharatrewards.db"

    # Session token settings
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # Application
    APP_NAME: str = "BharatRewards API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # OpenAI (leave empty to serve fallback questions only)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"

    # Seeded admin account
    ADMIN_ID: str = "admin-1"
    ADMIN_EMAIL: str = "admin@bharatrewards.com"
    ADMIN_PASSWORD: str = "admin"
    ADMIN_NAME: str = "Super Admin"

    # Default app settings, used until an admin saves their own
    DEFAULT_MIN_REDEEM_POINTS: int = 14000
    DEFAULT_POINTS_PER_QUESTION: int = 10
    DEFAULT_CURRENCY_RATE: float = 35

    # Quiz
    DEFAULT_QUESTION_COUNT: int = 5
    MAX_QUESTION_COUNT: int = 20

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()
