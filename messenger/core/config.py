import os
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    Read from environment variables (.env file)
    """
    APP_NAME: str = "Messenger API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "False") == "True"

    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./messenger.db"
    )
    AUTO_CREATE_TABLES: bool = os.getenv("AUTO_CREATE_TABLES", "True") == "True"

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    MESSAGE_EDIT_WINDOW_MINUTES: int = int(
        os.getenv("MESSAGE_EDIT_WINDOW_MINUTES", "15")
    )
    MAX_MESSAGE_LENGTH: int = int(os.getenv("MAX_MESSAGE_LENGTH", "5000"))

    # 0 keeps typing flags until the client clears them
    TYPING_TTL_SECONDS: int = int(os.getenv("TYPING_TTL_SECONDS", "0"))

    SEARCH_RESULT_LIMIT: int = int(os.getenv("SEARCH_RESULT_LIMIT", "50"))
    # Most recent matches per source considered for ranking
    SEARCH_SCAN_LIMIT: int = int(os.getenv("SEARCH_SCAN_LIMIT", "500"))

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
