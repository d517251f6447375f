"""
Ledger service settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/ledger.db"
    # Bounded wait on the store (SQLite busy timeout / pool checkout)
    LEDGER_DB_TIMEOUT_SECONDS: float = 5.0

    # Ledger
    LEDGER_RETENTION_YEARS: int = 10
    LEDGER_APPEND_MAX_RETRIES: int = 3
    # Keep out of source control; inject through the environment or .env
    LEDGER_SIGNING_SECRET: str = "change-me-in-production"

    # Compliance
    COMPLIANCE_SAMPLE_SIZE: int = 10

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # File storage
    DATA_DIR: str = "./data"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
