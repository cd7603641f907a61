from pydantic_settings import BaseSettings
from pathlib import Path

# Get the project root directory (parent of flashdeck folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'flashdeck.db'}"

    # Number of days kept in the daily review log
    daily_log_days: int = 30

    # Logging level for the CLI log handler
    log_level: str = "WARNING"

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_prefix = "FLASHDECK_"

settings = Settings()
