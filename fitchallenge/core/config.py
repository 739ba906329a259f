from pydantic_settings import BaseSettings
from typing import List
from dotenv import load_dotenv
import os

load_dotenv()


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", True)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_SERVICE_KEY: str = os.getenv("SUPABASE_SERVICE_KEY", "")

    # CORS
    ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "*")

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # Cohorts
    DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "Australia/Perth")

    # Interval habits count days from this date (YYYY-MM-DD)
    RECURRENCE_ANCHOR_DATE: str = os.getenv("RECURRENCE_ANCHOR_DATE", "2024-01-01")

    # Leaderboards
    LEADERBOARD_DEFAULT_LIMIT: int = os.getenv("LEADERBOARD_DEFAULT_LIMIT", 50)
    GLOBAL_RANK_SCAN_LIMIT: int = os.getenv("GLOBAL_RANK_SCAN_LIMIT", 1000)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_KEY)

    class Config:
        env_file = [".env.local", ".env"]
        case_sensitive = True
        extra = "ignore"


# Create settings instance
settings = Settings()
