"""Configuration management"""

from typing import List
from pydantic_settings import BaseSettings
from functools import lru_cache


# Position number meaning "no fixed order"; any number of entries may share it
UNORDERED_POSITION = 999
# Largest value an INTEGER id or position column accepts
MAX_DB_INT = 2**31 - 1

DEFAULT_ENTRY_CATEGORY_TITLE = "Best Entry"

# Used when an event defines no scoring categories of its own
DEFAULT_CATEGORIES = [
    {"name": "Lighting", "required": True, "has_none_option": True},
    {"name": "Theme", "required": True, "has_none_option": True},
    {"name": "Traditions", "required": True, "has_none_option": True},
    {"name": "Spirit", "required": True, "has_none_option": True},
    {"name": "Music", "required": False, "has_none_option": True},
]

DEFAULT_JUDGE_NAMES = ["Judge 1", "Judge 2", "Judge 3"]

ENTRY_STATUSES = ["pending-consent", "registered", "checked-in", "judged", "completed"]


class Settings(BaseSettings):
    """Service settings"""

    # Database
    database_url: str = "sqlite+aiosqlite:///./thingometer.db"

    # Static password shared by admins and coordinators
    admin_password: str = ""

    # Highest value a judge may give in any category
    max_score: int = 20

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Return the settings singleton"""
    return Settings()
