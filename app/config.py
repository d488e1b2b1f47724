"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


class Settings:
    """Settings from environment variables"""

    # Player name catalog (JSON list, or {"teamA": [...], "teamB": [...]})
    PLAYER_CATALOG_PATH: str = os.getenv("PLAYER_CATALOG_PATH", "data/players.json")

    # Undo history capacity
    HISTORY_LIMIT: int = _int_env("HISTORY_LIMIT", 50)

    # Players per side, decides "all out"
    DEFAULT_ROSTER_SIZE: int = _int_env("DEFAULT_ROSTER_SIZE", 11)

    # Extra comma-separated origins on top of the local dev servers
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = _int_env("PORT", 8000)


settings = Settings()
