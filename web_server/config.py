import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime configuration, read from the environment (and .env)."""
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db: str = "skilio"
    mongodb_timeout_ms: int = Field(default=5000, ge=1)
    # Empty means unset; the server refuses to start without one
    auth_secret: str = ""
    best_score_threshold: int = Field(default=70, ge=0)
    available_window_days: int = Field(default=7, ge=0)
    case_sensitive_search: bool = True
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    defaults = Settings()
    return Settings(
        mongodb_url=os.getenv("MONGODB_URL", defaults.mongodb_url),
        mongodb_db=os.getenv("MONGODB_DB", defaults.mongodb_db),
        mongodb_timeout_ms=int(os.getenv("MONGODB_TIMEOUT_MS", defaults.mongodb_timeout_ms)),
        auth_secret=os.getenv("AUTH_SECRET", defaults.auth_secret),
        best_score_threshold=int(os.getenv("BEST_SCORE_THRESHOLD", defaults.best_score_threshold)),
        available_window_days=int(os.getenv("AVAILABLE_WINDOW_DAYS", defaults.available_window_days)),
        case_sensitive_search=_env_bool("CASE_SENSITIVE_SEARCH", defaults.case_sensitive_search),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
