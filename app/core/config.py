from pydantic_settings import BaseSettings
from typing import Literal, Optional

class Settings(BaseSettings):
    # Load env from .env file
    model_config = {"env_file": ".env"}

    # Startup (overridable with --listen / --base-url)
    LISTEN: str = "[::]:3319"
    BASE_URL: str = "https://zaiko.io"  # Upstream event site

    # Upstream access
    IMAGE_URL_PREFIX: str = "https://media.zaiko.io/"
    ALLOWED_ORIGIN: str = "https://zaiko.io"
    FETCH_TIMEOUT_SECONDS: float = 10.0

    # Response cache
    RESPONSE_CACHE_TTL_SECONDS: int = 60 * 60  # 1 hour
    RESPONSE_CACHE_MAX_ENTRIES: Optional[int] = None  # None = unbounded

    # Cache-Control policy
    SUCCESS_MAX_AGE_SECONDS: int = 3600
    FAILURE_MAX_AGE_SECONDS: int = 300
    FRESHNESS_MODE: Literal["frozen", "remaining"] = "frozen"

    # Thumbnails
    SQUARE_SIZE: int = 400
    MAX_SQUARE_SIZE: int = 1024

    LOG_LEVEL: str = "INFO"

# Instantiate settings
settings = Settings()
