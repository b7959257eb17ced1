"""Application configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config from environment. Never hardcode secrets."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Database (single-user, local by default)
    database_url: str = Field(default="sqlite+aiosqlite:///./tradejournal.db")

    # Redis (coach notes cache)
    redis_url: str = Field(default="redis://localhost:6379/0")
    coach_cache_ttl_seconds: int = Field(default=3600)

    # AI coach
    anthropic_api_key: str = Field(default="")
    coach_model: str = Field(default="claude-sonnet-4-6")
    coach_max_tokens: int = Field(default=600)

    # Journal
    history_window: int = Field(default=10)  # closed trades scanned for repeated patterns
    default_trade_limit: int = Field(default=50)

    # App
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")


settings = Settings()
