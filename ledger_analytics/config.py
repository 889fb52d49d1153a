"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "ledger-analytics"
    log_level: str = "INFO"

    # Engine defaults (per-request overrides allowed for window and top-K)
    monthly_window: int = 6
    heatmap_top_k: int = 5
    recent_transactions_limit: int = 5
    default_category: str = "Outros"
    category_color_policy: str = "rank"  # rank | hash

    # Requests above this size are rejected; callers should page or cap
    max_entries_per_request: int = 50_000


settings = Settings()
