"""Application configuration via Pydantic Settings.

NOTE: We explicitly map the .env variable names (DATABASE_URL, OPENAI_API_KEY,
AI_BATCH_SIZE, etc.) to avoid silent misconfiguration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./ctmap.db",
        validation_alias="DATABASE_URL",
    )

    # Snapshot slot
    snapshot_key: str = Field(default="ctmap-store", validation_alias="SNAPSHOT_KEY")
    snapshot_version: int = Field(default=3, validation_alias="SNAPSHOT_VERSION")

    # OpenAI
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")

    # Allocation rules
    advocate_capacity: int = Field(default=5, validation_alias="ADVOCATE_CAPACITY")
    allocation_due_days: int = Field(default=7, validation_alias="ALLOCATION_DUE_DAYS")
    forfeit_min_details: int = Field(default=20, validation_alias="FORFEIT_MIN_DETAILS")
    forfeit_alert_threshold: int = Field(default=2, validation_alias="FORFEIT_ALERT_THRESHOLD")

    # AI orchestration
    ai_batch_size: int = Field(default=5, validation_alias="AI_BATCH_SIZE")
    ai_batch_delay_ms: int = Field(default=500, validation_alias="AI_BATCH_DELAY_MS")
    # total recommender calls per item, the first one included
    ai_max_attempts: int = Field(default=3, validation_alias="AI_MAX_ATTEMPTS")
    ai_backoff_base_s: float = Field(default=1.0, validation_alias="AI_BACKOFF_BASE_S")
    ai_backoff_cap_s: float = Field(default=8.0, validation_alias="AI_BACKOFF_CAP_S")

    # App
    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
