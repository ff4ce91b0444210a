"""Runtime configuration for MC Routines."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="MC_ROUTINES_", env_file=".env", extra="ignore")

    app_name: str = "mc-routines"
    log_level: str = "INFO"
    stuck_check_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long the agent may stay idle in place before an action is judged stuck.",
    )
    stuck_position_tolerance: float = Field(default=0.005, ge=0)
    block_search_distance: float = Field(default=50.0, gt=0)
    item_search_distance: float = Field(default=50.0, gt=0)
    entity_search_distance: float | None = Field(default=None, gt=0)
    drop_collection_wait_ticks: int = Field(default=25, ge=0)
    routine_max_retries: int = Field(default=2, ge=0, le=10)
    routine_retry_delay_seconds: float = Field(default=0.5, ge=0)
    routine_timeout_seconds: float | None = Field(default=None, gt=0)
    demo_time_scale: float = Field(
        default=0.01,
        gt=0,
        description="Multiplier applied to simulated tick and dig durations in the demo world.",
    )


settings = Settings()
