from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SWR_", env_file=".env", extra="ignore")

    # Revalidation defaults (seconds), overridable per fetch call
    deduping_interval: float = Field(default=2.0, ge=0)
    cache_time: float = Field(default=300.0, ge=0)
    background_refresh_ratio: float = Field(default=0.5, ge=0, le=1)

    # Environment triggers
    revalidate_on_focus: bool = True
    revalidate_on_reconnect: bool = True
    # Entries older than this are signalled on regain-focus; longer than cache_time
    focus_stale_after: float = Field(default=600.0, ge=0)

    # Observability
    enable_metrics: bool = True
    log_level: str = "INFO"
    log_json: bool = False

    @model_validator(mode="after")
    def _validate_focus_threshold(self) -> Settings:
        """Require the long-stale focus threshold to exceed cache_time."""
        if self.focus_stale_after <= self.cache_time:
            raise ValueError(
                f"focus_stale_after ({self.focus_stale_after}) must be longer than "
                f"cache_time ({self.cache_time})"
            )
        return self


settings = Settings()
