"""Per-call revalidation options."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from swrcache.config import Settings


class SwrOptions(BaseModel):
    """Options for a single fetch call.

    Unset fields fall back to the defaults of the cache handling the call.
    Intervals are in seconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Below this age a second call piggybacks on the in-flight request
    deduping_interval: float | None = Field(default=None, ge=0)
    # Beyond this age cached data must be refetched before being served
    cache_time: float | None = Field(default=None, ge=0)
    revalidate_on_focus: bool | None = None
    revalidate_on_reconnect: bool | None = None

    def merged(self, defaults: SwrOptions) -> SwrOptions:
        """Fill unset fields from defaults."""
        overrides = self.model_dump(exclude_none=True)
        return defaults.model_copy(update=overrides)

    @classmethod
    def from_settings(cls, settings: Settings) -> SwrOptions:
        return cls(
            deduping_interval=settings.deduping_interval,
            cache_time=settings.cache_time,
            revalidate_on_focus=settings.revalidate_on_focus,
            revalidate_on_reconnect=settings.revalidate_on_reconnect,
        )
