"""Tests for per-call options."""

import pytest
from pydantic import ValidationError

from swrcache.cache.options import SwrOptions
from swrcache.config import Settings


class TestSwrOptions:
    """Test option resolution."""

    def test_merged_fills_unset_fields(self) -> None:
        """Unset fields fall back to the defaults."""
        defaults = SwrOptions(
            deduping_interval=2.0,
            cache_time=300.0,
            revalidate_on_focus=True,
            revalidate_on_reconnect=True,
        )

        merged = SwrOptions(cache_time=10).merged(defaults)

        assert merged.cache_time == 10
        assert merged.deduping_interval == 2.0
        assert merged.revalidate_on_focus is True

    def test_negative_interval_rejected(self) -> None:
        """Negative intervals fail validation."""
        with pytest.raises(ValidationError):
            SwrOptions(cache_time=-1)

    def test_unknown_field_rejected(self) -> None:
        """Misspelled options are not silently ignored."""
        with pytest.raises(ValidationError):
            SwrOptions(cache_ttl=5)  # type: ignore[call-arg]

    def test_options_are_frozen(self) -> None:
        """Options cannot be changed after construction."""
        options = SwrOptions(cache_time=5)

        with pytest.raises(ValidationError):
            options.cache_time = 6  # type: ignore[misc]

    def test_from_settings(self) -> None:
        """Settings supply the cache-wide defaults."""
        settings = Settings(_env_file=None, deduping_interval=1.5, cache_time=60)

        options = SwrOptions.from_settings(settings)

        assert options.deduping_interval == 1.5
        assert options.cache_time == 60
