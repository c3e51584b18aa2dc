"""Tests for configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hostkit.config import HubConfig


class TestHubConfig:
    def test_defaults(self) -> None:
        config = HubConfig()
        assert config.grace_seconds == 5.0
        assert config.max_room_size == 50
        assert config.lock_cache_size == 1024
        assert config.channel_prefix == "presence-room-"

    def test_zero_grace_allowed(self) -> None:
        assert HubConfig(grace_seconds=0).grace_seconds == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"grace_seconds": -1},
            {"max_room_size": 0},
            {"lock_cache_size": 0},
            {"channel_prefix": ""},
        ],
    )
    def test_invalid(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            HubConfig(**kwargs)  # type: ignore[arg-type]
