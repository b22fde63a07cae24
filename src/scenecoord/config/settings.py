"""Configuration settings using Pydantic Settings.

Provides typed coordinator configuration with environment variable support.

Usage:
    from scenecoord.config import CoordinatorSettings

    # Load from environment variables (SCENECOORD_*)
    settings = CoordinatorSettings()

    # Or override with explicit values
    settings = CoordinatorSettings(settle_delay=0.0, tick_interval=1 / 60)
"""

from __future__ import annotations

try:
    from pydantic import Field
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for config module. "
        "Install with: pip install scenecoord"
    ) from e


class CoordinatorSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for the scene coordinator.

    Attributes:
        settle_delay: Seconds to wait after streaming saturates and before
            finalization, so loading screens can play their exit transition.
        completion_threshold: Raw host progress at which streaming is
            considered complete and the host holds pending finalization.
            Observers see progress normalized against this value.
        tick_interval: Seconds slept per scheduler tick while polling the
            host. 0 yields to the event loop for exactly one pass.

    Environment Variables:
        SCENECOORD_SETTLE_DELAY
        SCENECOORD_COMPLETION_THRESHOLD
        SCENECOORD_TICK_INTERVAL
    """

    model_config = SettingsConfigDict(
        env_prefix="SCENECOORD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    settle_delay: float = Field(default=0.5, ge=0.0)
    completion_threshold: float = Field(default=0.9, gt=0.0, le=1.0)
    tick_interval: float = Field(default=0.0, ge=0.0)
