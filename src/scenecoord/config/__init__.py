"""Configuration module using Pydantic Settings.

Usage:
    from scenecoord.config import CoordinatorSettings

    settings = CoordinatorSettings(settle_delay=0.25)
"""

from scenecoord.config.settings import CoordinatorSettings

__all__ = [
    "CoordinatorSettings",
]
