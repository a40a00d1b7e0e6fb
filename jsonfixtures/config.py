"""Environment configuration for the shared codec."""

import os
from dataclasses import dataclass

LENIENT_MAPS_ENV = "JSONFIXTURES_LENIENT_MAPS"

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class CodecSettings:
    """Options applied when extensions are built from the registry."""

    lenient_maps: bool = False

    @classmethod
    def from_env(cls) -> "CodecSettings":
        return cls(lenient_maps=env_flag(LENIENT_MAPS_ENV))
