import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ExploreConfig:
    default_radius_km: float = 5.0
    # When the user's location is known, distance ordering wins over the
    # selected sort key.
    distance_priority: bool = _env_flag("LOCALINK_DISTANCE_PRIORITY", True)


DEFAULT_EXPLORE_CONFIG = ExploreConfig()
