from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class OverpassConfig:
    api_url: str = os.getenv("OVERPASS_API_URL", "https://overpass-api.de/api/interpreter")
    timeout: float = float(os.getenv("OVERPASS_TIMEOUT", "25"))
    default_city: str = os.getenv("LOCALINK_DEFAULT_CITY", "Toronto")
    default_region: str = "ON"
    enabled: bool = os.getenv("OVERPASS_ENABLED", "true").strip().lower() in ("1", "true", "yes")


DEFAULT_OVERPASS_CONFIG = OverpassConfig()
