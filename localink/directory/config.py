"""
Directory configuration: seed data location, listing cache and review throttling.
"""

import os
from dataclasses import dataclass
from pathlib import Path

_SEED_DIR = Path(__file__).resolve().parent.parent / "data" / "seed"


@dataclass(frozen=True)
class DirectoryConfig:
    seed_dir: Path = Path(os.getenv("LOCALINK_SEED_DIR", str(_SEED_DIR)))
    businesses_filename: str = "businesses.csv"
    deals_filename: str = "deals.csv"
    cache_ttl_seconds: float = float(os.getenv("LOCALINK_CACHE_TTL", "5"))
    review_cooldown_seconds: int = 30

    @property
    def businesses_path(self) -> Path:
        return self.seed_dir / self.businesses_filename

    @property
    def deals_path(self) -> Path:
        return self.seed_dir / self.deals_filename


DEFAULT_DIRECTORY_CONFIG = DirectoryConfig()
