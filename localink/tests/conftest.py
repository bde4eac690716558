from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from localink.analytics.store import EventLog
from localink.app import app
from localink.directory.cache import ListingCache
from localink.directory.seed import load_seed_store
from localink.explore.config import ExploreConfig


@pytest.fixture
def client():
    """A TestClient over a freshly seeded store, with remote fetching disabled."""
    app.state.store = load_seed_store()
    app.state.cache = ListingCache(ttl=0)
    app.state.events = EventLog()
    app.state.fetcher = None
    app.state.explore_config = ExploreConfig(distance_priority=True)
    return TestClient(app)
