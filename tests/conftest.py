"""Shared test fixtures."""

from __future__ import annotations

import pytest

from factories import USER_ID
from goodgrid.progression.memory_store import InMemoryProgressionStore
from goodgrid.progression.orchestrator import ProgressionOrchestrator
from goodgrid.progression.schemas import UserStats
from goodgrid.progression.seed import default_badges, default_dungeons, default_zones


@pytest.fixture
def store() -> InMemoryProgressionStore:
    """In-memory store loaded with the default catalog and one fresh user."""
    store = InMemoryProgressionStore(default_badges(), default_zones(), default_dungeons())
    store.add_user(UserStats.initial(USER_ID))
    return store


@pytest.fixture
def orchestrator(store: InMemoryProgressionStore) -> ProgressionOrchestrator:
    return ProgressionOrchestrator(store, store, store)
