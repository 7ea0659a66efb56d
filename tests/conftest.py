"""Shared test fixtures."""

import pytest

from src.wb_cache.infrastructure.memory_store import MemoryCacheStore
from src.wb_common.background import BackgroundTasks
from src.wb_common.chains import ChainConfig, get_chain_config


@pytest.fixture
def store() -> MemoryCacheStore:
    """Durable cache backend stand-in; JSON round-trips like Redis."""
    return MemoryCacheStore()


@pytest.fixture
async def tasks() -> BackgroundTasks:
    registry = BackgroundTasks()
    yield registry
    await registry.cancel_all()


@pytest.fixture
def base_chain() -> ChainConfig:
    return get_chain_config("base")
