"""Shared fixtures: a throwaway SQLite attention store and scripted model clients."""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from planner.agent.memory import MemoryService
from planner.core.services import ServiceRegistry
from planner.db.session import init_db
from planner.llm.models import ModelRegistry


def make_engine(tmp_path: Path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'planner.db'}", poolclass=NullPool)


@pytest_asyncio.fixture
async def memory(tmp_path: Path) -> MemoryService:
    engine = make_engine(tmp_path)
    await init_db(engine)
    yield MemoryService(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


@pytest.fixture
def services(memory: MemoryService):
    """Build a ServiceRegistry around the memory fixture and the given clients."""

    def _build(*clients) -> ServiceRegistry:
        return ServiceRegistry(memory, ModelRegistry(clients))

    return _build
