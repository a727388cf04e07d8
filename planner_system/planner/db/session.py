from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from planner.core.config import settings
from planner.db.base import Base
from planner.db import models  # noqa: F401

engine = create_async_engine(settings.DATABASE_URL, echo=False, future=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def init_db(bind: AsyncEngine = engine):
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
