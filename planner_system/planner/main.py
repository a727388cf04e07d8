from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from planner.api.deps import build_registry
from planner.api.routes import router
from planner.core.services import ServiceRegistry
from planner.db.session import engine as default_engine, init_db
import planner.tools.create_plan  # noqa: F401  (registers the tool)


def create_app(services: Optional[ServiceRegistry] = None, engine: Optional[AsyncEngine] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(engine or default_engine)
        app.state.services = services or build_registry()
        yield

    app = FastAPI(title="Task Planner API", version="0.1.0", lifespan=lifespan)
    app.include_router(router, prefix="/v1")
    return app


app = create_app()
