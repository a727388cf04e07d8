"""FastAPI dependency functions for shared state."""

from fastapi import Request

from planner.agent.memory import MemoryService
from planner.core.services import ServiceRegistry
from planner.db.session import SessionLocal
from planner.llm.models import build_model_registry


def build_registry(sessions=SessionLocal) -> ServiceRegistry:
    """Services available to tools: attention memory + configured model clients."""
    return ServiceRegistry(MemoryService(sessions), build_model_registry())


def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services


def get_memory(request: Request) -> MemoryService:
    return get_services(request).require_first_service_by_type(MemoryService)
