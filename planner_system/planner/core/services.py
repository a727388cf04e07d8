"""
Service registry used by tools to find their collaborators.
What it does:
- Holds service instances (memory store, model registry, ...)
- Looks them up by type
- Fails loudly when a required service was never registered

And, the main purpose:
Let tools ask for capabilities instead of constructing them.
"""


from typing import Any, Optional, Type, TypeVar

T = TypeVar("T")


class ServiceNotFoundError(LookupError):
    pass


class ServiceRegistry:
    def __init__(self, *services: Any):
        self._services: list[Any] = []
        self.add_services(*services)

    def add_services(self, *services: Any) -> None:
        for svc in services:
            if svc is None:
                raise ValueError("Cannot register None as a service")
            self._services.append(svc)

    def get_services_by_type(self, cls: Type[T]) -> list[T]:
        return [s for s in self._services if isinstance(s, cls)]

    def get_first_service_by_type(self, cls: Type[T]) -> Optional[T]:
        return next((s for s in self._services if isinstance(s, cls)), None)

    def require_first_service_by_type(self, cls: Type[T]) -> T:
        svc = self.get_first_service_by_type(cls)
        if svc is None:
            raise ServiceNotFoundError(f"Service {cls.__name__} not found")
        return svc
