"""
Model registry and it does:
- Keeps the configured chat clients
- Picks the first online client matching capability tags
- Supports level filters such as "reasoning>=3"

Main purpose:
Route a request to a model that can handle it.
"""


import operator
import re
from typing import Callable, Iterable, Optional

from planner.core.config import settings
from planner.core.logging import get_logger
from planner.llm.client import ChatClient, GroqChatClient, MockChatClient

log = get_logger("llm.models")

_OPS: dict[str, Callable[[int, int], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    ">": operator.gt,
    "<": operator.lt,
}
_CLAUSE = re.compile(r"^\s*([A-Za-z_][\w-]*)\s*(>=|<=|==|>|<)\s*(-?\d+)\s*$")


class NoOnlineClientError(LookupError):
    pass


def parse_filter(expr: str) -> list[tuple[str, str, int]]:
    """`"reasoning>=3, speed>1"` -> [("reasoning", ">=", 3), ("speed", ">", 1)]"""
    clauses = []
    for part in (expr or "").split(","):
        if not part.strip():
            continue
        m = _CLAUSE.match(part)
        if not m:
            raise ValueError(f"Invalid model filter clause: {part.strip()!r}")
        clauses.append((m.group(1), m.group(2), int(m.group(3))))
    return clauses


def _matches(client: ChatClient, tags: Iterable[str], clauses: list[tuple[str, str, int]]) -> bool:
    if not set(tags) <= client.tags:
        return False
    return all(_OPS[op](client.capabilities.get(name, 0), level) for name, op, level in clauses)


class ModelRegistry:
    def __init__(self, clients: Iterable[ChatClient] = ()):
        self._clients: list[ChatClient] = []
        for c in clients:
            self.register(c)

    def register(self, client: ChatClient) -> ChatClient:
        if any(c.name == client.name for c in self._clients):
            raise ValueError(f"Model client already registered: {client.name}")
        self._clients.append(client)
        return client

    def list_clients(self) -> list[ChatClient]:
        return list(self._clients)

    def get_first_online_client(
        self, tags: Optional[Iterable[str]] = None, where: Optional[str] = None
    ) -> ChatClient:
        tags = list(tags or [])
        clauses = parse_filter(where or "")
        for client in self._clients:
            if _matches(client, tags, clauses) and client.is_online():
                log.info(f"Selected model client {client.name} ({client.model})")
                return client
        wanted = []
        if tags:
            wanted.append(f"tags={','.join(tags)}")
        if where:
            wanted.append(f"where={where}")
        raise NoOnlineClientError(f"No online client available ({'; '.join(wanted) or 'any'})")


def _parse_csv(value: str) -> list[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _parse_levels(value: str) -> dict[str, int]:
    levels = {}
    for item in _parse_csv(value):
        name, _, level = item.partition("=")
        levels[name.strip()] = int(level or 1)
    return levels


def build_model_registry() -> ModelRegistry:
    provider = (settings.LLM_PROVIDER or "").lower().strip()
    tags = _parse_csv(settings.LLM_TAGS)
    capabilities = _parse_levels(settings.LLM_CAPABILITIES)

    if provider == "mock":
        client: ChatClient = MockChatClient(tags=tags, capabilities=capabilities)
    elif provider == "groq":
        client = GroqChatClient(
            api_key=settings.GROQ_API_KEY,
            base_url=settings.GROQ_BASE_URL,
            model=settings.LLM_MODEL,
            tags=tags,
            capabilities=capabilities,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
    else:
        raise ValueError(f"Unsupported LLM_PROVIDER={settings.LLM_PROVIDER}. Use groq or mock.")

    return ModelRegistry([client])
