"""
Chat model clients and it does:
- Sends prompts to the model provider (Groq, OpenAI-compatible API)
- Asks for output shaped by a JSON schema
- Handles retries and parsing, with one repair round for broken JSON

Main purpose:
Structured generation for tools that need a JSON answer from a model.
"""


import asyncio
import json
from typing import Any, Callable, Iterable, Optional, Tuple, Union

import httpx
from pydantic import BaseModel

from planner.core.logging import get_logger
from planner.llm.json_parse import extract_json
from planner.llm.prompts import JSON_REPAIR_SYSTEM, STRUCTURED_OUTPUT_RULES, json_repair_user

log = get_logger("llm.client")

RETRY_STATUSES = (429, 500, 502, 503, 504)


class LLMError(RuntimeError):
    pass


class GenerationInfo(BaseModel):
    model: str
    calls: int = 1
    repaired: bool = False


def _safe_snippet(text: str, n: int = 400) -> str:
    return (text or "")[:n].replace("\n", "\\n").replace("\r", "\\r")


def schema_to_dict(schema: Any) -> dict:
    if hasattr(schema, "as_json_schema"):
        return schema.as_json_schema()
    if isinstance(schema, BaseModel):
        return schema.model_dump(by_alias=True)
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return schema.model_json_schema()
    if isinstance(schema, dict):
        return schema
    raise TypeError(f"Unsupported schema type: {type(schema).__name__}")


class ChatClient:
    """
    Base for model clients. Subclasses implement `chat`; structured
    generation on top of it is shared.
    """

    def __init__(
        self,
        name: str,
        model: str,
        *,
        tags: Iterable[str] = (),
        capabilities: Optional[dict[str, int]] = None,
    ):
        self.name = name
        self.model = model
        self.tags = frozenset(tags)
        self.capabilities = dict(capabilities or {})

    def is_online(self) -> bool:
        return True

    async def chat(self, messages: list[dict]) -> str:
        raise NotImplementedError

    async def generate_object(
        self, messages: list[dict], schema: Any
    ) -> Tuple[Optional[Any], GenerationInfo]:
        """
        Returns (decoded JSON value, info). The value is None when the model
        answer could not be decoded, even after the repair round.
        """
        schema_text = json.dumps(schema_to_dict(schema), indent=2)
        request = [
            {"role": "system", "content": STRUCTURED_OUTPUT_RULES.format(schema=schema_text)},
            *messages,
        ]

        text = await self.chat(request)
        try:
            return extract_json(text), GenerationInfo(model=self.model)
        except ValueError as e:
            log.warning(f"JSON parse failed ({self.name}): {e}. Snippet={_safe_snippet(text)}. Trying repair...")

        repair = [
            {"role": "system", "content": JSON_REPAIR_SYSTEM},
            {"role": "user", "content": json_repair_user(text, schema_text)},
        ]
        text2 = await self.chat(repair)
        info = GenerationInfo(model=self.model, calls=2, repaired=True)
        try:
            return extract_json(text2), info
        except ValueError as e2:
            log.error(f"JSON repair failed ({self.name}): {e2}. Snippet={_safe_snippet(text2)}")
            return None, info

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, model={self.model!r}, tags={sorted(self.tags)})"


class GroqChatClient(ChatClient):
    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        model: str,
        name: str = "groq",
        tags: Iterable[str] = ("chat",),
        capabilities: Optional[dict[str, int]] = None,
        timeout: float = 40.0,
        max_attempts: int = 3,
        backoff_base: float = 0.6,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(name, model, tags=tags, capabilities=capabilities)
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = httpx.Timeout(timeout, connect=10.0)
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self._transport = transport

    def is_online(self) -> bool:
        return bool(self.api_key)

    async def _backoff(self, attempt: int, msg: str) -> None:
        if attempt + 1 >= self.max_attempts:
            log.warning(f"{msg} (attempt {attempt+1}/{self.max_attempts}, giving up)")
            return
        backoff = self.backoff_base * (2**attempt)
        log.warning(f"{msg}. retrying in {backoff:.1f}s (attempt {attempt+1}/{self.max_attempts})")
        await asyncio.sleep(backoff)

    async def chat(self, messages: list[dict]) -> str:
        if not self.api_key:
            raise LLMError("Missing GROQ_API_KEY. Put it in your .env")

        url = f"{self.base_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.2,
            # JSON mode is not forced; the schema rides in the system prompt and extract_json parses
        }

        last_err: Exception | None = None
        for attempt in range(self.max_attempts):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    r = await client.post(url, headers=headers, json=payload)
            except httpx.HTTPError as e:
                last_err = e
                await self._backoff(attempt, f"Groq call failed: {e}")
                continue

            if r.status_code in RETRY_STATUSES:
                last_err = LLMError(f"Groq transient {r.status_code}: {r.text}")
                await self._backoff(attempt, str(last_err))
                continue

            if r.status_code >= 400:
                raise LLMError(f"Groq error {r.status_code}: {r.text}")

            try:
                data = r.json()
            except ValueError:
                # proxies sometimes answer 200 with an HTML page
                last_err = LLMError(f"Groq returned non-JSON body: {_safe_snippet(r.text)}")
                await self._backoff(attempt, str(last_err))
                continue

            try:
                return data["choices"][0]["message"]["content"]
            except (KeyError, IndexError, TypeError):
                raise LLMError(f"Unexpected Groq response: {data}")

        raise LLMError(f"Groq call failed after retries: {last_err}")


DEFAULT_MOCK_PLAN = {
    "subtasks": [
        "Clarify the goal and success criteria",
        "Collect the inputs and constraints",
        "Draft the first version",
        "Review and refine the draft",
        "Deliver and gather feedback",
    ]
}


class MockChatClient(ChatClient):
    """
    Offline client for no-key dev and tests. `response` is either a fixed
    value or a callable receiving the request messages.
    """

    def __init__(
        self,
        response: Union[Any, Callable[[list[dict]], Any]] = DEFAULT_MOCK_PLAN,
        *,
        name: str = "mock",
        model: str = "mock",
        tags: Iterable[str] = ("chat", "reasoning"),
        capabilities: Optional[dict[str, int]] = None,
        online: bool = True,
    ):
        super().__init__(name, model, tags=tags, capabilities=capabilities)
        self.response = response
        self.online = online
        self.requests: list[list[dict]] = []

    def is_online(self) -> bool:
        return self.online

    async def chat(self, messages: list[dict]) -> str:
        self.requests.append(messages)
        value = self.response(messages) if callable(self.response) else self.response
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)
