"""Unit tests for the chat clients and JSON extraction."""

from __future__ import annotations

import json

import httpx
import pytest

from planner.llm.client import ChatClient, GroqChatClient, LLMError, MockChatClient
from planner.llm.json_parse import extract_json
from planner.llm.schemas import (
    MalformedPlan,
    ValidatedPlan,
    classify_plan,
    task_plan_schema,
)


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _groq(handler, **kwargs) -> GroqChatClient:
    return GroqChatClient(
        api_key=kwargs.pop("api_key", "test-key"),
        base_url="https://groq.test/openai/v1/",
        model="test-model",
        backoff_base=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class ScriptedClient(ChatClient):
    def __init__(self, *answers: str):
        super().__init__("scripted", "scripted")
        self.answers = list(answers)
        self.requests = []

    async def chat(self, messages):
        self.requests.append(messages)
        return self.answers.pop(0)


# ---------------------------------------------------------------------------
# extract_json
# ---------------------------------------------------------------------------


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json('{"subtasks": ["a"]}') == {"subtasks": ["a"]}

    def test_code_fence(self):
        assert extract_json('```json\n{"subtasks": ["a"]}\n```') == {"subtasks": ["a"]}

    def test_leading_prose_and_trailing_garbage(self):
        assert extract_json('Sure! {"subtasks": ["a"]} hope this helps}') == {"subtasks": ["a"]}

    def test_null(self):
        assert extract_json(" null ") is None

    def test_no_json(self):
        with pytest.raises(ValueError):
            extract_json("nothing to see")


# ---------------------------------------------------------------------------
# Plan schema / classification
# ---------------------------------------------------------------------------


class TestPlanSchema:
    def test_schema_shape(self):
        assert task_plan_schema(7).as_json_schema() == {
            "type": "object",
            "properties": {
                "subtasks": {
                    "type": "array",
                    "items": {"type": "string", "description": "A clear, atomic subtask"},
                    "maxItems": 7,
                    "minItems": 1,
                }
            },
        }

    def test_classify_validated(self):
        plan = classify_plan({"subtasks": ["a", 2]})
        assert isinstance(plan, ValidatedPlan)
        assert plan.subtasks == ["a", "2"]

    @pytest.mark.parametrize("raw", [None, [], "text", {"subtasks": None}, {"subtasks": {"a": 1}}])
    def test_classify_malformed(self, raw):
        plan = classify_plan(raw)
        assert isinstance(plan, MalformedPlan)
        assert plan.raw == raw


# ---------------------------------------------------------------------------
# generate_object
# ---------------------------------------------------------------------------


class TestGenerateObject:
    @pytest.mark.asyncio
    async def test_decodes_first_answer(self):
        client = ScriptedClient('{"subtasks": ["a"]}')
        value, info = await client.generate_object([{"role": "user", "content": "hi"}], task_plan_schema(3))
        assert value == {"subtasks": ["a"]}
        assert info.calls == 1 and info.repaired is False
        assert client.requests[0][-1] == {"role": "user", "content": "hi"}

    @pytest.mark.asyncio
    async def test_repair_round(self):
        client = ScriptedClient("Here is the plan: Outline then Draft", '{"subtasks": ["Outline", "Draft"]}')
        value, info = await client.generate_object([], {"type": "object"})
        assert value == {"subtasks": ["Outline", "Draft"]}
        assert info.calls == 2 and info.repaired is True
        assert "Here is the plan" in client.requests[1][1]["content"]

    @pytest.mark.asyncio
    async def test_gives_up_with_none(self):
        client = ScriptedClient("nope", "still nope")
        value, info = await client.generate_object([], {"type": "object"})
        assert value is None
        assert info.calls == 2

    @pytest.mark.asyncio
    async def test_rejects_unknown_schema_type(self):
        with pytest.raises(TypeError):
            await ScriptedClient("{}").generate_object([], 42)

    @pytest.mark.asyncio
    async def test_mock_callable_response(self):
        client = MockChatClient(lambda messages: {"echo": messages[-1]["content"]})
        value, _ = await client.generate_object([{"role": "user", "content": "ping"}], {"type": "object"})
        assert value == {"echo": "ping"}


# ---------------------------------------------------------------------------
# Groq transport
# ---------------------------------------------------------------------------


class TestGroqChatClient:
    @pytest.mark.asyncio
    async def test_posts_chat_completion(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_completion('{"subtasks": ["a"]}'))

        client = _groq(handler)
        text = await client.chat([{"role": "user", "content": "hi"}])

        assert text == '{"subtasks": ["a"]}'
        (req,) = seen
        assert str(req.url) == "https://groq.test/openai/v1/chat/completions"
        assert req.headers["Authorization"] == "Bearer test-key"
        body = json.loads(req.content)
        assert body["model"] == "test-model"
        assert body["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_retries_transient_status(self):
        statuses = [503, 429, 200]

        def handler(request):
            status = statuses.pop(0)
            if status != 200:
                return httpx.Response(status, text="busy")
            return httpx.Response(200, json=_completion("ok"))

        assert await _groq(handler).chat([]) == "ok"
        assert statuses == []

    @pytest.mark.asyncio
    async def test_retries_transport_errors_then_gives_up(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(LLMError, match="after retries"):
            await _groq(handler).chat([])
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401, text="bad key")

        with pytest.raises(LLMError, match="Groq error 401"):
            await _groq(handler).chat([])
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retries_non_json_body(self):
        bodies = ["<html>bad gateway</html>", None]

        def handler(request):
            body = bodies.pop(0)
            if body is not None:
                return httpx.Response(200, text=body)
            return httpx.Response(200, json=_completion("ok"))

        assert await _groq(handler).chat([]) == "ok"
        assert bodies == []

    @pytest.mark.asyncio
    async def test_non_json_body_gives_up_as_llm_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(LLMError, match="non-JSON body"):
            await _groq(handler).chat([])
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        with pytest.raises(LLMError, match="Unexpected Groq response"):
            await _groq(lambda r: httpx.Response(200, json={"choices": []})).chat([])

    @pytest.mark.asyncio
    async def test_missing_key(self):
        client = _groq(lambda r: httpx.Response(200, json=_completion("x")), api_key="")
        assert client.is_online() is False
        with pytest.raises(LLMError, match="Missing GROQ_API_KEY"):
            await client.chat([])

    @pytest.mark.asyncio
    async def test_generate_object_end_to_end(self):
        answer = '```json\n{"subtasks": ["Outline", "Draft"]}\n```'
        client = _groq(lambda r: httpx.Response(200, json=_completion(answer)))
        value, info = await client.generate_object([], task_plan_schema(5))
        assert value == {"subtasks": ["Outline", "Draft"]}
        assert info.model == "test-model"
