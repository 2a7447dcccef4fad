"""Tests for the OpenAI analysis adapter."""

import asyncio
import json

import httpx
import pytest
from openai import AsyncOpenAI

from nutrivision.adapters.openai_analysis_client import OpenAIAnalysisClient
from nutrivision.services.analysis import DecodingParams
from nutrivision.services.credentials import CredentialPool, round_robin_selector

DECODING = DecodingParams(temperature=0.0, top_p=0.0, seed=42)


def _message(content: str | None):  # type: ignore[no-untyped-def]
    message = type("Message", (), {"content": content})()
    choice = type("Choice", (), {"message": message})()
    return type("Resp", (), {"choices": [choice]})()


class _FakeCompletions:
    def __init__(self, content: str | None) -> None:
        self.content = content
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return _message(self.content)


class _FakeOpenAI:
    def __init__(self, content: str | None) -> None:
        self.chat = type("Chat", (), {})()
        self.chat.completions = _FakeCompletions(content)


def _client(
    content: str | None, keys: list[str] | None = None
) -> tuple[OpenAIAnalysisClient, dict[str, _FakeOpenAI]]:
    created: dict[str, _FakeOpenAI] = {}

    def factory(api_key: str) -> _FakeOpenAI:
        created[api_key] = _FakeOpenAI(content)
        return created[api_key]

    client = OpenAIAnalysisClient(
        model="gpt-4o-mini",
        credentials=CredentialPool(keys or ["key-a"], selector=round_robin_selector()),
        client_factory=factory,
    )
    return client, created


def test_generate_json_sends_strict_schema_and_decoding() -> None:
    client, created = _client(json.dumps({"calories": 100}))

    result = asyncio.run(
        client.generate_json(
            prompt="Analyze",
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            schema={"type": "object"},
            schema_name="food_analysis",
            decoding=DECODING,
        )
    )

    assert result == {"calories": 100}
    payload = created["key-a"].chat.completions.last_payload
    assert payload["model"] == "gpt-4o-mini"
    assert payload["temperature"] == 0.0
    assert payload["top_p"] == 0.0
    assert payload["seed"] == 42
    assert payload["response_format"]["json_schema"]["strict"] is True
    assert payload["response_format"]["json_schema"]["name"] == "food_analysis"
    content = payload["messages"][0]["content"]
    assert content[0]["image_url"]["url"].startswith("data:image/jpeg")
    assert content[1] == {"type": "text", "text": "Analyze"}


def test_generate_json_without_image_sends_text_only() -> None:
    client, created = _client(json.dumps({}))

    asyncio.run(
        client.generate_json(
            prompt="Recalculate",
            image_data_url=None,
            schema={"type": "object"},
            schema_name="recalculation",
            decoding=DECODING,
        )
    )

    content = created["key-a"].chat.completions.last_payload["messages"][0]["content"]
    assert content == [{"type": "text", "text": "Recalculate"}]


def test_generate_json_empty_output_raises() -> None:
    client, _ = _client(None)

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.generate_json(
                prompt="Analyze",
                image_data_url=None,
                schema={"type": "object"},
                schema_name="food_analysis",
                decoding=DECODING,
            )
        )


def test_generate_text_returns_message_content() -> None:
    client, created = _client("Eat more greens.")

    text = asyncio.run(client.generate_text(prompt="Advise", decoding=DECODING))

    assert text == "Eat more greens."
    assert "response_format" not in created["key-a"].chat.completions.last_payload


def test_keys_rotate_and_sdk_clients_are_reused() -> None:
    client, created = _client("ok", keys=["key-a", "key-b"])

    for _ in range(4):
        asyncio.run(client.generate_text(prompt="Advise", decoding=DECODING))

    assert sorted(created) == ["key-a", "key-b"]


def test_generate_json_through_sdk_transport() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "id": "chatcmpl-1",
                "object": "chat.completion",
                "created": 0,
                "model": "gpt-4o-mini",
                "choices": [
                    {
                        "index": 0,
                        "finish_reason": "stop",
                        "message": {
                            "role": "assistant",
                            "content": json.dumps({"calories": 55}),
                        },
                    }
                ],
            },
        )

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = OpenAIAnalysisClient(
        model="gpt-4o-mini",
        credentials=CredentialPool(["key-a"]),
        client_factory=lambda key: AsyncOpenAI(api_key=key, http_client=http_client),
        http_client=http_client,
    )

    async def scenario() -> dict[str, object]:
        try:
            return await client.generate_json(
                prompt="Analyze",
                image_data_url=None,
                schema={"type": "object"},
                schema_name="food_analysis",
                decoding=DECODING,
            )
        finally:
            await client.close()

    assert asyncio.run(scenario()) == {"calories": 55}
    assert seen[0].url.path.endswith("/chat/completions")
    assert seen[0].headers["authorization"] == "Bearer key-a"
    assert json.loads(seen[0].content)["seed"] == 42
