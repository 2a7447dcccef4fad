"""OpenAI Chat Completions client for food analysis."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
from openai import AsyncOpenAI

from nutrivision.services.analysis import AnalysisClient, DecodingParams
from nutrivision.services.credentials import CredentialPool

ClientFactory = Callable[[str], AsyncOpenAI]


@dataclass
class OpenAIAnalysisClient(AnalysisClient):
    """Analysis client backed by OpenAI with per-call key selection."""

    model: str
    credentials: CredentialPool
    client_factory: ClientFactory
    http_client: httpx.AsyncClient | None = None
    _clients: dict[str, AsyncOpenAI] = field(default_factory=dict, repr=False)

    @classmethod
    def create(
        cls, model: str, credentials: CredentialPool, timeout: float = 30.0
    ) -> "OpenAIAnalysisClient":
        """Create a client whose per-key SDK instances share one httpx session."""
        http_client = httpx.AsyncClient(timeout=timeout)

        def factory(api_key: str) -> AsyncOpenAI:
            return AsyncOpenAI(api_key=api_key, http_client=http_client)

        return cls(
            model=model,
            credentials=credentials,
            client_factory=factory,
            http_client=http_client,
        )

    async def generate_json(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        image_data_url: str | None,
        schema: dict[str, object],
        schema_name: str,
        decoding: DecodingParams,
    ) -> dict[str, object]:
        """Call Chat Completions with a strict JSON schema response format."""
        content: list[dict[str, object]] = []
        if image_data_url:
            content.append({"type": "image_url", "image_url": {"url": image_data_url}})
        content.append({"type": "text", "text": prompt})
        response = await self._client().chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            response_format={
                "type": "json_schema",
                "json_schema": {"name": schema_name, "strict": True, "schema": schema},
            },
            temperature=decoding.temperature,
            top_p=decoding.top_p,
            seed=decoding.seed,
        )
        output_text = _first_message_text(response)
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def generate_text(self, *, prompt: str, decoding: DecodingParams) -> str:
        """Call Chat Completions for free-form text."""
        response = await self._client().chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=decoding.temperature,
            top_p=decoding.top_p,
            seed=decoding.seed,
        )
        return _first_message_text(response) or ""

    async def close(self) -> None:
        """Close the shared HTTP session."""
        if self.http_client is not None:
            await self.http_client.aclose()

    def _client(self) -> AsyncOpenAI:
        api_key = self.credentials.next_key()
        client = self._clients.get(api_key)
        if client is None:
            client = self.client_factory(api_key)
            self._clients[api_key] = client
        return client


def _first_message_text(response: object) -> str | None:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    return choices[0].message.content
