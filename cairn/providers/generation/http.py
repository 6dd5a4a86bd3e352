"""HTTP client for the generation endpoint.

Request body: {"messages": [{role, content}], "currentModules": [...],
"migrationState": {sourceUrl, platform} | null}.
Response body: {"message": str, "toolCall": {name, arguments} | null} or
{"error": str}.
"""

import json
from typing import Any

import httpx

from cairn.conversation.models import Role, ToolCall
from cairn.observability.logging import get_logger
from cairn.providers.errors import (
    BackendUnavailableError,
    InvalidResponseError,
    ProviderError,
    RateLimitError,
)
from cairn.providers.generation.base import (
    GenerationBackend,
    GenerationRequest,
    GenerationResponse,
)

logger = get_logger(__name__)

_ROLE_NAMES = {Role.USER: "user", Role.AGENT: "assistant"}


class HttpGenerationBackend(GenerationBackend):
    """Generation backend reached over HTTP."""

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "HttpGenerationBackend":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    @staticmethod
    def _payload(request: GenerationRequest) -> dict[str, Any]:
        migration = request.migration_context
        return {
            "messages": [
                {"role": _ROLE_NAMES[turn.role], "content": turn.content}
                for turn in request.conversation_history
            ],
            "currentModules": request.current_capabilities,
            "migrationState": (
                {"sourceUrl": migration.source_url, "platform": migration.platform}
                if migration
                else None
            ),
        }

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        try:
            response = await self._client.post(
                self._url, json=self._payload(request), headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise BackendUnavailableError(f"Generation request failed: {e}", cause=e) from e

        if response.status_code == 429:
            raise RateLimitError("Generation backend rate limit exceeded")

        try:
            data = response.json()
        except ValueError as e:
            if response.status_code >= 400:
                raise BackendUnavailableError(
                    f"Generation backend returned {response.status_code}"
                ) from e
            raise InvalidResponseError("Generation response is not JSON", cause=e) from e

        if not isinstance(data, dict):
            raise InvalidResponseError("Generation response is not an object")
        if data.get("error"):
            raise ProviderError(str(data["error"]))
        if response.status_code >= 400:
            raise BackendUnavailableError(f"Generation backend returned {response.status_code}")

        return GenerationResponse(
            message=str(data.get("message") or ""),
            tool_call=self._parse_tool_call(data.get("toolCall")),
        )

    @staticmethod
    def _parse_tool_call(raw: Any) -> ToolCall | None:
        if raw is None:
            return None
        if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
            raise InvalidResponseError("toolCall must be an object with a name")

        arguments = raw.get("arguments") or {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError as e:
                raise InvalidResponseError("toolCall arguments are not valid JSON", cause=e) from e
        if not isinstance(arguments, dict):
            raise InvalidResponseError("toolCall arguments must be an object")

        logger.debug("generation_tool_call_received", tool_name=raw["name"])
        return ToolCall(name=raw["name"], arguments=arguments)
