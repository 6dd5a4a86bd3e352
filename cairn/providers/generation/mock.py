"""Mock generation backend for tests and development."""

import asyncio
from collections import deque
from collections.abc import Callable

from cairn.conversation.models import ToolCall
from cairn.providers.generation.base import (
    GenerationBackend,
    GenerationRequest,
    GenerationResponse,
)

Responder = Callable[[GenerationRequest], GenerationResponse]


def block_response(block_type: str, message: str = "", **data: object) -> GenerationResponse:
    """Build a response that creates a block of the given type."""
    tool_name = f"create_{block_type.replace('-', '_')}_block"
    return GenerationResponse(
        message=message or f"Here is your {block_type} section.",
        tool_call=ToolCall(name=tool_name, arguments=dict(data) or {"title": block_type}),
    )


class MockGenerationBackend(GenerationBackend):
    """Scripted generation backend.

    Queued responses (or exceptions) are consumed first in FIFO order; after
    that the responder, if any, builds a response from the request, and
    finally the default response is returned. Calls can be held open with
    hold()/release() to observe in-flight behaviour.
    """

    def __init__(
        self,
        default_response: GenerationResponse | None = None,
        responder: Responder | None = None,
    ) -> None:
        self._default_response = default_response or GenerationResponse(message="Mock response")
        self.responder = responder
        self._script: deque[GenerationResponse | Exception] = deque()
        self._call_history: list[GenerationRequest] = []
        self._gate = asyncio.Event()
        self._gate.set()
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def call_history(self) -> list[GenerationRequest]:
        return self._call_history

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    def enqueue(self, *items: GenerationResponse | Exception) -> None:
        self._script.extend(items)

    def hold(self) -> None:
        """Block subsequent calls until release() is called."""
        self._gate.clear()

    def release(self) -> None:
        self._gate.set()

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        self._call_history.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self._gate.wait()
            # Yield once so cancellation and concurrent callers get a chance to run
            await asyncio.sleep(0)
            if self._script:
                item = self._script.popleft()
                if isinstance(item, Exception):
                    raise item
                return item
            if self.responder is not None:
                return self.responder(request)
            return self._default_response
        finally:
            self.in_flight -= 1
