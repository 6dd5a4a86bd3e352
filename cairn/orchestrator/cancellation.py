"""Single-flight backend requests with explicit cancellation handles.

A session has at most one outstanding backend call, generation or scrape.
Issuing a call returns a CancellationHandle which the session holds until
the call completes, fails or is cancelled.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from cairn.errors import ReentrantRequestError

if TYPE_CHECKING:
    from cairn.orchestrator.session import SessionState

T = TypeVar("T")


class RequestKind(str, Enum):
    """Which backend a request goes to."""

    GENERATION = "generation"
    SCRAPE = "scrape"


class RequestCancelled(Exception):
    """The in-flight request was cancelled through its handle."""


class CancellationHandle:
    """Handle on one in-flight backend call."""

    def __init__(self, kind: RequestKind, task: "asyncio.Task[Any]") -> None:
        self.kind = kind
        self.task = task
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self.task.done()

    def cancel(self) -> None:
        """Abort the call. A result that already arrived is discarded."""
        self._cancelled = True
        self.task.cancel()


def ensure_idle(state: "SessionState") -> None:
    """Raise ReentrantRequestError if a backend call is outstanding."""
    if state.inflight is not None:
        raise ReentrantRequestError(state.inflight.kind.value)


def start_request(
    state: "SessionState",
    kind: RequestKind,
    call: Callable[[], Awaitable[T]],
) -> CancellationHandle:
    """Issue `call` as the session's in-flight request.

    Synchronous: the handle is installed before control returns to the event
    loop, so no other request can slip in between.
    """
    ensure_idle(state)
    task = asyncio.ensure_future(call())
    handle = CancellationHandle(kind, task)
    state.inflight = handle
    state.error = None
    return handle


async def await_request(state: "SessionState", handle: CancellationHandle) -> Any:
    """Wait for a request issued with start_request.

    Raises:
        RequestCancelled: If the handle was cancelled, even if a result arrived
        ProviderError: Whatever the backend raised
    """
    try:
        result = await handle.task
    except asyncio.CancelledError:
        if handle.cancelled:
            raise RequestCancelled() from None
        raise
    finally:
        if state.inflight is handle:
            state.inflight = None
    if handle.cancelled:
        raise RequestCancelled()
    return result


def cancel_request(state: "SessionState") -> bool:
    """Cancel the in-flight request, if any, and release the slot."""
    handle = state.inflight
    if handle is None:
        return False
    handle.cancel()
    state.inflight = None
    return True
