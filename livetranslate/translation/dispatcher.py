"""Correlation of in-flight requests across an asynchronous execution boundary.

Responsibilities:
- Hand requests to a transport that completes them out of line.
- Match each result back to its waiting caller by a unique request id.
- Tolerate out-of-order completion and ignore results for unknown ids.

Key types:
- `AsyncDispatcher`: owns the `id -> future` table for pending requests.
- `InlineTransport`: completes requests on the event loop itself.
- `WorkerTransport`: completes requests on a thread pool and posts results
  back to the loop thread-safely.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Protocol
import uuid

ResultCallback = Callable[[str, Any, "BaseException | None"], None]
RequestHandler = Callable[[Any], Any]


class DispatchTransport(Protocol):
    """Protocol for the execution context behind the async boundary."""

    def dispatch(self, request_id: str, payload: Any, on_result: ResultCallback) -> None:
        """Start executing `payload`; report completion through `on_result` once."""

    def close(self) -> None:
        """Release transport resources."""


class InlineTransport:
    """Run the handler on the event loop in a later callback."""

    def __init__(self, handler: RequestHandler) -> None:
        self._handler = handler

    def dispatch(self, request_id: str, payload: Any, on_result: ResultCallback) -> None:
        asyncio.get_running_loop().call_soon(self._execute, request_id, payload, on_result)

    def _execute(self, request_id: str, payload: Any, on_result: ResultCallback) -> None:
        try:
            value = self._handler(payload)
        except Exception as exc:
            on_result(request_id, None, exc)
            return
        on_result(request_id, value, None)

    def close(self) -> None:
        return None


class WorkerTransport:
    """Run the handler on worker threads, posting results back to the loop."""

    def __init__(self, handler: RequestHandler, max_workers: int = 4) -> None:
        self._handler = handler
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="livetranslate-worker",
        )

    def dispatch(self, request_id: str, payload: Any, on_result: ResultCallback) -> None:
        loop = asyncio.get_running_loop()
        job = self._executor.submit(self._handler, payload)

        def _post_result(completed: Future[Any]) -> None:
            if completed.cancelled():
                return
            error = completed.exception()
            value = None if error is not None else completed.result()
            if not loop.is_closed():
                loop.call_soon_threadsafe(on_result, request_id, value, error)

        job.add_done_callback(_post_result)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


def _new_request_id() -> str:
    return uuid.uuid4().hex


class AsyncDispatcher:
    """Track pending requests by id and settle them when results arrive."""

    def __init__(
        self,
        transport: DispatchTransport,
        id_factory: Callable[[], str] = _new_request_id,
    ) -> None:
        self._transport = transport
        self._id_factory = id_factory
        self._pending: dict[str, asyncio.Future[Any]] = {}

    @property
    def pending_count(self) -> int:
        """Return the number of requests still waiting for a result."""

        return len(self._pending)

    def dispatch(self, request_id: str, payload: Any) -> asyncio.Future[Any]:
        """Register a pending entry for `request_id` and send the payload.

        Raises:
            ValueError: If a request with the same id is still pending.
        """

        if request_id in self._pending:
            raise ValueError(f"Request id `{request_id}` is already pending.")
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            self._transport.dispatch(request_id, payload, self.on_result)
        except Exception:
            self._pending.pop(request_id, None)
            raise
        return future

    def on_result(
        self,
        request_id: str,
        value: Any = None,
        error: BaseException | None = None,
    ) -> None:
        """Settle the pending entry for `request_id`; unknown ids are ignored."""

        future = self._pending.pop(request_id, None)
        if future is None or future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(value)

    async def submit(self, payload: Any) -> Any:
        """Dispatch `payload` under a fresh id and await its result."""

        request_id = self._id_factory()
        future = self.dispatch(request_id, payload)
        try:
            return await future
        finally:
            # Drops the entry when the awaiting task is cancelled first.
            self._pending.pop(request_id, None)

    def close(self) -> None:
        """Close the transport and cancel anything still pending."""

        self._transport.close()
        for future in self._pending.values():
            if not future.done():
                future.cancel()
        self._pending.clear()
