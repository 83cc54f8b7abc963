"""Async coordination primitives used by the config loader."""

from __future__ import annotations

import asyncio
import enum
from collections import deque
from collections.abc import Awaitable, Callable, Hashable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class FlightState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    DONE = "done"


class SingleFlight(Generic[T]):
    """Run one computation and broadcast its outcome to every caller.

    The first caller of :meth:`run` becomes the driver and executes the
    computation. Callers arriving while it runs enqueue a future and are
    resumed in FIFO order once the outcome is committed. Later callers get
    the committed outcome immediately. The computation never runs twice,
    including after a failure.
    """

    __slots__ = ("_error", "_result", "_runs", "_state", "_waiters")

    def __init__(self) -> None:
        self._state = FlightState.NOT_STARTED
        self._waiters: deque[asyncio.Future[T]] = deque()
        self._result: T | None = None
        self._error: BaseException | None = None
        self._runs = 0

    @property
    def state(self) -> FlightState:
        return self._state

    @property
    def runs(self) -> int:
        """Number of times the computation has been started (0 or 1)."""
        return self._runs

    @property
    def waiting(self) -> int:
        return len(self._waiters)

    async def run(self, compute: Callable[[], Awaitable[T]]) -> T:
        if self._state is FlightState.DONE:
            return self._outcome()

        if self._state is FlightState.RUNNING:
            waiter: asyncio.Future[T] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            return await waiter

        self._state = FlightState.RUNNING
        self._runs += 1
        try:
            result = await compute()
        except BaseException as exc:
            self._error = exc
            self._state = FlightState.DONE
            self._release()
            raise

        self._result = result
        self._state = FlightState.DONE
        self._release()
        return result

    def _outcome(self) -> T:
        if self._error is not None:
            raise self._error
        return self._result  # type: ignore[return-value]

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            if self._error is not None:
                waiter.set_exception(self._error)
            else:
                waiter.set_result(self._result)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class JoinResult(Generic[K, T]):
    """Outcome of :func:`join_all`: successful values and failures, both keyed."""

    values: dict[K, T]
    errors: dict[K, BaseException]

    @property
    def ok(self) -> bool:
        return not self.errors


async def join_all(tasks: Mapping[K, asyncio.Task[T]]) -> JoinResult[K, T]:
    """Wait for every task and partition the outcomes.

    Every task runs to completion; a failure in one does not cancel its
    siblings. Exceptions are retrieved so none is reported as unhandled.
    Key order of ``tasks`` is preserved in both result mappings.
    """

    if tasks:
        await asyncio.wait(tasks.values(), return_when=asyncio.ALL_COMPLETED)

    values: dict[K, T] = {}
    errors: dict[K, BaseException] = {}
    for key, task in tasks.items():
        if task.cancelled():
            errors[key] = asyncio.CancelledError(f"task for {key!r} was cancelled")
            continue
        exc = task.exception()
        if exc is not None:
            errors[key] = exc
            continue
        values[key] = task.result()
    return JoinResult(values=values, errors=errors)


__all__ = [
    "FlightState",
    "JoinResult",
    "SingleFlight",
    "join_all",
]
