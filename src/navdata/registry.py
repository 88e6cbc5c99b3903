from __future__ import annotations

"""Registry of outstanding calls keyed by correlation id."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from .errors import NavdataError
from .logs import getLogger

logger = getLogger(__name__)


class RemoteError(NavdataError):
    """The peer answered a call with ``status: Error``."""

    def __init__(self, data: Any, *, function: str | None = None) -> None:
        message = data if isinstance(data, str) else "Unknown error"
        super().__init__(message)
        self.data = data
        self.function = function


class DuplicateCallError(NavdataError):
    """A correlation id is already registered for an outstanding call."""
    pass


class CallLimitError(NavdataError):
    """The maximum number of outstanding calls has been reached."""
    pass


class CallTimeoutError(NavdataError, TimeoutError):
    """No result arrived before the call's deadline."""
    pass


class ClientClosedError(NavdataError):
    """The client was closed before or while the call was outstanding."""
    pass


@dataclass(slots=True)
class PendingCall:
    """
    One outstanding call.

    ``resolve`` and ``reject`` are no-ops once the future is done, which
    happens when the caller cancelled it or its deadline expired.
    """
    id: str
    future: asyncio.Future[Any]
    function: str | None = None
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)

    def resolve(self, value: Any) -> bool:
        self._stop_timer()
        if self.future.done():
            return False
        self.future.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        self._stop_timer()
        if self.future.done():
            return False
        self.future.set_exception(error)
        return True

    def _stop_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class PendingCallRegistry:
    """
    Map of correlation id → PendingCall.

    Every entry is removed before it is settled, so a call settles at most
    once no matter how many results carry its id.
    """

    def __init__(self, max_pending: int | None = None) -> None:
        if max_pending is not None and max_pending < 1:
            raise ValueError(f"max_pending must be >= 1, got {max_pending}")
        self._max_pending = max_pending
        self._calls: Dict[str, PendingCall] = {}

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, call_id: str, *, function: str | None = None) -> PendingCall:
        """
        Allocate a PendingCall for ``call_id``.

        Must run inside an event loop: the future is created on the
        running loop.

        Raises
        ------
        DuplicateCallError
            If ``call_id`` is already outstanding.
        CallLimitError
            If ``max_pending`` calls are already outstanding.
        """
        if call_id in self._calls:
            raise DuplicateCallError(f"Correlation id {call_id!r} is already outstanding")
        if self._max_pending is not None and len(self._calls) >= self._max_pending:
            raise CallLimitError(
                f"Too many outstanding calls ({len(self._calls)}/{self._max_pending}); "
                f"refusing {function or 'call'} id={call_id!r}"
            )

        loop = asyncio.get_running_loop()
        pending = PendingCall(id=call_id, future=loop.create_future(), function=function)
        self._calls[call_id] = pending
        logger.debug("Registered call id=%s function=%s (outstanding=%d)", call_id, function, len(self._calls))
        return pending

    # ------------------------------------------------------------------ #
    # Removal
    # ------------------------------------------------------------------ #

    def pop(self, call_id: str) -> PendingCall | None:
        return self._calls.pop(call_id, None)

    def discard(self, call_id: str) -> bool:
        """Forget ``call_id`` without settling it. Returns whether it was present."""
        pending = self._calls.pop(call_id, None)
        if pending is None:
            return False
        pending._stop_timer()
        return True

    def reject_all(self, make_error: Callable[[], BaseException]) -> int:
        """
        Settle every outstanding call with a fresh ``make_error()``; returns
        how many.
        """
        calls = list(self._calls.values())
        self._calls.clear()
        for pending in calls:
            pending.reject(make_error())
        return len(calls)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def ids(self) -> list[str]:
        return list(self._calls)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._calls

    def __len__(self) -> int:
        return len(self._calls)
