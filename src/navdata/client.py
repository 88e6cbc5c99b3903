from __future__ import annotations

"""
Correlated request/response client for the navigation-data peer.

Responsibilities:

- Own the pending-call registry, the event subscriptions and the
  readiness gate.
- Issue calls: mint a correlation id, register it, send the call
  envelope, hand back a future.
- Subscribe the response and event routers to the injected transport.

Calls are not gated by readiness. Callers that need the peer's state
should wait for ``on_ready`` / ``wait_ready`` first.
"""

import asyncio
import uuid
from typing import Any, Callable, Optional

from .codec import encode_call
from .config import AppSettings, get_settings
from .envelopes import EventName
from .logs import getLogger
from .readiness import ReadinessGate, ReadinessState, ReadyCallback
from .registry import (
    CallTimeoutError,
    ClientClosedError,
    PendingCall,
    PendingCallRegistry,
)
from .router import EventCallback, EventRouter, ResponseRouter
from .transports.base import Transport

logger = getLogger(__name__)

IdFactory = Callable[[], str]

# Sentinel: "use the configured default timeout".
_DEFAULT: Any = object()


def _new_call_id() -> str:
    return str(uuid.uuid4())


class NavdataClient:
    """
    Call functions inside the peer as if they were local awaitables.

    The transport is injected and shared; the client never owns it.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        settings: AppSettings | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        """
        Parameters
        ----------
        transport:
            Bus providing ``send(channel, payload)`` and
            ``subscribe(channel, handler)``.
        settings:
            Application settings; defaults to ``get_settings()``.
        id_factory:
            Callable minting correlation ids. Defaults to random UUIDs.
        """
        self._transport = transport
        self._settings = settings or get_settings()
        self._settings.channels.validate_distinct()
        self._id_factory = id_factory or _new_call_id
        self._closed = False

        self._registry = PendingCallRegistry(max_pending=self._settings.calls.max_pending)
        self._gate = ReadinessGate(EventName.HEARTBEAT)
        self._responses = ResponseRouter(self._registry)
        self._events = EventRouter(observers=[self._gate.observe])

        channels = self._settings.channels
        self._transport.subscribe(channels.result, self._responses.on_result)
        self._transport.subscribe(channels.event, self._events.on_event)

        logger.info(
            "NavdataClient created (call=%s result=%s event=%s timeout_s=%s max_pending=%s)",
            channels.call,
            channels.result,
            channels.event,
            self._settings.calls.timeout_s,
            self._settings.calls.max_pending,
        )

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def registry(self) -> PendingCallRegistry:
        return self._registry

    @property
    def pending_count(self) -> int:
        return len(self._registry)

    @property
    def readiness(self) -> ReadinessState:
        return self._gate.state

    @property
    def is_ready(self) -> bool:
        return self._gate.is_ready

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------ #
    # Calls
    # ------------------------------------------------------------------ #

    def call(
        self,
        function: str,
        data: Any = None,
        *,
        timeout: Optional[float] = _DEFAULT,
        call_id: str | None = None,
    ) -> asyncio.Future[Any]:
        """
        Send one call and return a future for its result.

        The call envelope is on the wire when this returns. The future
        resolves with the peer's ``data`` on success and fails with
        RemoteError on ``status: Error``.

        Parameters
        ----------
        timeout:
            Deadline in seconds. Omit to use ``settings.calls.timeout_s``;
            pass None to wait forever.
        call_id:
            Explicit correlation id; minted by the id factory otherwise.

        Raises
        ------
        ClientClosedError, DuplicateCallError, CallLimitError
            Immediately, without sending anything.
        """
        if self._closed:
            raise ClientClosedError(f"Client is closed; cannot call {function}")

        if timeout is _DEFAULT:
            timeout = self._settings.calls.timeout_s
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        call_id = call_id or self._id_factory()
        function = str(function)
        payload = encode_call(function, call_id, data)

        # Register before sending: a synchronous transport may answer
        # from inside send().
        pending = self._registry.register(call_id, function=function)
        try:
            self._transport.send(self._settings.channels.call, payload)
        except Exception:
            self._registry.discard(call_id)
            pending.future.cancel()
            logger.exception("Sending %s id=%s failed", function, call_id)
            raise

        logger.debug("Sent %s id=%s", function, call_id)

        if timeout is not None and not pending.future.done():
            loop = asyncio.get_running_loop()
            pending.timer = loop.call_later(timeout, self._expire, pending, timeout)

        pending.future.add_done_callback(lambda fut, cid=call_id: self._on_call_done(cid, fut))
        return pending.future

    async def request(
        self,
        function: str,
        data: Any = None,
        *,
        timeout: Optional[float] = _DEFAULT,
    ) -> Any:
        """Coroutine form of ``call``."""
        return await self.call(function, data, timeout=timeout)

    def _expire(self, pending: PendingCall, timeout: float) -> None:
        pending.timer = None
        if self._registry.pop(pending.id) is None:
            return
        logger.warning("Call %s id=%s timed out after %ss", pending.function, pending.id, timeout)
        pending.reject(
            CallTimeoutError(f"{pending.function} (id={pending.id}) got no result within {timeout}s")
        )

    def _on_call_done(self, call_id: str, future: asyncio.Future[Any]) -> None:
        if future.cancelled() and self._registry.discard(call_id):
            # The peer is not told; a late result is dropped as unmatched.
            logger.debug("Call id=%s cancelled by caller", call_id)

    # ------------------------------------------------------------------ #
    # Events and readiness
    # ------------------------------------------------------------------ #

    def on_event(self, event: str, callback: EventCallback) -> None:
        """Invoke ``callback(data)`` for every ``event`` the peer emits."""
        self._events.subscribe(event, callback)

    def on_ready(self, callback: ReadyCallback) -> None:
        """
        Invoke ``callback`` once when the first heartbeat arrives, or
        immediately if that already happened.
        """
        self._gate.on_ready(callback)

    async def wait_ready(self, timeout: Optional[float] = None) -> None:
        """Wait for the first heartbeat; raises TimeoutError after ``timeout`` seconds."""
        if timeout is None:
            await self._gate.wait()
        else:
            await asyncio.wait_for(self._gate.wait(), timeout)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        """
        Refuse new calls and fail the outstanding ones with ClientClosedError.

        The transport subscriptions stay installed (the bus has no
        unsubscribe); results arriving afterwards are discarded.
        """
        if self._closed:
            return
        self._closed = True
        count = self._registry.reject_all(lambda: ClientClosedError("Client closed with the call outstanding"))
        logger.info("NavdataClient closed (%d outstanding calls rejected)", count)

    async def __aenter__(self) -> "NavdataClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()
