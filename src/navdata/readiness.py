from __future__ import annotations

"""
One-shot readiness gate driven by the peer's heartbeat.

State machine:

    NOT_READY --(first heartbeat)--> READY_PENDING --(callback delivered)--> READY

READY is terminal. While NOT_READY a single deferred callback may be
registered with ``on_ready``; registering after READY invokes the callback
immediately instead of dropping it.
"""

import asyncio
from enum import IntEnum
from typing import Callable, Optional

from .envelopes import EventName
from .logs import getLogger

logger = getLogger(__name__)

ReadyCallback = Callable[[], None]


class ReadinessState(IntEnum):
    NOT_READY = 1
    READY_PENDING = 2
    READY = 3


class ReadinessGate:
    def __init__(self, heartbeat_event: str = EventName.HEARTBEAT) -> None:
        self._heartbeat_event = str(heartbeat_event)
        self._state = ReadinessState.NOT_READY
        self._callback: Optional[ReadyCallback] = None
        self._waiters: list[asyncio.Future[None]] = []

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is not ReadinessState.NOT_READY

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def on_ready(self, callback: ReadyCallback) -> None:
        """
        Register the callback to run when the peer first reports in.

        Only one deferred callback is held; a second registration before
        readiness replaces the first.
        """
        if self._state is ReadinessState.NOT_READY:
            if self._callback is not None:
                logger.warning("Replacing previously registered on_ready callback %r", self._callback)
            self._callback = callback
            return

        logger.debug("on_ready registered after readiness; invoking %r immediately", callback)
        self._invoke(callback)

    def observe(self, event: str) -> bool:
        """
        Feed one incoming event name to the gate.

        Returns True only for the heartbeat that opened the gate.
        """
        if event != self._heartbeat_event or self._state is not ReadinessState.NOT_READY:
            return False

        self._state = ReadinessState.READY_PENDING
        logger.info("Peer is ready (first %s received)", self._heartbeat_event)

        callback, self._callback = self._callback, None
        try:
            if callback is not None:
                self._invoke(callback)
        finally:
            self._state = ReadinessState.READY
            self._release_waiters()
        return True

    async def wait(self) -> None:
        """Block until the gate is open."""
        if self.is_ready:
            return
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _invoke(callback: ReadyCallback) -> None:
        try:
            callback()
        except Exception:
            logger.exception("on_ready callback %r raised", callback)

    def _release_waiters(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
