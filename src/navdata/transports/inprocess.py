from __future__ import annotations

"""In-process bus that connects a client and a peer living in the same process."""

import asyncio
from collections import defaultdict, deque
from typing import DefaultDict, Deque, List

from ..logs import getLogger
from .base import PayloadHandler, Transport

logger = getLogger(__name__)


class InProcessBus(Transport):
    """
    Deliver every ``send`` to the handlers subscribed on the same channel.

    With ``deferred=False`` (default) handlers run synchronously inside
    ``send``. With ``deferred=True`` each delivery is scheduled on the
    running event loop, which models a peer that answers asynchronously.

    ``history`` keeps the last N ``(channel, payload)`` pairs in ``sent``;
    nothing is kept by default.
    """

    def __init__(self, *, deferred: bool = False, history: int = 0) -> None:
        if history < 0:
            raise ValueError(f"history must be >= 0, got {history}")
        self._deferred = deferred
        self._handlers: DefaultDict[str, List[PayloadHandler]] = defaultdict(list)
        self.sent: Deque[tuple[str, str]] = deque(maxlen=history)

    def subscribe(self, channel: str, handler: PayloadHandler) -> None:
        self._handlers[channel].append(handler)

    def send(self, channel: str, payload: str) -> None:
        if self.sent.maxlen:
            self.sent.append((channel, payload))
        handlers = list(self._handlers.get(channel, ()))
        if not handlers:
            logger.debug("InProcessBus: no handler on channel=%s; message dropped", channel)
            return

        if self._deferred:
            loop = asyncio.get_running_loop()
            for handler in handlers:
                loop.call_soon(self._dispatch, channel, handler, payload)
        else:
            for handler in handlers:
                self._dispatch(channel, handler, payload)

    @staticmethod
    def _dispatch(channel: str, handler: PayloadHandler, payload: str) -> None:
        try:
            handler(payload)
        except Exception:
            # A failing receiver must not break the sender.
            logger.exception("InProcessBus: handler %r failed on channel=%s", handler, channel)
