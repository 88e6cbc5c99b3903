from __future__ import annotations

"""Transport protocol for the host message bus."""

from typing import Callable, Protocol, runtime_checkable

PayloadHandler = Callable[[str], None]


@runtime_checkable
class Transport(Protocol):
    """
    Protocol for a named-channel string bus.

    ``send`` is fire-and-forget and returns immediately; delivery is
    at-most-once with no ordering across channels.
    """

    def send(self, channel: str, payload: str) -> None:
        """Send ``payload`` on ``channel``."""

    def subscribe(self, channel: str, handler: PayloadHandler) -> None:
        """Invoke ``handler(payload)`` for every message received on ``channel``."""
