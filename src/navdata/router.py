from __future__ import annotations

"""
Inbound routing for the two peer → client channels.

- ResponseRouter: demultiplexes result envelopes to their pending calls.
- EventRouter: fans named events out to subscribers.

Both are handlers for ``Transport.subscribe`` and never raise back into
the transport; malformed or unroutable payloads are logged and dropped.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List

from .codec import ProtocolError, decode_event, decode_result
from .logs import getLogger
from .registry import PendingCallRegistry, RemoteError

logger = getLogger(__name__)

EventCallback = Callable[[Any], None]
EventObserver = Callable[[str], Any]


class ResponseRouter:
    """Settle pending calls from payloads received on the result channel."""

    def __init__(self, registry: PendingCallRegistry) -> None:
        self._registry = registry
        self._unmatched = 0

    @property
    def unmatched(self) -> int:
        """Number of results discarded because no call was waiting for them."""
        return self._unmatched

    def on_result(self, payload: str) -> None:
        try:
            envelope = decode_result(payload)
        except ProtocolError as exc:
            self._on_protocol_error(exc)
            return

        pending = self._registry.pop(envelope.id)
        if pending is None:
            # Already settled, timed out, cancelled, or never ours.
            self._unmatched += 1
            logger.warning(
                "Discarding unmatched result id=%s status=%s",
                envelope.id,
                envelope.status,
            )
            return

        if envelope.ok:
            settled = pending.resolve(envelope.data)
        else:
            settled = pending.reject(RemoteError(envelope.data, function=pending.function))

        logger.debug(
            "Result id=%s function=%s status=%s settled=%s",
            envelope.id,
            pending.function,
            envelope.status,
            settled,
        )

    def _on_protocol_error(self, exc: ProtocolError) -> None:
        if exc.call_id is not None:
            pending = self._registry.pop(exc.call_id)
            if pending is not None:
                logger.warning("Rejecting call id=%s: %s", exc.call_id, exc)
                pending.reject(exc)
                return
        logger.warning("Dropping malformed result payload: %s (payload=%r)", exc, exc.payload)


@dataclass(slots=True)
class Subscription:
    event: str
    callback: EventCallback


class EventRouter:
    """
    Deliver events to every subscription for the event name, in
    subscription order.

    Observers see every decoded event name before subscribers do; the
    readiness gate is installed as one.
    """

    def __init__(self, observers: Iterable[EventObserver] = ()) -> None:
        self._observers: List[EventObserver] = list(observers)
        self._subscriptions: List[Subscription] = []

    def subscribe(self, event: str, callback: EventCallback) -> None:
        """Register ``callback`` for ``event``. Subscriptions are permanent."""
        self._subscriptions.append(Subscription(event=str(event), callback=callback))

    def subscriptions(self, event: str | None = None) -> list[Subscription]:
        if event is None:
            return list(self._subscriptions)
        return [s for s in self._subscriptions if s.event == event]

    def on_event(self, payload: str) -> int:
        """Route one event payload; returns the number of callbacks that ran cleanly."""
        try:
            envelope = decode_event(payload)
        except ProtocolError as exc:
            logger.warning("Dropping malformed event payload: %s (payload=%r)", exc, exc.payload)
            return 0

        for observer in self._observers:
            try:
                observer(envelope.event)
            except Exception:
                logger.exception("Event observer %r raised for event=%s", observer, envelope.event)

        # Snapshot: a callback may subscribe further callbacks.
        matching = [s for s in self._subscriptions if s.event == envelope.event]
        if not matching:
            logger.debug("No subscribers for event=%s", envelope.event)
            return 0

        delivered = 0
        for subscription in matching:
            try:
                subscription.callback(envelope.data)
            except Exception:
                logger.exception(
                    "Event callback %r raised for event=%s",
                    subscription.callback,
                    envelope.event,
                )
            else:
                delivered += 1
        return delivered

