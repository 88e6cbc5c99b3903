from __future__ import annotations

"""JSON encoding of the envelopes exchanged with the peer.

One message is one JSON document. The codec only checks envelope shape;
``data`` is passed through untouched.
"""

import json
from typing import Any

from .envelopes import CallEnvelope, EventEnvelope, ResultEnvelope, ResultStatus
from .errors import NavdataError


class ProtocolError(NavdataError):
    """A payload did not parse as the expected envelope."""

    def __init__(self, message: str, *, call_id: str | None = None, payload: str | None = None) -> None:
        super().__init__(message)
        # Set when the payload still names a correlation id, so the caller
        # can fail that specific call instead of dropping the message.
        self.call_id = call_id
        self.payload = payload


def encode_call(function: str, call_id: str, data: Any = None) -> str:
    return dumps(CallEnvelope(function=str(function), id=call_id, data=data))


def dumps(envelope: CallEnvelope) -> str:
    obj = {"function": envelope.function, "id": envelope.id, "data": envelope.data}
    try:
        return json.dumps(obj, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise ProtocolError(
            f"Cannot encode data for {envelope.function!r}: {exc}", call_id=envelope.id
        ) from exc


def decode_result(payload: str) -> ResultEnvelope:
    obj = _load_object(payload, "result")

    call_id = obj.get("id")
    if not isinstance(call_id, str):
        raise ProtocolError("Result envelope has no string 'id'", payload=payload)

    try:
        status = ResultStatus(obj.get("status"))
    except ValueError as exc:
        raise ProtocolError(
            f"Result envelope has invalid status {obj.get('status')!r}",
            call_id=call_id,
            payload=payload,
        ) from exc

    return ResultEnvelope(id=call_id, status=status, data=obj.get("data"))


def decode_event(payload: str) -> EventEnvelope:
    obj = _load_object(payload, "event")

    event = obj.get("event")
    if not isinstance(event, str):
        raise ProtocolError("Event envelope has no string 'event'", payload=payload)

    return EventEnvelope(event=event, data=obj.get("data"))


def decode_call(payload: str) -> CallEnvelope:
    """Peer-side decoding; used by loopback peers and tests."""
    obj = _load_object(payload, "call")

    function = obj.get("function")
    call_id = obj.get("id")
    if not isinstance(call_id, str):
        raise ProtocolError("Call envelope has no string 'id'", payload=payload)
    if not isinstance(function, str):
        raise ProtocolError("Call envelope has no string 'function'", call_id=call_id, payload=payload)

    return CallEnvelope(function=function, id=call_id, data=obj.get("data"))


def encode_result(envelope: ResultEnvelope) -> str:
    return json.dumps(
        {"id": envelope.id, "status": str(envelope.status), "data": envelope.data},
        separators=(",", ":"),
    )


def encode_event(envelope: EventEnvelope) -> str:
    return json.dumps({"event": envelope.event, "data": envelope.data}, separators=(",", ":"))


def _load_object(payload: str, kind: str) -> dict[str, Any]:
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError(f"{kind} payload is not valid UTF-8") from exc

    if not isinstance(payload, str):
        raise ProtocolError(f"{kind} payload must be a string, got {type(payload).__name__}")

    # The host bus may hand over C strings with their terminator attached.
    text = payload.rstrip("\x00")
    try:
        obj = json.loads(text)
    except ValueError as exc:
        raise ProtocolError(f"{kind} payload is not valid JSON: {exc}", payload=payload) from exc

    if not isinstance(obj, dict):
        raise ProtocolError(
            f"{kind} payload must be a JSON object, got {type(obj).__name__}", payload=payload
        )
    return obj
