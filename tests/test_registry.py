from __future__ import annotations

import asyncio

import pytest

from navdata.registry import (
    CallLimitError,
    ClientClosedError,
    DuplicateCallError,
    PendingCallRegistry,
    RemoteError,
)


@pytest.mark.asyncio
async def test_register_then_resolve() -> None:
    registry = PendingCallRegistry()
    pending = registry.register("a", function="GetAirport")

    assert "a" in registry
    assert len(registry) == 1

    popped = registry.pop("a")
    assert popped is pending
    assert pending.resolve({"ident": "ESSA"})
    assert await pending.future == {"ident": "ESSA"}
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_settlement_is_exactly_once() -> None:
    registry = PendingCallRegistry()
    pending = registry.register("a")

    assert pending.resolve(1)
    assert not pending.resolve(2)
    assert not pending.reject(RuntimeError("late"))
    assert await pending.future == 1


@pytest.mark.asyncio
async def test_duplicate_id_is_rejected_loudly() -> None:
    registry = PendingCallRegistry()
    first = registry.register("same")

    with pytest.raises(DuplicateCallError):
        registry.register("same")

    # The original entry is untouched.
    assert registry.pop("same") is first
    assert not first.future.done()


@pytest.mark.asyncio
async def test_id_can_be_reused_after_settlement() -> None:
    registry = PendingCallRegistry()
    registry.pop(registry.register("a").id)
    assert registry.register("a").id == "a"


@pytest.mark.asyncio
async def test_max_pending_applies_backpressure() -> None:
    registry = PendingCallRegistry(max_pending=2)
    registry.register("a")
    registry.register("b")

    with pytest.raises(CallLimitError):
        registry.register("c")

    registry.discard("a")
    registry.register("c")
    assert sorted(registry.ids()) == ["b", "c"]


def test_max_pending_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PendingCallRegistry(max_pending=0)


@pytest.mark.asyncio
async def test_discard_does_not_settle() -> None:
    registry = PendingCallRegistry()
    pending = registry.register("a")

    assert registry.discard("a")
    assert not registry.discard("a")
    assert not pending.future.done()
    pending.future.cancel()


@pytest.mark.asyncio
async def test_reject_all() -> None:
    registry = PendingCallRegistry()
    futures = [registry.register(cid).future for cid in ("a", "b", "c")]

    assert registry.reject_all(lambda: ClientClosedError("closed")) == 3
    assert len(registry) == 0

    results = await asyncio.gather(*futures, return_exceptions=True)
    assert all(isinstance(r, ClientClosedError) for r in results)
    assert len({id(r) for r in results}) == 3


@pytest.mark.asyncio
async def test_cancelled_future_ignores_settlement() -> None:
    registry = PendingCallRegistry()
    pending = registry.register("a")
    pending.future.cancel()

    assert not pending.resolve("too late")
    assert pending.future.cancelled()


def test_remote_error_message() -> None:
    assert str(RemoteError("bad input")) == "bad input"

    err = RemoteError({"code": 7}, function="GetAirport")
    assert str(err) == "Unknown error"
    assert err.data == {"code": 7}
    assert err.function == "GetAirport"
