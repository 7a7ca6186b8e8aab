"""Log emitter tests - routing by event name, catch-all channel, listener isolation."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import log_entry_wire, mint_log, transfer_log, unknown_log

from qtum_contract.contract import Contract
from qtum_contract.models.contract import ContractLogEntry, DecodedEvent, UnrecognizedEvent
from qtum_contract.models.rpc import WaitForLogsRequest, WaitForLogsResult
from qtum_contract.services.blockchain.emitter import CATCH_ALL, LogEmitter, routing_key
from qtum_contract.services.blockchain.log_poller import LogSubscription


def entry(log: dict, event: DecodedEvent | UnrecognizedEvent) -> ContractLogEntry:
    return ContractLogEntry.model_validate({**log_entry_wire(log), "event": event})


TRANSFER = entry(transfer_log(), DecodedEvent(type="Transfer", args={"value": 100}))
MINT = entry(mint_log(), DecodedEvent(type="Mint", args={"amount": 1000}))
UNKNOWN = entry(unknown_log(), UnrecognizedEvent(reason="no event for topic"))


def test_routing_key():
    assert routing_key(TRANSFER) == "Transfer"
    assert routing_key(MINT) == "Mint"
    assert routing_key(UNKNOWN) == CATCH_ALL == "?"


def test_publish_reaches_only_matching_channel():
    emitter = LogEmitter()
    transfers, mints, unknown = [], [], []
    emitter.on("Transfer", transfers.append)
    emitter.on("Mint", mints.append)
    emitter.on(CATCH_ALL, unknown.append)

    emitter.publish(TRANSFER)
    emitter.publish(UNKNOWN)

    assert transfers == [TRANSFER]
    assert mints == []
    assert unknown == [UNKNOWN]


def test_publish_without_listeners_is_noop():
    emitter = LogEmitter()

    assert emitter.publish(TRANSFER) is False
    assert emitter.listener_count("Transfer") == 0


def test_decorator_and_off():
    emitter = LogEmitter()
    seen = []

    @emitter.on("Mint")
    def on_mint(e):
        seen.append(e.event.args["amount"])

    assert emitter.publish(MINT) is True
    emitter.off("Mint", on_mint)
    assert emitter.publish(MINT) is False
    # removing an unknown listener is harmless
    emitter.off("Mint", on_mint)

    assert seen == [1000]


def test_failing_listener_does_not_stop_others():
    emitter = LogEmitter()
    seen = []

    def broken(e):
        raise RuntimeError("listener bug")

    emitter.on("Transfer", broken)
    emitter.on("Transfer", seen.append)

    assert emitter.publish(TRANSFER) is True
    assert seen == [TRANSFER]


@pytest.mark.asyncio
async def test_async_listener_scheduled_and_failure_isolated():
    emitter = LogEmitter()
    seen = []

    async def slow(e):
        await asyncio.sleep(0)
        seen.append(e)

    async def broken(e):
        raise RuntimeError("async listener bug")

    emitter.on("Transfer", slow)
    emitter.on("Transfer", broken)

    assert emitter.publish(TRANSFER) is True
    assert seen == []  # not awaited by publish

    for _ in range(5):
        await asyncio.sleep(0)

    assert seen == [TRANSFER]
    assert not emitter._pending


@pytest.mark.asyncio
async def test_contract_log_emitter_routes_polled_logs(contract: Contract, rpc: AsyncMock):
    first_page = WaitForLogsResult.model_validate(
        {
            "entries": [
                log_entry_wire(transfer_log()),
                log_entry_wire(unknown_log()),
                log_entry_wire(mint_log()),
            ],
            "count": 3,
            "nextblock": 101,
        }
    )
    done = asyncio.Event()

    async def wait_for_logs(request: WaitForLogsRequest) -> WaitForLogsResult:
        if request.from_block == 100:
            return first_page
        await asyncio.Event().wait()
        raise AssertionError("unreachable")

    rpc.wait_for_logs.side_effect = wait_for_logs
    transfers, unknown = [], []

    emitter = contract.log_emitter(WaitForLogsRequest(from_block=100))
    assert isinstance(emitter.subscription, LogSubscription)
    assert emitter.subscription.running
    emitter.on("Transfer", transfers.append)
    emitter.on(CATCH_ALL, unknown.append)
    emitter.on("Mint", lambda e: done.set())

    await asyncio.wait_for(done.wait(), timeout=1)
    await emitter.subscription.aclose()

    assert [e.event.type for e in transfers] == ["Transfer"]
    assert len(unknown) == 1
    assert not unknown[0].event.recognized
