"""Cursor-driven event log polling.

Each round long-polls `waitforlogs` from the current cursor, hands every
decoded entry to the handler in the order the node returned them, and only
then moves the cursor to the round's `nextblock`. Rounds never overlap, so a
slow handler slows the loop down instead of being re-entered.
"""

import asyncio
import inspect
from typing import Awaitable, Callable

import structlog

from qtum_contract.models.contract import ContractLogEntry, ContractLogs
from qtum_contract.models.rpc import BlockTag, WaitForLogsRequest

logger = structlog.get_logger()

LogHandler = Callable[[ContractLogEntry], Awaitable[None] | None]
FetchLogs = Callable[[WaitForLogsRequest], Awaitable[ContractLogs]]


class LogPoller:
    """Unbounded polling loop over a single in-memory cursor.

    Attributes:
        cursor: Block to poll from next ("latest" until the node reports one)
        rounds: Completed rounds
        delivered: Entries handed to the handler so far
    """

    def __init__(
        self,
        fetch: FetchLogs,
        handler: LogHandler,
        request: WaitForLogsRequest | None = None,
    ):
        self._fetch = fetch
        self._handler = handler
        self.request = request or WaitForLogsRequest()
        self.cursor: BlockTag = (
            self.request.from_block if self.request.from_block is not None else "latest"
        )
        self.rounds = 0
        self.delivered = 0

    async def run_round(self) -> int:
        """Run one fetch-deliver-advance round. Returns the number of entries delivered."""
        result = await self._fetch(self.request.model_copy(update={"from_block": self.cursor}))

        for entry in result.entries:
            outcome = self._handler(entry)
            if inspect.isawaitable(outcome):
                await outcome
            self.delivered += 1

        logger.debug(
            "log_poller.round",
            cursor=self.cursor,
            nextblock=result.nextblock,
            count=len(result.entries),
        )
        self.cursor = result.nextblock
        self.rounds += 1
        return len(result.entries)

    async def run(self) -> None:
        """Poll forever. Ends only by cancellation or by an exception."""
        while True:
            await self.run_round()


class LogSubscription:
    """Handle to a LogPoller running as an asyncio task.

    Example:
        subscription = contract.on_log(print, WaitForLogsRequest(minconf=1))
        ...
        await subscription.aclose()
    """

    def __init__(self, poller: LogPoller):
        self.poller = poller
        self._task: asyncio.Task | None = None

    def start(self) -> "LogSubscription":
        """Schedule the loop on the running event loop."""
        if self._task is not None:
            raise RuntimeError("Log subscription already started")
        self._task = asyncio.create_task(self._run(), name="log_poller")
        return self

    async def _run(self) -> None:
        logger.info("log_poller.started", cursor=self.poller.cursor)
        try:
            await self.poller.run()
        except asyncio.CancelledError:
            logger.info(
                "log_poller.stopped",
                cursor=self.poller.cursor,
                rounds=self.poller.rounds,
                delivered=self.poller.delivered,
            )
            raise
        except Exception as e:
            logger.error(
                "log_poller.failed",
                error_type=type(e).__name__,
                error_message=str(e),
                cursor=self.poller.cursor,
                rounds=self.poller.rounds,
            )
            raise

    @property
    def cursor(self) -> BlockTag:
        return self.poller.cursor

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        """Request the loop to stop; an in-flight long poll is interrupted."""
        if self._task is not None:
            self._task.cancel()

    async def wait(self) -> None:
        """Wait for the loop to end.

        Returns normally if the loop was stopped with `cancel()`; re-raises the
        transport or handler error that stopped it otherwise. Cancelling the
        task awaiting `wait()` also stops the loop and propagates to the caller.
        """
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                # the caller itself is being cancelled
                raise
            if self._task.cancelled():
                return
            raise

    async def aclose(self) -> None:
        self.cancel()
        await self.wait()

    async def __aenter__(self) -> "LogSubscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
