"""In-process publish/subscribe for decoded log entries.

Entries are published on a channel named after the decoded event type
("Transfer", "Mint", ...). Entries that did not match any ABI event go to the
catch-all channel "?".
"""

import asyncio
import inspect
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable

import structlog

from qtum_contract.models.contract import ContractLogEntry, DecodedEvent

if TYPE_CHECKING:
    from qtum_contract.services.blockchain.log_poller import LogSubscription

logger = structlog.get_logger()

CATCH_ALL = "?"

Listener = Callable[[ContractLogEntry], Any]


def routing_key(entry: ContractLogEntry) -> str:
    """Channel an entry is published on."""
    if isinstance(entry.event, DecodedEvent):
        return entry.event.type
    return CATCH_ALL


class LogEmitter:
    """Name-keyed listener registry with fire-and-forget publish.

    Listener errors are logged and never reach the publisher. Coroutine
    listeners are scheduled as tasks and not awaited.

    Example:
        logs = contract.log_emitter(WaitForLogsRequest(minconf=1))

        @logs.on("Transfer")
        def on_transfer(entry):
            ...
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._pending: set[asyncio.Task] = set()
        # Set by Contract.log_emitter to the subscription feeding this emitter
        self.subscription: "LogSubscription | None" = None

    def on(self, key: str, listener: Listener | None = None) -> Any:
        """Subscribe `listener` to `key`. Without a listener, returns a decorator."""
        if listener is None:

            def decorator(fn: Listener) -> Listener:
                self._listeners[key].append(fn)
                return fn

            return decorator

        self._listeners[key].append(listener)
        return listener

    def off(self, key: str, listener: Listener) -> None:
        listeners = self._listeners.get(key)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, key: str) -> int:
        return len(self._listeners.get(key, ()))

    def emit(self, key: str, entry: ContractLogEntry) -> bool:
        """Deliver `entry` to every listener of `key`.

        Returns:
            True if the channel had listeners. A channel without listeners is a no-op.
        """
        listeners = list(self._listeners.get(key, ()))
        for listener in listeners:
            try:
                result = listener(entry)
            except Exception as e:
                logger.error(
                    "log_emitter.listener_error",
                    key=key,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._on_listener_done)
        return bool(listeners)

    def publish(self, entry: ContractLogEntry) -> bool:
        """Emit `entry` on the channel named after its event type."""
        return self.emit(routing_key(entry), entry)

    def _on_listener_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "log_emitter.listener_error",
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
