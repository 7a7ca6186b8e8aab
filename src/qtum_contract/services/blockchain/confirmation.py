"""Transaction confirmation tracking.

A submitted transaction moves through:

    submitted -> polling -> confirmed
                        \\-> failed   (transport error or timeout)

The waiter polls `gettransaction` and, once the transaction is mined,
`gettransactionreceipt`. Update handlers fire each time the observed
confirmation count changes, always before `confirm()` returns.
"""

import asyncio
import inspect
from enum import Enum
from typing import Awaitable, Callable

import structlog

from qtum_contract.models.rpc import TransactionInfo, TransactionReceipt
from qtum_contract.services.exceptions import ContractError, TransactionTimeoutError
from qtum_contract.services.rpc.qtum_rpc import QtumRPC

logger = structlog.get_logger()

ReceiptHandler = Callable[[TransactionInfo, TransactionReceipt], Awaitable[None] | None]


class ConfirmationState(str, Enum):
    """Confirmation lifecycle states."""

    SUBMITTED = "submitted"
    POLLING = "polling"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class TxReceiptWaiter:
    """Wait for a transaction receipt to reach a confirmation depth.

    Cancelling the task awaiting `confirm()` stops polling at the next
    suspension point (an RPC call or the poll sleep). There is no other
    way to abandon a wait.
    """

    def __init__(self, rpc: QtumRPC, txid: str, poll_interval: float = 3.0):
        """
        Args:
            rpc: Node transport
            txid: Transaction id returned by sendtocontract
            poll_interval: Seconds between polls
        """
        self.rpc = rpc
        self.txid = txid
        self.poll_interval = poll_interval
        self.state = ConfirmationState.SUBMITTED
        self._handlers: list[ReceiptHandler] = []

    def on_confirm(self, handler: ReceiptHandler) -> None:
        """Register a handler called with (tx, receipt) on every confirmation change."""
        self._handlers.append(handler)

    async def confirm(
        self,
        confirmations: int = 6,
        timeout: float | None = None,
    ) -> tuple[TransactionInfo, TransactionReceipt]:
        """Poll until the transaction is `confirmations` blocks deep.

        Returns:
            Tuple of (transaction, receipt) at the final observed depth

        Raises:
            ValueError: confirmations < 1
            TransactionTimeoutError: `timeout` seconds elapsed first
            TransportFailure: Node transport failed (not retried)
        """
        if confirmations < 1:
            raise ValueError("confirmations must be >= 1")

        self.state = ConfirmationState.POLLING
        logger.debug(
            "confirmation.polling",
            txid=self.txid,
            confirmations=confirmations,
            poll_interval=self.poll_interval,
        )

        try:
            if timeout is None:
                return await self._poll(confirmations)
            async with asyncio.timeout(timeout):
                return await self._poll(confirmations)
        except TimeoutError as e:
            self.state = ConfirmationState.FAILED
            logger.warning("confirmation.timeout", txid=self.txid, timeout=timeout)
            raise TransactionTimeoutError(
                f"Transaction {self.txid} not confirmed {confirmations} deep within {timeout}s"
            ) from e
        except ContractError:
            self.state = ConfirmationState.FAILED
            raise

    async def _poll(self, confirmations: int) -> tuple[TransactionInfo, TransactionReceipt]:
        last_seen: int | None = None

        while True:
            tx = await self.rpc.get_transaction(self.txid)

            receipt = None
            if tx.confirmations > 0:
                receipts = await self.rpc.get_transaction_receipt(self.txid)
                receipt = receipts[0] if receipts else None

            if receipt is not None and tx.confirmations != last_seen:
                last_seen = tx.confirmations
                logger.debug(
                    "confirmation.update",
                    txid=self.txid,
                    confirmations=tx.confirmations,
                    block_number=receipt.block_number,
                )
                for handler in self._handlers:
                    result = handler(tx, receipt)
                    if inspect.isawaitable(result):
                        await result

                if tx.confirmations >= confirmations:
                    self.state = ConfirmationState.CONFIRMED
                    logger.info(
                        "confirmation.confirmed",
                        txid=self.txid,
                        confirmations=tx.confirmations,
                        block_number=receipt.block_number,
                    )
                    return tx, receipt

            await asyncio.sleep(self.poll_interval)
