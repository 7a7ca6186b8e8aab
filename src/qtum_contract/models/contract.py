"""Contract-level results: decoded calls, shaped receipts and decoded log entries."""

from typing import Any, Awaitable, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from qtum_contract.models.rpc import (
    CallContractResult,
    LogEntry,
    ReceiptFields,
    TransactionInfo,
    TransactionLog,
)


class DecodedEvent(BaseModel):
    """Log entry matched to an ABI event.

    Attributes:
        type: Event name as declared in the ABI (e.g. "Transfer")
        args: Decoded event arguments keyed by parameter name
    """

    model_config = ConfigDict(frozen=True)

    recognized: Literal[True] = True
    type: str
    args: dict[str, Any] = Field(default_factory=dict)


class UnrecognizedEvent(BaseModel):
    """Marker for a log entry that matched no event in the ABI."""

    model_config = ConfigDict(frozen=True)

    recognized: Literal[False] = False
    reason: str = ""


LogEvent = DecodedEvent | UnrecognizedEvent


class ContractCallResult(CallContractResult):
    """`callcontract` result augmented with ABI-decoded outputs."""

    outputs: list[Any] = Field(default_factory=list)


class ContractSendReceipt(ReceiptFields):
    """Transaction receipt with logs decoded against the contract ABI.

    Attributes:
        logs: One decoded event (or UnrecognizedEvent) per raw log entry
        rawlogs: The node's original, undecoded log entries
    """

    logs: list[LogEvent] = Field(default_factory=list)
    rawlogs: list[TransactionLog] = Field(default_factory=list)


class ContractLogEntry(LogEntry):
    """`waitforlogs` entry paired with its decoded event."""

    event: LogEvent


class ContractLogs(BaseModel):
    """One page of decoded logs and the cursor to resume from."""

    entries: list[ContractLogEntry] = Field(default_factory=list)
    count: int = 0
    nextblock: int


ConfirmationHandler = Callable[[TransactionInfo, ContractSendReceipt], Awaitable[None] | None]


class ContractSendTx(TransactionInfo):
    """Submitted contract transaction that can be awaited to a confirmation depth.

    Example:
        tx = await contract.send("transfer", [to, 100])
        receipt = await tx.confirm(1)
    """

    method: str
    _confirm: Callable[..., Awaitable[ContractSendReceipt]] | None = PrivateAttr(default=None)

    def bind(self, confirm: Callable[..., Awaitable[ContractSendReceipt]]) -> "ContractSendTx":
        self._confirm = confirm
        return self

    async def confirm(
        self,
        confirmations: int | None = None,
        on_update: ConfirmationHandler | None = None,
        timeout: float | None = None,
    ) -> ContractSendReceipt:
        """Wait until the transaction is `confirmations` blocks deep.

        Not cancelable other than by cancelling the awaiting task.
        """
        if self._confirm is None:
            raise RuntimeError(f"Transaction {self.txid} is not bound to a contract")
        return await self._confirm(self, confirmations, on_update, timeout=timeout)
