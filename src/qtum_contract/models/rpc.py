"""Records exchanged with the qtumd JSON-RPC interface.

Field names are snake_case in Python and camelCase on the wire. Unknown fields
returned by the node are kept (extra="allow") so that nothing the node reports
is lost when results are augmented and passed back to callers.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BlockTag = int | Literal["latest"]


class QtumModel(BaseModel):
    """Base model for node records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_rpc(self) -> dict[str, Any]:
        """Serialize with wire names, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ExecutionResult(QtumModel):
    """VM execution result of `callcontract`."""

    gas_used: int = 0
    excepted: str = "None"
    new_address: str | None = None
    output: str = ""
    code_deposit: int | None = None
    gas_refunded: int | None = None
    deposit_size: int | None = None
    gas_for_deposit: int | None = None
    excepted_message: str | None = None


class CallContractResult(QtumModel):
    """Result of `callcontract`."""

    address: str
    execution_result: ExecutionResult
    transaction_receipt: dict[str, Any] | None = None


class SendToContractResult(QtumModel):
    """Result of `sendtocontract`."""

    txid: str
    sender: str | None = None
    hash160: str | None = None


class TransactionInfo(QtumModel):
    """Wallet transaction record returned by `gettransaction`."""

    txid: str
    confirmations: int = 0
    amount: float | None = None
    fee: float | None = None
    blockhash: str | None = None
    blockindex: int | None = None
    blocktime: int | None = None
    time: int | None = None
    timereceived: int | None = None
    details: list[dict[str, Any]] = Field(default_factory=list)
    hex: str | None = None


class TransactionLog(QtumModel):
    """Raw log entry emitted during contract execution."""

    address: str
    topics: list[str] = Field(default_factory=list)
    data: str = ""


class ReceiptFields(QtumModel):
    """Fields shared by node receipts and receipts with decoded logs."""

    block_hash: str
    block_number: int
    transaction_hash: str
    transaction_index: int
    sender: str | None = Field(default=None, alias="from")
    to: str | None = None
    cumulative_gas_used: int | None = None
    gas_used: int | None = None
    contract_address: str | None = None
    excepted: str | None = None


class TransactionReceipt(ReceiptFields):
    """One element of `gettransactionreceipt`."""

    log: list[TransactionLog] = Field(default_factory=list)


class LogEntry(QtumModel):
    """Flattened log entry returned by `waitforlogs`.

    Qtum repeats the receipt coordinates on every entry.
    """

    block_hash: str | None = None
    block_number: int | None = None
    transaction_hash: str | None = None
    transaction_index: int | None = None
    sender: str | None = Field(default=None, alias="from")
    to: str | None = None
    cumulative_gas_used: int | None = None
    gas_used: int | None = None
    contract_address: str | None = None
    address: str | None = None
    topics: list[str] = Field(default_factory=list)
    data: str = ""


class LogFilter(QtumModel):
    """`waitforlogs` filter. A None topic matches anything at that position."""

    addresses: list[str] | None = None
    topics: list[str | None] | None = None


class WaitForLogsRequest(QtumModel):
    """Parameters of one `waitforlogs` long poll."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True
    )

    from_block: BlockTag | None = Field(default=None, alias="from")
    to_block: BlockTag | None = Field(default=None, alias="to")
    filter: LogFilter | None = None
    minconf: int | None = None


class WaitForLogsResult(QtumModel):
    """Result of `waitforlogs`; `nextblock` is where the next poll resumes."""

    entries: list[LogEntry] = Field(default_factory=list)
    count: int = 0
    nextblock: int
