"""Contract - ABI-aware client for one deployed Qtum contract."""

import inspect
from collections.abc import Mapping, Sequence
from functools import cached_property
from typing import Any

import structlog

from qtum_contract.abi.codec import ContractLogDecoder, decode_outputs, encode_inputs
from qtum_contract.abi.method_index import MethodIndex
from qtum_contract.core.config import Settings
from qtum_contract.models.contract import (
    ConfirmationHandler,
    ContractCallResult,
    ContractLogEntry,
    ContractLogs,
    ContractSendReceipt,
    ContractSendTx,
)
from qtum_contract.models.contract_info import ContractInfo
from qtum_contract.models.rpc import (
    CallContractResult,
    LogFilter,
    SendToContractResult,
    TransactionInfo,
    TransactionReceipt,
    WaitForLogsRequest,
)
from qtum_contract.services.blockchain.confirmation import TxReceiptWaiter
from qtum_contract.services.blockchain.emitter import LogEmitter
from qtum_contract.services.blockchain.log_poller import LogHandler, LogPoller, LogSubscription
from qtum_contract.services.blockchain.receipts import shape_receipt
from qtum_contract.services.exceptions import ExecutionRevertedError
from qtum_contract.services.rpc.qtum_rpc import QtumRPC

logger = structlog.get_logger()

NO_EXCEPTION = "None"


class Contract:
    """Call, send and watch logs of a deployed contract.

    Read-only calls go through `callcontract`; state-changing calls create a
    transaction with `sendtocontract`. Methods flagged constant in the ABI
    can be called but never sent.
    """

    def __init__(
        self,
        rpc: QtumRPC,
        info: ContractInfo | Mapping[str, Any],
        default_confirmations: int = 6,
        confirmation_poll_interval: float = 3.0,
    ):
        """
        Args:
            rpc: Node transport
            info: Contract ABI, address and optional default sender
            default_confirmations: Depth `confirm` waits for when none is given
            confirmation_poll_interval: Seconds between confirmation polls

        Raises:
            AbiDefinitionError: The ABI declares two methods with the same name
        """
        if default_confirmations < 1:
            raise ValueError("default_confirmations must be >= 1")

        self.rpc = rpc
        self.info = info if isinstance(info, ContractInfo) else ContractInfo.model_validate(info)
        self.address = self.info.address
        self.methods = MethodIndex(self.info.abi)
        self.default_confirmations = default_confirmations
        self.confirmation_poll_interval = confirmation_poll_interval

    @classmethod
    def from_settings(
        cls, rpc: QtumRPC, info: ContractInfo | Mapping[str, Any], settings: Settings
    ) -> "Contract":
        if not isinstance(info, ContractInfo):
            info = ContractInfo.model_validate(info)
        if info.sender is None and settings.qtum_sender_address:
            info = info.model_copy(update={"sender": settings.qtum_sender_address})
        return cls(
            rpc,
            info,
            default_confirmations=settings.default_confirmations,
            confirmation_poll_interval=settings.confirmation_poll_interval_seconds,
        )

    @cached_property
    def log_decoder(self) -> ContractLogDecoder:
        return ContractLogDecoder(self.info.abi)

    def _sender(self, sender_address: str | None) -> str | None:
        return sender_address or self.info.sender

    def encode_params(self, method: str, args: Sequence[Any] = ()) -> str:
        """ABI-encode a call to `method` as hex call data.

        Raises:
            UnknownMethodError: `method` is not in the ABI
        """
        return encode_inputs(self.methods.for_call(method), args)

    async def raw_call(
        self,
        method: str,
        args: Sequence[Any] = (),
        *,
        sender_address: str | None = None,
    ) -> CallContractResult:
        """Call a method without creating a transaction and return the RPC result as is.

        Useful for gas estimation or reading constant methods.
        """
        calldata = self.encode_params(method, args)
        return await self.rpc.call_contract(
            address=self.address,
            datahex=calldata,
            sender_address=self._sender(sender_address),
        )

    async def call(
        self,
        method: str,
        args: Sequence[Any] = (),
        *,
        sender_address: str | None = None,
    ) -> ContractCallResult:
        """Call a method and decode its return values into `outputs`.

        Raises:
            UnknownMethodError: `method` is not in the ABI
            ExecutionRevertedError: The VM reported an exception
        """
        result = await self.raw_call(method, args, sender_address=sender_address)

        exception = result.execution_result.excepted
        if exception != NO_EXCEPTION:
            logger.debug("contract.call_excepted", method=method, excepted=exception)
            raise ExecutionRevertedError(exception)

        output = result.execution_result.output
        outputs: list[Any] = []
        if output != "":
            outputs = decode_outputs(self.methods.for_call(method), output)

        return ContractCallResult.model_validate(
            {**result.model_dump(by_alias=True), "outputs": outputs}
        )

    async def raw_send(
        self,
        method: str,
        args: Sequence[Any] = (),
        *,
        amount: float | str | None = None,
        gas_limit: int | None = None,
        gas_price: float | str | None = None,
        sender_address: str | None = None,
    ) -> SendToContractResult:
        """Create a transaction calling `method` and return the RPC result as is.

        Raises:
            UnknownMethodError: `method` is unknown or constant
        """
        method_abi = self.methods.for_send(method)
        calldata = encode_inputs(method_abi, args)

        sent = await self.rpc.send_to_contract(
            address=self.address,
            datahex=calldata,
            amount=amount if amount is not None else 0,
            gas_limit=gas_limit,
            gas_price=gas_price,
            sender_address=self._sender(sender_address),
        )
        logger.info(
            "contract.send_submitted",
            method=method,
            txid=sent.txid,
            address=self.address,
        )
        return sent

    async def send(
        self,
        method: str,
        args: Sequence[Any] = (),
        *,
        amount: float | str | None = None,
        gas_limit: int | None = None,
        gas_price: float | str | None = None,
        sender_address: str | None = None,
    ) -> ContractSendTx:
        """Send a transaction and return it with a bound `confirm()`.

        Example:
            tx = await token.send("mint", [owner, 1000])
            receipt = await tx.confirm(1)
        """
        sent = await self.raw_send(
            method,
            args,
            amount=amount,
            gas_limit=gas_limit,
            gas_price=gas_price,
            sender_address=sender_address,
        )
        txinfo = await self.rpc.get_transaction(sent.txid)

        send_tx = ContractSendTx.model_validate(
            {**txinfo.model_dump(by_alias=True), "method": method}
        )
        return send_tx.bind(self.confirm)

    async def confirm(
        self,
        tx: TransactionInfo | SendToContractResult | str,
        confirmations: int | None = None,
        on_update: ConfirmationHandler | None = None,
        timeout: float | None = None,
    ) -> ContractSendReceipt:
        """Wait until `tx` is `confirmations` deep and return its receipt with decoded logs.

        `on_update` gets (tx, receipt) every time the confirmation count
        changes, with the receipt already shaped. The wait can only be
        abandoned by cancelling the awaiting task.
        """
        txid = tx if isinstance(tx, str) else tx.txid
        waiter = TxReceiptWaiter(self.rpc, txid, poll_interval=self.confirmation_poll_interval)

        if on_update is not None:

            async def shaped_update(tx2: TransactionInfo, receipt: TransactionReceipt) -> None:
                result = on_update(tx2, shape_receipt(receipt, self.log_decoder))
                if inspect.isawaitable(result):
                    await result

            waiter.on_confirm(shaped_update)

        _, receipt = await waiter.confirm(
            confirmations if confirmations is not None else self.default_confirmations,
            timeout=timeout,
        )
        return shape_receipt(receipt, self.log_decoder)

    async def logs(self, request: WaitForLogsRequest | None = None) -> ContractLogs:
        """Long-poll one page of logs and decode them against the ABI.

        Without explicit addresses the filter is restricted to this contract.
        """
        request = request or WaitForLogsRequest()
        log_filter = request.filter or LogFilter()
        if log_filter.addresses is None:
            log_filter = log_filter.model_copy(update={"addresses": [self.address]})

        result = await self.rpc.wait_for_logs(request.model_copy(update={"filter": log_filter}))

        entries = [
            ContractLogEntry.model_validate(
                {**entry.model_dump(by_alias=True), "event": self.log_decoder.decode_tolerant(entry)}
            )
            for entry in result.entries
        ]
        return ContractLogs(entries=entries, count=result.count, nextblock=result.nextblock)

    def on_log(
        self, handler: LogHandler, request: WaitForLogsRequest | None = None
    ) -> LogSubscription:
        """Deliver decoded logs to `handler` forever, starting at `request.from_block`.

        Must be called with a running event loop. Stop with
        `subscription.cancel()` or `await subscription.aclose()`.
        """
        poller = LogPoller(self.logs, handler, request)
        return LogSubscription(poller).start()

    def log_emitter(self, request: WaitForLogsRequest | None = None) -> LogEmitter:
        """Republish decoded logs by event name.

        Example:
            logs = token.log_emitter(WaitForLogsRequest(minconf=1))
            logs.on("Mint", handle_mint)
            logs.on("Transfer", handle_transfer)
            logs.on("?", handle_unknown)  # events not defined in the ABI
        """
        emitter = LogEmitter()
        emitter.subscription = self.on_log(emitter.publish, request)
        return emitter
